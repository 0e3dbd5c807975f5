"""Worker compiling Sass/SCSS entries into CSS resources."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import sass

from plains_core.config import SassCompilerConfig
from plains_core.contractor import TaskRun
from plains_core.errors import ProcessingError

from .base import Worker, WorkerServices

__all__ = ["CompileReport", "SassCompiler"]


@dataclass
class CompileReport:
    """Outcome of the latest ``sass`` task run."""

    compiled: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)


class SassCompiler(Worker):
    name = "sass_compiler"
    task_name = "sass"
    config_key = "sass_compiler"
    config_type = SassCompilerConfig
    stack_name = "sass_compiler"

    def __init__(self, services: WorkerServices) -> None:
        super().__init__(services)
        self.last_report = CompileReport()

    def create_stacks(self) -> None:
        self.services.filesystem.create_stack(self.stack_name)

    def populate_stacks(self) -> None:
        self.services.filesystem.insert_entry(self.stack_name, self.config.entry)

    async def handle(self, run: TaskRun) -> None:
        entries = self.services.filesystem.source(self.stack_name)
        if not entries:
            self.logger.warning("No Sass entries to compile for task %s", run.name)

        results = await asyncio.gather(
            *(self.process_entry(entry) for entry in entries),
            return_exceptions=True,
        )

        report = CompileReport()
        fatal: BaseException | None = None
        for entry, result in zip(entries, results):
            if isinstance(result, ProcessingError):
                self.logger.error("Unable to compile %s", result)
                report.failed.append(entry)
            elif isinstance(result, BaseException):
                report.failed.append(entry)
                fatal = fatal or result
            else:
                report.compiled.append(result)
        self.last_report = report

        if fatal is not None:
            raise fatal
        run.resolve()

    async def process_entry(self, entry: Path) -> Path:
        """Compile one entry and write it next to its mirrored destination."""
        self.logger.info("Compiling entry: %s", entry)
        return await asyncio.to_thread(self._build, entry)

    def _build(self, entry: Path) -> Path:
        css = self._compile(entry)
        return self.services.filesystem.write(entry, css, extension="css")

    def _compile(self, entry: Path) -> str:
        root = self.services.filesystem.get_root()
        include_paths = [str(root / path) for path in self.config.include_paths]
        try:
            return sass.compile(
                filename=str(entry),
                output_style=self.config.output_style,
                include_paths=include_paths,
                source_comments=self.config.source_comments,
            )
        except sass.CompileError as exc:
            raise ProcessingError(entry, str(exc).strip()) from exc
