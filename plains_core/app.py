"""Plains driver that wires the core services, mounts workers and runs tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from plains_core.config import ConfigLoader, PlainsConfig
from plains_core.contractor import Contractor
from plains_core.errors import ConfigurationError
from plains_core.filesystem import Filesystem
from plains_core.store import Store
from plains_core.workers import DEFAULT_WORKERS, STORE_NAMESPACE, Worker, WorkerServices


@dataclass(frozen=True)
class PlainsStatus:
    src: Path
    dist: Path
    environment: str
    workers: Sequence[str]
    stacks: Mapping[str, int]
    tasks: Sequence[str]


class Plains:
    """Entry point that boots configuration, mounts workers and runs tasks."""

    def __init__(
        self,
        *,
        loader: ConfigLoader | None = None,
        workers: Sequence[type[Worker]] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger("plains_core.app")
        self.loader = loader or ConfigLoader()
        self.store = Store()
        self.filesystem = Filesystem()
        self.contractor = Contractor()
        self.services = WorkerServices(
            store=self.store,
            filesystem=self.filesystem,
            contractor=self.contractor,
        )
        self.workers: dict[str, Worker] = {}
        for worker_type in DEFAULT_WORKERS if workers is None else workers:
            if worker_type.name in self.workers:
                raise ConfigurationError(f"worker {worker_type.name} is registered twice")
            self.workers[worker_type.name] = worker_type(self.services)
        self.config: PlainsConfig | None = None

    def boot(self, config: PlainsConfig | None = None) -> PlainsConfig:
        """Expose the configuration, define the roots and mount every worker."""
        if self.config is not None:
            raise ConfigurationError("Plains has already been booted")
        config = config or self.loader.load()

        self.store.create(STORE_NAMESPACE, config)
        self.filesystem.define_root(config.src)
        self.filesystem.define_destination(config.dist)
        self.mount(self.workers)
        self.config = config
        return config

    def mount(self, workers: Mapping[str, Worker]) -> None:
        for name, worker in workers.items():
            self.logger.info("Mounting %s", name)
            worker.mount()

    async def run(self, task: str) -> None:
        """Run one task by name and wait until it resolves."""
        if self.config is None:
            raise ConfigurationError("Plains must be booted before running a task")
        await self.contractor.run(task)

    def status(self) -> PlainsStatus:
        if self.config is None:
            raise ConfigurationError("Plains must be booted before reporting its status")
        return PlainsStatus(
            src=self.filesystem.get_root(),
            dist=self.filesystem.get_destination(),
            environment=self.config.environment,
            workers=tuple(self.workers),
            stacks={name: len(self.filesystem.source(name)) for name in self.filesystem.stacks()},
            tasks=self.contractor.tasks(),
        )
