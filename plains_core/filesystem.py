"""Entry registry that resolves worker source paths and mirrors written output."""

from __future__ import annotations

import glob
import logging
import os
import re
from pathlib import Path
from typing import Iterable, Union

from .errors import ConfigurationError, ResourceWriteError

__all__ = ["Filesystem", "EntryInput"]

EntryInput = Union[str, os.PathLike, Iterable[Union[str, os.PathLike]], None]

_GLOB_PATTERN = re.compile(r"[*?\[]")


def _normalize(path: Path) -> Path:
    return Path(os.path.normpath(path))


def _relative_to_root(path: Path, root: Path) -> Path | None:
    """Return ``path`` relative to the resolved ``root``, or None when outside.

    The parent directory is resolved as a fallback so entries reached through a
    symlinked directory map onto the same root. Symlinked files keep their name.
    """
    normalized = _normalize(path)
    candidates = (normalized, Path(os.path.realpath(normalized.parent)) / normalized.name)
    for candidate in candidates:
        try:
            return candidate.relative_to(root)
        except ValueError:
            continue
    return None


class Filesystem:
    """Own the named entry stacks and the source/destination roots.

    Every stack is an ordered list of absolute file paths without duplicates.
    Existence is checked again on every read, so files removed after they were
    registered never reach a worker.
    """

    def __init__(self) -> None:
        self._stacks: dict[str, list[Path]] = {}
        self._src: Path | None = None
        self._dist: Path | None = None
        self._logger = logging.getLogger(__name__)

    # ---------- Roots ----------

    def define_root(self, path: str | os.PathLike) -> Path:
        """Define the source root used to resolve relative and glob entries."""
        if self._src is not None:
            raise ConfigurationError(f"The source root is already defined as {self._src}")
        candidate = Path(path).expanduser()
        if not candidate.exists():
            raise ConfigurationError(f"The given root path does not exist: {path}")
        if not candidate.is_dir():
            raise ConfigurationError(f"The given root path is not a directory: {path}")
        self._src = candidate.resolve()
        self._logger.debug("source root defined: %s", self._src)
        return self._src

    def define_destination(self, path: str | os.PathLike) -> Path:
        """Define the directory processed entries are written to."""
        if self._dist is not None:
            raise ConfigurationError(f"The destination is already defined as {self._dist}")
        self._dist = Path(path).expanduser().resolve()
        self._logger.debug("destination defined: %s", self._dist)
        return self._dist

    def get_root(self) -> Path:
        if self._src is None:
            raise ConfigurationError("No root path has been defined for the Filesystem.")
        return self._src

    def get_destination(self) -> Path:
        if self._dist is None:
            raise ConfigurationError("No destination has been defined for the Filesystem.")
        return self._dist

    # ---------- Stacks ----------

    def has_stack(self, name: str | None) -> bool:
        return bool(name) and name in self._stacks

    def create_stack(self, name: str) -> None:
        """Create the named stack unless it already exists."""
        if not name:
            raise ConfigurationError("stack name cannot be empty")
        if self.has_stack(name):
            return
        self._stacks[name] = []

    def stacks(self) -> tuple[str, ...]:
        return tuple(self._stacks)

    def insert_entry(self, name: str, entries: EntryInput) -> list[Path]:
        """Resolve ``entries`` and merge the new paths into the named stack.

        Returns the updated stack when at least one new path was merged and an
        empty list otherwise, including when the stack was never created.
        """
        if not self.has_stack(name):
            self._logger.debug("ignoring entries for undefined stack %s", name)
            return []

        root = self.get_root()
        stack = self._stacks[name]
        present = set(stack)
        additions: list[Path] = []
        for raw in self._as_sequence(entries):
            for path in self._resolve_entry(raw):
                if path in present or not path.is_file():
                    continue
                if _relative_to_root(path, root) is None:
                    self._logger.warning("Ignoring entry outside of the source root %s: %s", root, path)
                    continue
                present.add(path)
                additions.append(path)

        if not additions:
            return []

        self._stacks[name] = additions + stack
        self._logger.debug("stack %s received %d new entries", name, len(additions))
        return self.source(name)

    def source(self, name: str | None = None) -> list[Path]:
        """Return the existing entries of one stack, or of every stack."""
        if name is not None:
            entries: Iterable[Path] = self._stacks.get(name, [])
        else:
            entries = (entry for stack in self._stacks.values() for entry in stack)
        return [entry for entry in dict.fromkeys(entries) if entry.is_file()]

    # ---------- Output ----------

    def write(
        self,
        entry: str | os.PathLike,
        data: str | bytes,
        *,
        extension: str | None = None,
    ) -> Path:
        """Write ``data`` to the destination path mirroring ``entry``."""
        if self._dist is None:
            raise ConfigurationError(
                "Unable to write, there is no destination defined for the Filesystem."
            )
        root = self.get_root()
        entry_path = Path(entry)
        if not entry_path.is_absolute():
            entry_path = root / entry_path
        relative = _relative_to_root(entry_path, root)
        if relative is None:
            raise ConfigurationError(f"{entry} is outside of the source root {root}")
        if relative == Path("."):
            raise ConfigurationError(f"{entry} does not point to a file within {root}")

        if extension:
            relative = relative.with_suffix("." + extension.lstrip("."))

        destination = self._dist / relative
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(data, str):
                destination.write_text(data, encoding="utf-8")
            else:
                destination.write_bytes(data)
        except OSError as exc:
            raise ResourceWriteError(destination, exc.strerror or str(exc)) from exc

        self._logger.info("Resource created: %s", destination)
        return destination

    # ---------- Internal helpers ----------

    @staticmethod
    def _as_sequence(entries: EntryInput) -> list[str | os.PathLike]:
        if entries is None:
            return []
        if isinstance(entries, (str, os.PathLike)):
            return [entries]
        return list(entries)

    def _resolve_entry(self, raw: str | os.PathLike) -> list[Path]:
        root = self.get_root()
        text = os.fspath(raw)
        if not text:
            return []
        relative = self._strip_root(Path(text), root)
        if _GLOB_PATTERN.search(text):
            pattern = os.path.join(glob.escape(str(root)), str(relative))
            return [_normalize(Path(match)) for match in sorted(glob.glob(pattern, recursive=True))]
        return [_normalize(root / relative)]

    @staticmethod
    def _strip_root(path: Path, root: Path) -> Path:
        """Remove the root prefix from paths that already point inside it."""
        if path.is_absolute():
            relative = _relative_to_root(path, root)
            return path if relative is None else relative

        normalized = _normalize(path)
        root_from_cwd = Path(os.path.relpath(root, Path.cwd()))
        prefix = root_from_cwd.parts
        if not prefix or prefix[0] in (os.curdir, os.pardir):
            return normalized
        if normalized.parts[: len(prefix)] == prefix:
            return Path(*normalized.parts[len(prefix):])
        return normalized
