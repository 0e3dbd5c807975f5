"""Worker removing previously written resources from the destination."""

from __future__ import annotations

import shutil

from plains_core.config import CleanerConfig
from plains_core.contractor import TaskRun
from plains_core.errors import ConfigurationError, ResourceWriteError

from .base import Worker

__all__ = ["Cleaner"]


class Cleaner(Worker):
    name = "cleaner"
    task_name = "clean"
    config_key = "cleaner"
    config_type = CleanerConfig

    async def handle(self, run: TaskRun) -> None:
        if not self.config.enabled:
            self.logger.info("Cleaner is disabled, skipping task %s", run.name)
        else:
            self.clean()
        run.resolve()

    def clean(self) -> int:
        """Remove everything inside the destination and return the removed count."""
        filesystem = self.services.filesystem
        destination = filesystem.get_destination()
        root = filesystem.get_root()
        if destination == root or destination in root.parents:
            raise ConfigurationError(
                f"refusing to clean {destination}, it contains the source root {root}"
            )
        if not destination.is_dir():
            self.logger.debug("nothing to clean at %s", destination)
            return 0

        removed = 0
        for child in sorted(destination.iterdir()):
            try:
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
            except OSError as exc:
                raise ResourceWriteError(child, exc.strerror or str(exc)) from exc
            removed += 1

        self.logger.info("Removed %d resource(s) from %s", removed, destination)
        return removed
