"""Base class and shared services for plains workers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from plains_core.contractor import Contractor, TaskRun
from plains_core.errors import ConfigurationError, WorkerMountError
from plains_core.filesystem import Filesystem
from plains_core.store import Store

__all__ = ["Worker", "WorkerServices", "STORE_NAMESPACE"]

STORE_NAMESPACE = "plains"


@dataclass(frozen=True)
class WorkerServices:
    """Shared service instances handed to every worker."""

    store: Store
    filesystem: Filesystem
    contractor: Contractor


class Worker(ABC):
    """A processing unit that registers stacks and a task handler on mount."""

    name: ClassVar[str]
    task_name: ClassVar[str]
    config_key: ClassVar[str]
    config_type: ClassVar[type]
    allow_multiple: ClassVar[bool] = True

    def __init__(self, services: WorkerServices) -> None:
        self.services = services
        self.config: Any = None
        self.mounted = False
        self.logger = logging.getLogger(f"plains_core.workers.{self.name}")

    def mount(self) -> None:
        """Load configuration, register stacks and subscribe to the task."""
        if self.mounted:
            raise WorkerMountError(f"worker {self.name} is already mounted")
        self.config = self.load_config()
        self.create_stacks()
        self.populate_stacks()
        self.services.contractor.subscribe(self.task_name, self.handle, self.allow_multiple)
        self.mounted = True

    def load_config(self) -> Any:
        """Return this worker's typed configuration slice, or its defaults."""
        workers = self.services.store.get(STORE_NAMESPACE, "workers")
        if isinstance(workers, Mapping):
            section = workers.get(self.config_key)
        else:
            section = getattr(workers, self.config_key, None)

        if section is None:
            return self.config_type()
        if isinstance(section, self.config_type):
            return section
        if isinstance(section, Mapping):
            return self.config_type.from_dict(section)
        raise ConfigurationError(
            f"configuration for worker {self.name} must be a mapping, got {type(section).__name__}"
        )

    def create_stacks(self) -> None:
        """Create the entry stacks this worker owns."""

    def populate_stacks(self) -> None:
        """Insert the configured entries into the worker stacks."""

    @abstractmethod
    async def handle(self, run: TaskRun) -> None:
        """Process the task and resolve ``run`` once every unit of work is done."""
