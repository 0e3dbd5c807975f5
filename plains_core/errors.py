"""Error types raised by the plains core services and workers."""

from __future__ import annotations

from pathlib import Path


class PlainsError(Exception):
    """Base type for plains failures."""


class ConfigurationError(PlainsError):
    """Raised when roots or worker configuration are missing or invalid."""


class TaskError(PlainsError):
    """Base type for task orchestration failures."""

    def __init__(self, task_name: str, message: str) -> None:
        super().__init__(message)
        self.task_name = task_name


class UnknownTaskError(TaskError):
    """Raised when a task is run without any subscribed handler."""

    def __init__(self, task_name: str) -> None:
        super().__init__(task_name, f"no handler is subscribed to task {task_name!r}")


class TaskBusyError(TaskError):
    """Raised when a task is run or subscribed to while a run is in flight."""

    def __init__(self, task_name: str) -> None:
        super().__init__(task_name, f"task {task_name!r} is already running")


class TaskSubscriptionError(TaskError):
    """Raised when a subscription conflicts with a single-handler task."""


class ProcessingError(PlainsError):
    """Raised when a single entry cannot be processed."""

    def __init__(self, entry: Path, message: str) -> None:
        super().__init__(f"{entry}: {message}")
        self.entry = entry


class ResourceWriteError(PlainsError):
    """Raised when a destination directory or file cannot be written."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"unable to write {path}: {message}")
        self.path = path


class WorkerMountError(PlainsError):
    """Raised when a worker is mounted more than once."""
