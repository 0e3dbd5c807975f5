"""Core runtime pieces for the plains asset pipeline."""

from .app import Plains, PlainsStatus
from .config import ConfigLoader, PlainsConfig
from .contractor import Contractor, TaskGate, TaskRun
from .errors import (
    ConfigurationError,
    PlainsError,
    ProcessingError,
    ResourceWriteError,
    TaskBusyError,
    TaskError,
    TaskSubscriptionError,
    UnknownTaskError,
    WorkerMountError,
)
from .filesystem import Filesystem
from .paths import UserDirs
from .store import Store

__all__ = [
    "Plains",
    "PlainsStatus",
    "ConfigLoader",
    "PlainsConfig",
    "Contractor",
    "TaskGate",
    "TaskRun",
    "Filesystem",
    "Store",
    "UserDirs",
    "PlainsError",
    "ConfigurationError",
    "TaskError",
    "UnknownTaskError",
    "TaskBusyError",
    "TaskSubscriptionError",
    "ProcessingError",
    "ResourceWriteError",
    "WorkerMountError",
]
