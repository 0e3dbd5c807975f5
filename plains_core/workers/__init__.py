"""Built-in plains workers."""

from __future__ import annotations

from typing import Sequence

from .base import STORE_NAMESPACE, Worker, WorkerServices
from .cleaner import Cleaner
from .sass_compiler import CompileReport, SassCompiler

__all__ = [
    "DEFAULT_WORKERS",
    "STORE_NAMESPACE",
    "Cleaner",
    "CompileReport",
    "SassCompiler",
    "Worker",
    "WorkerServices",
]

DEFAULT_WORKERS: Sequence[type[Worker]] = (
    Cleaner,
    SassCompiler,
)
