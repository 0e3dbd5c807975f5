"""Named-task scheduler used by workers and the plains driver."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, DefaultDict

from .errors import TaskBusyError, TaskSubscriptionError, UnknownTaskError

__all__ = ["Contractor", "TaskGate", "TaskHandler", "TaskRun"]


class TaskGate:
    """One-shot completion primitive for a single task run.

    The gate opens after ``expected`` calls to :meth:`resolve`. Further calls
    are ignored, and a gate that already opened cannot fail afterwards.
    """

    def __init__(self, expected: int = 1) -> None:
        if expected < 1:
            raise ValueError("a task gate expects at least one resolution")
        self._remaining = expected
        self._future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def closed(self) -> bool:
        return self._future.done()

    @property
    def resolved(self) -> bool:
        return self._future.done() and self._future.exception() is None

    def resolve(self) -> None:
        if self._future.done():
            return
        self._remaining -= 1
        if self._remaining == 0:
            self._future.set_result(None)

    def fail(self, exc: BaseException) -> None:
        if self._future.done():
            return
        self._future.set_exception(exc)

    async def wait(self) -> None:
        await self._future


@dataclass(frozen=True)
class TaskRun:
    """Handle given to a handler for the run it was invoked for."""

    name: str
    gate: TaskGate

    def resolve(self) -> None:
        self.gate.resolve()


TaskHandler = Callable[[TaskRun], "Awaitable[Any] | Any"]


@dataclass(frozen=True)
class _TaskSubscription:
    order: int
    handler: TaskHandler
    allow_multiple: bool


class Contractor:
    """Let workers subscribe to task names and let a driver run them.

    ``run`` does not wait for the handlers themselves. It waits until the
    handlers signal completion through :meth:`resolve` (or the ``TaskRun``
    handle they receive). A task with several handlers completes once every
    handler has resolved.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[_TaskSubscription]] = defaultdict(list)
        self._sequence: DefaultDict[str, int] = defaultdict(int)
        self._running: dict[str, TaskGate] = {}
        self._handler_futures: set[asyncio.Future[Any]] = set()
        self._logger = logging.getLogger(__name__)

    def subscribe(
        self,
        task_name: str,
        handler: TaskHandler,
        allow_multiple: bool = False,
    ) -> None:
        """Attach ``handler`` to ``task_name``.

        Single-handler tasks reject any further subscription, and a
        single-handler subscription is rejected when the task already has
        handlers.
        """
        if not task_name:
            raise TaskSubscriptionError(task_name, "task name cannot be empty")
        if task_name in self._running:
            raise TaskBusyError(task_name)
        existing = self._handlers.get(task_name, [])
        if existing and not (allow_multiple and all(item.allow_multiple for item in existing)):
            raise TaskSubscriptionError(
                task_name,
                f"task {task_name!r} already has a handler and does not accept multiple handlers",
            )

        order = self._sequence[task_name]
        self._sequence[task_name] = order + 1
        self._handlers[task_name].append(
            _TaskSubscription(order=order, handler=handler, allow_multiple=allow_multiple)
        )
        self._logger.debug("subscribed handler %d to task %s", order, task_name)

    def has_task(self, task_name: str) -> bool:
        return bool(self._handlers.get(task_name))

    def tasks(self) -> tuple[str, ...]:
        return tuple(name for name, handlers in self._handlers.items() if handlers)

    def is_running(self, task_name: str) -> bool:
        return task_name in self._running

    async def run(self, task_name: str) -> None:
        """Invoke every handler of ``task_name`` and wait for the task to resolve."""
        subscriptions = self._handlers.get(task_name)
        if not subscriptions:
            raise UnknownTaskError(task_name)
        if task_name in self._running:
            raise TaskBusyError(task_name)

        gate = TaskGate(expected=len(subscriptions))
        self._running[task_name] = gate
        handle = TaskRun(name=task_name, gate=gate)
        self._logger.info("Running task: %s", task_name)
        try:
            for subscription in sorted(subscriptions, key=lambda item: item.order):
                try:
                    result = subscription.handler(handle)
                except Exception as exc:
                    if gate.closed:
                        raise
                    # handlers already scheduled report into a closed gate from now on
                    gate.fail(exc)
                    break
                if inspect.isawaitable(result):
                    future = asyncio.ensure_future(result)
                    self._handler_futures.add(future)
                    future.add_done_callback(
                        lambda done, name=task_name: self._on_handler_done(name, gate, done)
                    )
            await gate.wait()
        finally:
            del self._running[task_name]
        self._logger.info("Task resolved: %s", task_name)

    def resolve(self, task_name: str) -> None:
        """Record one resolution for the in-flight run of ``task_name``."""
        gate = self._running.get(task_name)
        if gate is None:
            self._logger.debug("resolve(%s) ignored, no run in flight", task_name)
            return
        gate.resolve()

    def _on_handler_done(self, task_name: str, gate: TaskGate, done: asyncio.Future[Any]) -> None:
        self._handler_futures.discard(done)
        if done.cancelled():
            gate.fail(asyncio.CancelledError())
            return
        exc = done.exception()
        if exc is None:
            return
        if gate.closed:
            # the run already finished, nobody awaits this failure
            self._logger.error("handler for task %s failed after the run finished: %s", task_name, exc)
            return
        gate.fail(exc)
