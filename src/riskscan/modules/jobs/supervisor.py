"""Owner of detached background tasks."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class TaskFailure:
    """A supervised task that ended with an exception."""

    name: str
    error: BaseException


class TaskSupervisor:
    """Run fire-and-forget coroutines while keeping their failures visible.

    Every spawned task is referenced until it finishes, so it cannot be
    garbage collected mid-flight. Crashes are logged and kept in
    ``failures``. With ``max_concurrency > 0`` at most that many tasks run
    their body at once; the rest wait their turn.
    """

    def __init__(self, max_concurrency: int = 0):
        self.max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None
        self._tasks: dict[str, asyncio.Task] = {}
        self.failures: list[TaskFailure] = []

    @property
    def active(self) -> int:
        return len(self._tasks)

    def spawn(self, name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Schedule *coro* under *name*. Must be called with a running loop."""
        if name in self._tasks:
            coro.close()
            raise ValueError(f"Task already running: {name}")

        task = asyncio.get_running_loop().create_task(self._guarded(coro), name=name)
        self._tasks[name] = task
        task.add_done_callback(lambda t: self._on_done(name, t))
        return task

    async def _guarded(self, coro: Coroutine[Any, Any, Any]) -> Any:
        if self._semaphore is None:
            return await coro
        async with self._semaphore:
            return await coro

    def _on_done(self, name: str, task: asyncio.Task) -> None:
        self._tasks.pop(name, None)
        if task.cancelled():
            logger.info("Task %s cancelled", name)
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Task %s crashed", name, exc_info=exc)
            self.failures.append(TaskFailure(name=name, error=exc))

    async def wait(self, name: str) -> None:
        """Wait for one task; returns at once if it is unknown or finished."""
        task = self._tasks.get(name)
        if task is None:
            return
        await asyncio.wait([task])

    async def join(self) -> None:
        """Wait until every task, including ones spawned meanwhile, is done."""
        while self._tasks:
            await asyncio.wait(list(self._tasks.values()))
