"""
Deferred task runner.

Runs callbacks at or after a given time on the running asyncio loop.
Callbacks may be plain callables or coroutine functions. Anything a
callback raises is logged here and never reaches the code that scheduled it.
"""

import asyncio
import inspect
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

logger = structlog.get_logger()

TaskCallback = Callable[[], Union[Any, Awaitable[Any]]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DeferredTaskRunner:
    """
    Fire-and-forget scheduler backed by asyncio tasks.

    Tasks are held in memory only; a process restart drops anything still
    waiting. Ordering between tasks follows their execution time and nothing
    else.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of scheduled tasks that have not finished yet."""
        return len(self._tasks)

    def schedule(
        self,
        callback: TaskCallback,
        execute_at: Optional[datetime] = None,
        name: Optional[str] = None,
    ) -> asyncio.Task:
        """
        Schedule ``callback`` to run at ``execute_at``.

        Args:
            callback: Zero-argument callable or coroutine function.
            execute_at: When to run. None or a past time runs as soon as possible.
                Naive datetimes are taken as local time.
            name: Optional task name for logging.

        Returns:
            The asyncio task wrapping the callback.
        """
        delay = 0.0
        if execute_at is not None:
            if execute_at.tzinfo is None:
                execute_at = execute_at.astimezone()
            delay = max(0.0, (execute_at - self._clock()).total_seconds())

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(callback, delay, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.debug("Task scheduled", task=name, delay_seconds=delay)
        return task

    async def _run(self, callback: TaskCallback, delay: float, name: Optional[str]) -> None:
        if delay > 0:
            await asyncio.sleep(delay)

        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Scheduled task failed", task=name, error=str(e))

    async def wait_idle(self) -> None:
        """Wait until every scheduled task, including ones scheduled meanwhile, has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel every task that has not run yet."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Task runner stopped", cancelled=len(tasks))
