"""Cancelable one-shot timers used to schedule poll cycles.

``AsyncioTimer`` runs callbacks on the running event loop. ``ManualTimer``
keeps a virtual clock that only moves when ``advance`` is awaited, so poll
schedules can be driven deterministically.
"""

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from secretwatch.logging import get_logger

logger = get_logger(__name__)

TimerCallback = Callable[[], Awaitable[None]]


class AsyncioScheduledTask:
    """A callback scheduled with ``loop.call_later``.

    Once due, the callback runs as its own task. Exceptions escaping the
    callback are logged since nothing awaits the task.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, delay_seconds: float, callback: TimerCallback):
        self._loop = loop
        self._callback = callback
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self._handle = loop.call_later(delay_seconds, self._start)

    def _start(self) -> None:
        self._task = self._loop.create_task(self._run())

    async def _run(self) -> None:
        try:
            await self._callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled task failed")

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def task(self) -> Optional[asyncio.Task]:
        """Task running the callback, once it is due."""
        return self._task

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()


class AsyncioTimer:
    """Timer backed by the asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule(self, delay_seconds: float, callback: TimerCallback) -> AsyncioScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        return AsyncioScheduledTask(loop, delay_seconds, callback)


@dataclass(order=True)
class ManualScheduledTask:
    due: float
    sequence: int
    callback: TimerCallback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    ran: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimer:
    """Virtual-time timer.

    Example:
        >>> timer = ManualTimer()
        >>> watcher = RotationWatcher(store, secrets, poll_interval_seconds=300, timer=timer)
        >>> await watcher.start(on_rotation)
        >>> await timer.advance(300)  # runs exactly one poll cycle
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[ManualScheduledTask] = []
        self._sequence = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> List[ManualScheduledTask]:
        """Tasks that are neither cancelled nor run, in due order."""
        return sorted(task for task in self._queue if not task.cancelled and not task.ran)

    def schedule(self, delay_seconds: float, callback: TimerCallback) -> ManualScheduledTask:
        task = ManualScheduledTask(
            due=self._now + max(delay_seconds, 0.0),
            sequence=next(self._sequence),
            callback=callback,
        )
        heapq.heappush(self._queue, task)
        return task

    async def advance(self, seconds: float) -> int:
        """Move the clock forward, running every task that falls due.

        Tasks scheduled by a callback run in the same call if they fall due
        before the new time. Callback exceptions propagate.

        Returns:
            Number of callbacks run
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0].due <= target:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self._now = task.due
            task.ran = True
            ran += 1
            await task.callback()
        self._now = target
        return ran

    async def run_next(self) -> bool:
        """Advance exactly to the next pending task and run it.

        Returns:
            False if nothing was pending
        """
        pending = self.pending
        if not pending:
            return False
        await self.advance(pending[0].due - self._now)
        return True
