from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Task = Callable[[], Awaitable[None]]


@dataclass(eq=False)
class ScheduledTask:
    task: Task
    _timer: asyncio.TimerHandle | None = field(default=None, init=False, repr=False)
    _running: asyncio.Task | None = field(default=None, init=False, repr=False)
    cancelled: bool = field(default=False, init=False)

    @property
    def fired(self) -> bool:
        return self._running is not None


class DebounceScheduler:
    """Single-slot timer: scheduling a task cancels whatever was still pending.

    Only the timer is cancelled. A task that already fired keeps running;
    callers fence stale results themselves.
    """

    def __init__(self) -> None:
        self._pending: ScheduledTask | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def pending(self) -> ScheduledTask | None:
        return self._pending

    def schedule(self, delay: float, task: Task) -> ScheduledTask:
        if self._pending is not None:
            self.cancel(self._pending)

        handle = ScheduledTask(task=task)
        loop = asyncio.get_running_loop()
        handle._timer = loop.call_later(max(0.0, delay), self._fire, handle)
        self._pending = handle
        return handle

    def cancel(self, handle: ScheduledTask) -> None:
        if handle.cancelled or handle.fired:
            return
        handle.cancelled = True
        if handle._timer is not None:
            handle._timer.cancel()
        if self._pending is handle:
            self._pending = None

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and every fired task has finished."""
        while self._pending is not None or self._in_flight:
            if self._in_flight:
                await asyncio.gather(*self._in_flight, return_exceptions=True)
            else:
                await asyncio.sleep(0.01)

    async def close(self) -> None:
        if self._pending is not None:
            self.cancel(self._pending)
        for running in list(self._in_flight):
            running.cancel()
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    def _fire(self, handle: ScheduledTask) -> None:
        if self._pending is handle:
            self._pending = None
        running = asyncio.ensure_future(handle.task())
        handle._running = running
        self._in_flight.add(running)
        running.add_done_callback(self._finished)

    def _finished(self, running: asyncio.Task) -> None:
        self._in_flight.discard(running)
        if running.cancelled():
            return
        exc = running.exception()
        if exc is not None:
            logger.error("Debounced task failed: %r", exc, exc_info=exc)
