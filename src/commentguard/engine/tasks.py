"""
Schedulable tasks on the running asyncio loop.

ScheduledTask fires a callback once after a delay and can be rescheduled,
which makes it a debounce timer. PeriodicTask fires repeatedly, optionally
a bounded number of times.
"""

import asyncio
import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class ScheduledTask:
    """
    One-shot delayed callback.

    Args:
        delay: Seconds to wait before firing
        callback: Synchronous callable
    """

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = max(0.0, delay)
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> bool:
        """Arm the timer unless already armed. Returns True if armed now."""
        if self._handle is not None:
            return False
        self._handle = asyncio.get_running_loop().call_later(self.delay, self._fire)
        return True

    def reschedule(self, delay: Optional[float] = None) -> None:
        """Restart the countdown, optionally with a new delay."""
        self.cancel()
        if delay is not None:
            self.delay = max(0.0, delay)
        self.schedule()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.callback()


class PeriodicTask:
    """
    Repeating callback.

    Args:
        interval: Seconds between runs
        callback: Synchronous callable
        max_runs: Stop after this many runs (None = unbounded)
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        max_runs: Optional[int] = None,
    ):
        self.callback = callback
        self.max_runs = max_runs
        self.runs = 0
        self._timer = ScheduledTask(interval, self._fire)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._timer.schedule()

    def stop(self) -> None:
        self._running = False
        self._timer.cancel()

    def _fire(self) -> None:
        self.runs += 1
        try:
            self.callback()
        finally:
            if self.max_runs is not None and self.runs >= self.max_runs:
                logger.debug("Periodic task done after %d runs", self.runs)
                self._running = False
            elif self._running:
                self._timer.schedule()
