"""Fixed-interval gate limiting how often the feed is queried."""

from __future__ import annotations

import time
from datetime import timedelta
from threading import Event
from typing import Callable

from .errors import Cancelled


class RateBudget:
    """Allow one acquisition per ``interval``; the very first one is free."""

    def __init__(
        self,
        interval: timedelta | float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        if seconds < 0:
            raise ValueError("interval must be >= 0")
        self.interval = seconds
        self._clock = clock
        self._last_acquired: float | None = None

    def remaining(self) -> float:
        """Seconds until the next acquisition would be granted without waiting."""

        if self._last_acquired is None:
            return 0.0
        elapsed = self._clock() - self._last_acquired
        return max(0.0, self.interval - elapsed)

    def acquire(self, cancel: Event | None = None) -> None:
        """Block until the budget allows a fetch or ``cancel`` is set."""

        if cancel is not None and cancel.is_set():
            raise Cancelled("rate limit wait cancelled")
        delay = self.remaining()
        if delay > 0:
            waiter = cancel if cancel is not None else Event()
            if waiter.wait(delay):
                raise Cancelled("rate limit wait cancelled")
        self._last_acquired = self._clock()

    def reset(self) -> None:
        self._last_acquired = None


__all__ = ["RateBudget"]
