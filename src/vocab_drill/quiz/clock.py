"""Countdown clock advanced by external ticks.

The clock never reads real time. Whoever owns the session decides the
cadence: a wall-clock driver in the console, manual stepping in tests.
"""

from __future__ import annotations

from typing import Callable, Optional

from .errors import AlreadyRunning, ClockNotRunning

__all__ = ["SessionClock"]

ExpireCallback = Callable[[], None]


class SessionClock:
    """Single countdown with a one-shot expiry notification."""

    def __init__(self, on_expire: Optional[ExpireCallback] = None) -> None:
        self._on_expire = on_expire
        self._duration = 0
        self._remaining = 0
        self._running = False
        self._expired = False

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def seconds_remaining(self) -> int:
        return self._remaining

    @property
    def elapsed(self) -> int:
        return self._duration - self._remaining

    @property
    def running(self) -> bool:
        return self._running

    def is_expired(self) -> bool:
        return self._expired

    def start(self, duration_seconds: int) -> None:
        if self._running:
            raise AlreadyRunning("Clock is already running; stop it first.")
        if isinstance(duration_seconds, bool) or not isinstance(
            duration_seconds, int
        ):
            raise ValueError("duration_seconds must be an integer.")
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive.")
        self._duration = duration_seconds
        self._remaining = duration_seconds
        self._expired = False
        self._running = True

    def stop(self) -> None:
        self._running = False

    def tick(self) -> int:
        """Advance one unit and return the seconds left.

        The tick that reaches zero fires ``on_expire`` exactly once; ticks
        after expiry change nothing.
        """

        if self._expired:
            return self._remaining
        if not self._running:
            raise ClockNotRunning("Clock is not running.")
        self._remaining -= 1
        if self._remaining <= 0:
            self._remaining = 0
            self._expired = True
            self._running = False
            if self._on_expire is not None:
                self._on_expire()
        return self._remaining
