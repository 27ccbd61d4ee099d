from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol

_MIN_STEP = timedelta(milliseconds=1)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Clock backed by the computer's wall clock, in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock that always returns the time it was given."""

    def __init__(self, time: datetime) -> None:
        self.time = time

    def now(self) -> datetime:
        return self.time


class IncreasingClock:
    """
    Wraps a clock so that successive calls return strictly increasing times.

    Each returned time is at least 1 millisecond after the previous one, even if the
    parent clock is coarse or goes backwards. Not safe for concurrent callers.
    """

    def __init__(self, parent: Clock) -> None:
        self._parent = parent
        self._next: datetime | None = None

    def now(self) -> datetime:
        current = self._parent.now()
        if self._next is not None and current < self._next:
            current = self._next
        self._next = current + _MIN_STEP
        return current
