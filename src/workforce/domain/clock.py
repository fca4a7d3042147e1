"""Clock abstraction for date-based rules.

SystemClock: real wall-clock time.
FixedClock: deterministic time that only moves when told to.

Aggregates never call ``datetime.now()`` directly — every time-dependent
operation takes a clock (or an explicit date) from its caller.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Clock interface used by all time-dependent code."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...

    def today(self) -> date:
        """Current UTC calendar date."""
        ...


class SystemClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Settable clock for tests, replays, and scheduled jobs.

    Time advances only when explicitly set.
    """

    def __init__(self, start: datetime | None = None) -> None:
        start = start or datetime(2025, 1, 1, tzinfo=UTC)
        if start.tzinfo is None:
            msg = "FixedClock requires a timezone-aware datetime"
            raise ValueError(msg)
        self._time = start

    @classmethod
    def on(cls, day: date, hour: int = 9) -> FixedClock:
        """Clock pinned to *day* at *hour* UTC."""
        return cls(datetime(day.year, day.month, day.day, hour, tzinfo=UTC))

    def now(self) -> datetime:
        return self._time

    def today(self) -> date:
        return self._time.date()

    def set_time(self, t: datetime) -> None:
        """Move time forward. Must be monotonically increasing."""
        if t < self._time:
            msg = f"FixedClock cannot go backwards: {t} < {self._time}"
            raise ValueError(msg)
        self._time = t

    def advance(self, *, days: int = 0, hours: int = 0, minutes: int = 0) -> None:
        self.set_time(self._time + timedelta(days=days, hours=hours, minutes=minutes))
