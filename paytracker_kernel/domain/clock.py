"""
Injectable time source.

Services ask a ``Clock`` for "today" and pass it to the engines as an
explicit ``as_of`` / ``payment_date`` argument; nothing below the service
layer reads the wall clock.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

_DEFAULT_INSTANT = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """
    Source of the current instant.

    Guarantees:
        - ``now()`` is timezone-aware.
        - ``today()`` is the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in the machine's local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class DeterministicClock(Clock):
    """
    Clock frozen at a chosen instant until moved explicitly.

    Used by tests and by replays of recorded operations.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._instant = fixed_time or _DEFAULT_INSTANT

    @classmethod
    def on(cls, day: date) -> "DeterministicClock":
        """Frozen at noon UTC on ``day``."""
        return cls(datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._instant

    def set_time(self, time: datetime) -> None:
        self._instant = time

    def advance(self, seconds: int = 1) -> None:
        self._instant += timedelta(seconds=seconds)

    def advance_days(self, days: int) -> None:
        self._instant += timedelta(days=days)
