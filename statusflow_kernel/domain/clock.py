"""
Injectable time source.

Services stamp ``created_at``, task completions and status history entries
from a ``Clock`` handed to their constructor; the pure engines receive the
timestamp as an argument.  Nothing in the kernel calls ``datetime.now()``
except ``SystemClock``.

All clocks return timezone-aware UTC datetimes.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

DEFAULT_TEST_EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of the current time for services."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Manually driven clock for tests.

    ``now()`` keeps returning the same instant until the test moves it with
    ``advance``, ``tick`` or ``set_time``.  Naive datetimes passed in are
    taken to be UTC.
    """

    def __init__(self, start: datetime | None = None):
        self._current = _as_utc(start or DEFAULT_TEST_EPOCH)

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = _as_utc(time)

    def advance(self, seconds: float = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """Move forward one second and return the new instant."""
        self.advance(1)
        return self._current


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
