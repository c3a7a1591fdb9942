"""Injectable time source.

Services receive a ``Clock`` instead of calling ``datetime.now()`` so that the
retirement gate and workflow timestamps are deterministic under test.
Timestamps are UTC; ``today()`` is the calendar date in the clock's business
timezone.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from hr_loans.core.config import settings


def business_timezone() -> tzinfo:
    return ZoneInfo(settings.APP_TIMEZONE)


class Clock(ABC):
    tz: tzinfo = timezone.utc

    @abstractmethod
    def now(self) -> datetime:
        """Current UTC time."""
        ...

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()


class SystemClock(Clock):
    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or business_timezone()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock pinned to a given instant until ``set`` moves it."""

    def __init__(self, fixed: datetime, tz: Optional[tzinfo] = None):
        self.tz = tz or timezone.utc
        self._now = self._aware(fixed)

    @staticmethod
    def _aware(value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = self._aware(value)
