"""Civil calendar date used for every availability lookup.

Availability, bookings and calendar keys are all expressed as the local
calendar date a visitor picked. ``CalendarDate`` carries no time of day and
no zone, so it can never be shifted by an UTC conversion on its way through
the system.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from .constants import DECEMBER, SUNDAY


@dataclass(frozen=True, order=True, slots=True)
class CalendarDate:
    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        # raises ValueError for impossible dates such as 2025-02-30
        date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, value: date) -> "CalendarDate":
        if isinstance(value, datetime):
            raise TypeError(
                "CalendarDate.from_date expects a date, not a datetime; "
                "convert the instant to the local civil date first"
            )
        return cls(value.year, value.month, value.day)

    @classmethod
    def parse(cls, value: str) -> "CalendarDate":
        parts = value.strip().split("-")
        if len(parts) != 3 or len(parts[0]) != 4:
            raise ValueError(f"Invalid calendar date {value!r}, expected YYYY-MM-DD")
        try:
            year, month, day = (int(part) for part in parts)
        except ValueError as exc:
            raise ValueError(f"Invalid calendar date {value!r}, expected YYYY-MM-DD") from exc
        return cls(year, month, day)

    @classmethod
    def today(cls, tz: str) -> "CalendarDate":
        now = datetime.now(ZoneInfo(tz))
        return cls(now.year, now.month, now.day)

    @staticmethod
    def local_time(tz: str) -> time:
        """Wall-clock time of day in ``tz``, seconds dropped."""
        return datetime.now(ZoneInfo(tz)).time().replace(second=0, microsecond=0)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        return self.isoformat()

    @property
    def day_of_week(self) -> int:
        """0 = Sunday ... 6 = Saturday."""
        return (self.to_date().weekday() + 1) % 7

    @property
    def is_sunday(self) -> bool:
        return self.day_of_week == SUNDAY

    @property
    def is_december(self) -> bool:
        return self.month == DECEMBER

    @property
    def is_first_sunday_of_month(self) -> bool:
        return self.is_sunday and self.day <= 7

    def add_days(self, days: int) -> "CalendarDate":
        return CalendarDate.from_date(self.to_date() + timedelta(days=days))

    def month_days(self) -> list["CalendarDate"]:
        _, days_in_month = calendar.monthrange(self.year, self.month)
        return [CalendarDate(self.year, self.month, day) for day in range(1, days_in_month + 1)]


__all__ = ["CalendarDate"]
