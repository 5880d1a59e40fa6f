from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum

from ..core.calendar_date import CalendarDate
from ..db import models
from . import events as ev
from .availability_service import resolve
from .capacity_service import SlotCapacity, with_capacity
from .schedule_store import ScheduleStore, StoreFactory


@dataclass(frozen=True, slots=True)
class DaySummary:
    has_slots: bool
    remaining_total: int


class DayState(str, Enum):
    unresolved = "unresolved"
    available = "available"
    fully_booked = "fully_booked"
    unavailable = "unavailable"
    past = "past"


def slot_options(
    course: models.Course,
    day: CalendarDate,
    store: ScheduleStore,
    events: ev.EventSink | None = None,
) -> list[SlotCapacity]:
    """Windows of one date with their seat counts, for slot selection."""
    windows = resolve(course, day, store, events)
    return with_capacity(course, day, windows, store, events)


def summarize_day(lines: list[SlotCapacity]) -> DaySummary:
    return DaySummary(
        has_slots=len(lines) > 0,
        remaining_total=sum(line.remaining_seats for line in lines),
    )


def month_summary(
    course: models.Course,
    month_anchor: CalendarDate,
    store_factory: StoreFactory,
    *,
    max_workers: int = 4,
    events: ev.EventSink | None = None,
) -> dict[str, DaySummary]:
    """Summarize every day of ``month_anchor``'s month, keyed ``YYYY-MM-DD``.

    Days are independent, so they are spread over a bounded thread pool and
    every day reads through its own store. A failed read for any day is
    raised instead of being reported as a day without slots.
    """
    events = events or ev.default_sink()
    days = month_anchor.month_days()

    def compute(day: CalendarDate) -> DaySummary:
        with store_factory() as store:
            return summarize_day(slot_options(course, day, store, events))

    if max_workers <= 1:
        results = [compute(day) for day in days]
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(days))) as pool:
            results = list(pool.map(compute, days))

    return {day.isoformat(): summary for day, summary in zip(days, results)}


def day_state(
    summary: dict[str, DaySummary], day: CalendarDate, today: CalendarDate
) -> DayState:
    if day < today:
        return DayState.past
    entry = summary.get(day.isoformat())
    if entry is None:
        return DayState.unresolved
    if not entry.has_slots:
        return DayState.unavailable
    if entry.remaining_total == 0:
        return DayState.fully_booked
    return DayState.available


__all__ = [
    "DaySummary",
    "DayState",
    "slot_options",
    "summarize_day",
    "month_summary",
    "day_state",
]
