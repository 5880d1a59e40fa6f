"""Resolve the bookable windows of a course on one calendar date.

Sources are consulted in strict precedence and the first one that applies
decides the result on its own:

1. a date override for the course (closed date or replacement slots),
2. the first-Sunday rule for courses scheduled that way,
3. the weekly rules, course-specific followed by global ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum

from ..core.calendar_date import CalendarDate
from ..db import models
from . import events as ev
from .schedule_store import ScheduleStore, StoredSlot


class WindowSource(str, Enum):
    override = "override"
    special = "special"
    course = "course"
    global_ = "global"


_SOURCE_RANK = {
    WindowSource.override: 0,
    WindowSource.special: 0,
    WindowSource.course: 0,
    WindowSource.global_: 1,
}


@dataclass(frozen=True, slots=True)
class SlotWindow:
    id: str
    start_time: time
    end_time: time
    source: WindowSource

    @property
    def duration_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return end - start

    @property
    def formatted_time(self) -> str:
        return f"{format_time(self.start_time)} - {format_time(self.end_time)}"


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def parse_time(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` as stored in the schedule tables."""
    text = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time value {value!r}")


def _to_windows(
    slots: list[StoredSlot],
    source: WindowSource,
    *,
    course_id: str,
    day: CalendarDate,
    events: ev.EventSink,
) -> list[SlotWindow]:
    windows: list[SlotWindow] = []
    for slot in slots:
        try:
            start = parse_time(slot.start_time)
            end = parse_time(slot.end_time)
        except ValueError:
            events.emit(
                ev.INVALID_WINDOW,
                logging.WARNING,
                course_id=course_id,
                date=day.isoformat(),
                slot_id=slot.id,
                start_time=slot.start_time,
                end_time=slot.end_time,
                reason="malformed_time",
            )
            continue
        if start >= end:
            events.emit(
                ev.INVALID_WINDOW,
                logging.WARNING,
                course_id=course_id,
                date=day.isoformat(),
                slot_id=slot.id,
                start_time=slot.start_time,
                end_time=slot.end_time,
                reason="start_not_before_end",
            )
            continue
        windows.append(SlotWindow(id=slot.id, start_time=start, end_time=end, source=source))
    return windows


def _ordered(windows: list[SlotWindow]) -> list[SlotWindow]:
    # stable, so equal keys keep the store order
    return sorted(windows, key=lambda w: (w.start_time, _SOURCE_RANK[w.source]))


def special_rule_applies(day: CalendarDate) -> bool:
    """All Sundays in December, otherwise only the first Sunday of the month."""
    if not day.is_sunday:
        return False
    return day.is_december or day.is_first_sunday_of_month


def resolve(
    course: models.Course,
    day: CalendarDate,
    store: ScheduleStore,
    events: ev.EventSink | None = None,
) -> list[SlotWindow]:
    events = events or ev.default_sink()

    override = store.get_override(course.id, day)
    if override is not None:
        events.emit(
            ev.OVERRIDE_APPLIED,
            logging.DEBUG,
            course_id=course.id,
            date=day.isoformat(),
            override_id=override.id,
            is_available=override.is_available,
        )
        if not override.is_available:
            return []
        return _ordered(
            _to_windows(
                override.slots,
                WindowSource.override,
                course_id=course.id,
                day=day,
                events=events,
            )
        )

    if course.schedule_rule == models.ScheduleRule.first_sunday_of_month and day.is_sunday:
        if not special_rule_applies(day):
            events.emit(
                ev.SPECIAL_RULE_SKIPPED,
                logging.DEBUG,
                course_id=course.id,
                date=day.isoformat(),
            )
            return []
        return _ordered(
            _to_windows(
                store.special_slots(course.id),
                WindowSource.special,
                course_id=course.id,
                day=day,
                events=events,
            )
        )

    course_slots, global_slots = store.recurring_slots(course.id, day.day_of_week)
    windows = _to_windows(
        course_slots, WindowSource.course, course_id=course.id, day=day, events=events
    ) + _to_windows(
        global_slots, WindowSource.global_, course_id=course.id, day=day, events=events
    )
    return _ordered(windows)


__all__ = [
    "WindowSource",
    "SlotWindow",
    "format_time",
    "parse_time",
    "special_rule_applies",
    "resolve",
]
