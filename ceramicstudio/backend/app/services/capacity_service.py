from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.calendar_date import CalendarDate
from ..core.constants import DEFAULT_COURSE_CAPACITY, POTTERY_WHEEL_CAPACITY
from ..db import models
from . import events as ev
from .availability_service import SlotWindow
from .schedule_store import ScheduleStore


@dataclass(frozen=True, slots=True)
class SlotCapacity:
    window: SlotWindow
    total_capacity: int
    booked_seats: int
    remaining_seats: int
    overbooked: bool = False

    @property
    def fully_booked(self) -> bool:
        return self.remaining_seats == 0


def effective_capacity(course: models.Course) -> int:
    if course.capacity:
        return course.capacity
    if course.capacity_class == models.CapacityClass.pottery_wheel:
        return POTTERY_WHEEL_CAPACITY
    return DEFAULT_COURSE_CAPACITY


def with_capacity(
    course: models.Course,
    day: CalendarDate,
    windows: list[SlotWindow],
    store: ScheduleStore,
    events: ev.EventSink | None = None,
) -> list[SlotCapacity]:
    """Annotate each window with the seats still free on ``day``.

    Only pending and confirmed bookings count. The figures are accurate at
    read time; nothing here reserves a seat.
    """
    if not windows:
        return []
    events = events or ev.default_sink()
    total = effective_capacity(course)
    booked_by_slot = store.booked_seats([window.id for window in windows], day)

    result: list[SlotCapacity] = []
    for window in windows:
        booked = booked_by_slot.get(window.id, 0)
        overbooked = booked > total
        if overbooked:
            events.emit(
                ev.OVERBOOKED,
                logging.WARNING,
                course_id=course.id,
                date=day.isoformat(),
                slot_id=window.id,
                booked=booked,
                capacity=total,
            )
        result.append(
            SlotCapacity(
                window=window,
                total_capacity=total,
                booked_seats=booked,
                remaining_seats=max(0, total - booked),
                overbooked=overbooked,
            )
        )
    return result


__all__ = ["SlotCapacity", "effective_capacity", "with_capacity"]
