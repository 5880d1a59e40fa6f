from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..core.calendar_date import CalendarDate
from ..core.constants import (
    FIRST_SUNDAY_COURSE_IDS,
    POTTERY_WHEEL_COURSE_IDS,
    POTTERY_WHEEL_ID_MARKER,
)
from ..db import models
from .availability_service import format_time, parse_time

logger = logging.getLogger(__name__)


class ScheduleError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class TimeRange:
    start_time: time
    end_time: time


def _validate(ranges: Iterable[TimeRange]) -> list[TimeRange]:
    checked = list(ranges)
    for item in checked:
        if item.start_time >= item.end_time:
            raise ScheduleError(
                f"Start time {format_time(item.start_time)} must be before "
                f"end time {format_time(item.end_time)}"
            )
    return checked


def default_capacity_class(course_id: str) -> models.CapacityClass:
    if POTTERY_WHEEL_ID_MARKER in course_id or course_id in POTTERY_WHEEL_COURSE_IDS:
        return models.CapacityClass.pottery_wheel
    return models.CapacityClass.standard


def default_schedule_rule(course_id: str) -> models.ScheduleRule:
    if course_id in FIRST_SUNDAY_COURSE_IDS:
        return models.ScheduleRule.first_sunday_of_month
    return models.ScheduleRule.standard


def create_course(
    db: Session,
    *,
    course_id: str,
    title: str,
    description: str | None = None,
    capacity: int | None = None,
    schedule_rule: models.ScheduleRule | None = None,
    capacity_class: models.CapacityClass | None = None,
) -> models.Course:
    if db.get(models.Course, course_id):
        raise ScheduleError("Course already exists")
    course = models.Course(
        id=course_id,
        title=title,
        description=description,
        capacity=capacity,
        schedule_rule=schedule_rule or default_schedule_rule(course_id),
        capacity_class=capacity_class or default_capacity_class(course_id),
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def _window_key(start_time: str, end_time: str) -> tuple[str, str] | None:
    try:
        return format_time(parse_time(start_time)), format_time(parse_time(end_time))
    except ValueError:
        return None


def _range_keys(ranges: Iterable[TimeRange]) -> list[tuple[str, str]]:
    keys: list[tuple[str, str]] = []
    for item in sorted(ranges, key=lambda r: (r.start_time, r.end_time)):
        key = (format_time(item.start_time), format_time(item.end_time))
        if key not in keys:
            keys.append(key)
    return keys


def _match_rows(rows, wanted, key_of) -> tuple[dict, list]:
    """Pair each wanted key with one existing row holding the same window.

    Matched rows keep their ids so bookings referencing them stay counted.
    """
    matched = {}
    leftovers = []
    for row in rows:
        key = key_of(row)
        if key is not None and key in wanted and key not in matched:
            row.is_active = True
            matched[key] = row
        else:
            leftovers.append(row)
    return matched, leftovers


def replace_weekly_schedule(
    db: Session,
    course_id: str | None,
    days: dict[int, list[TimeRange]],
) -> list[models.RecurringSlot]:
    """Replace the weekly slots of a course (or the global ones for ``None``).

    Days missing from ``days`` lose their slots. A ``(day, start, end)``
    combination is stored once even when submitted repeatedly, and a slot
    that is submitted again keeps its row.
    """
    wanted: list[tuple[int, str, str]] = []
    for day_of_week in sorted(days):
        if not 0 <= day_of_week <= 6:
            raise ScheduleError(f"Invalid day of week {day_of_week}")
        ranges = _validate(days[day_of_week])
        keys = _range_keys(ranges)
        if len(keys) < len(ranges):
            logger.info(
                "Skipping duplicate weekly slot",
                extra={"course_id": course_id, "day_of_week": day_of_week},
            )
        wanted.extend((day_of_week, start, end) for start, end in keys)

    existing_query = select(models.RecurringSlot)
    if course_id is None:
        existing_query = existing_query.where(models.RecurringSlot.course_id.is_(None))
    else:
        existing_query = existing_query.where(models.RecurringSlot.course_id == course_id)
    existing = db.execute(
        existing_query.order_by(models.RecurringSlot.day_of_week, models.RecurringSlot.id)
    ).scalars().all()

    def key_of(slot: models.RecurringSlot):
        window = _window_key(slot.start_time, slot.end_time)
        return (slot.day_of_week, *window) if window else None

    matched, leftovers = _match_rows(existing, set(wanted), key_of)
    for slot in leftovers:
        db.delete(slot)

    result: list[models.RecurringSlot] = []
    for key in wanted:
        slot = matched.get(key)
        if slot is None:
            slot = models.RecurringSlot(
                course_id=course_id,
                day_of_week=key[0],
                start_time=key[1],
                end_time=key[2],
                is_active=True,
            )
            db.add(slot)
        result.append(slot)
    db.commit()
    for slot in result:
        db.refresh(slot)
    return result


def replace_special_slots(
    db: Session, course: models.Course, ranges: Iterable[TimeRange]
) -> list[models.SpecialRecurringSlot]:
    checked = _validate(ranges)
    if course.schedule_rule != models.ScheduleRule.first_sunday_of_month:
        raise ScheduleError("Course is not scheduled on first Sundays")
    wanted = _range_keys(checked)
    existing = (
        db.query(models.SpecialRecurringSlot)
        .filter(models.SpecialRecurringSlot.course_id == course.id)
        .order_by(models.SpecialRecurringSlot.id)
        .all()
    )
    matched, leftovers = _match_rows(
        existing, set(wanted), lambda slot: _window_key(slot.start_time, slot.end_time)
    )
    for slot in leftovers:
        db.delete(slot)

    result: list[models.SpecialRecurringSlot] = []
    for start, end in wanted:
        slot = matched.get((start, end))
        if slot is None:
            slot = models.SpecialRecurringSlot(
                course_id=course.id, start_time=start, end_time=end, is_active=True
            )
            db.add(slot)
        result.append(slot)
    db.commit()
    for slot in result:
        db.refresh(slot)
    return result


def get_override(
    db: Session, course_id: str, day: CalendarDate
) -> models.DateOverride | None:
    return (
        db.query(models.DateOverride)
        .options(selectinload(models.DateOverride.slots))
        .filter(models.DateOverride.course_id == course_id)
        .filter(models.DateOverride.override_date == day.to_date())
        .one_or_none()
    )


def _set_override(
    db: Session,
    course_id: str,
    day: CalendarDate,
    is_available: bool,
    ranges: list[TimeRange],
) -> models.DateOverride:
    override = get_override(db, course_id, day)
    if override is None:
        override = models.DateOverride(course_id=course_id, override_date=day.to_date())
        db.add(override)
    override.is_available = is_available
    if not is_available:
        ranges = []
    wanted = _range_keys(ranges)
    matched, _ = _match_rows(
        list(override.slots),
        set(wanted),
        lambda slot: _window_key(slot.start_time, slot.end_time),
    )
    # slots left out of the list are removed by the delete-orphan cascade
    override.slots = [
        matched.get((start, end))
        or models.OverrideSlot(start_time=start, end_time=end, is_active=True)
        for start, end in wanted
    ]
    return override




def upsert_override(
    db: Session,
    course_id: str,
    day: CalendarDate,
    *,
    is_available: bool,
    slots: Iterable[TimeRange] = (),
) -> models.DateOverride:
    ranges = _validate(slots)
    if is_available and not ranges:
        raise ScheduleError("An available override needs at least one time slot")
    if db.get(models.Course, course_id) is None:
        raise ScheduleError("Course not found")
    override = _set_override(db, course_id, day, is_available, ranges)
    db.commit()
    db.refresh(override)
    return override


def apply_override(
    db: Session, override: models.DateOverride, course_ids: Iterable[str]
) -> list[models.DateOverride]:
    """Copy ``override`` (closure or replacement slots) onto other courses."""
    day = CalendarDate.from_date(override.override_date)
    ranges = [
        TimeRange(
            start_time=parse_time(slot.start_time),
            end_time=parse_time(slot.end_time),
        )
        for slot in override.slots
        if slot.is_active
    ]
    applied: list[models.DateOverride] = []
    for course_id in course_ids:
        if course_id == override.course_id:
            continue
        if db.get(models.Course, course_id) is None:
            raise ScheduleError(f"Course {course_id} not found")
        applied.append(_set_override(db, course_id, day, override.is_available, ranges))
    db.commit()
    for item in applied:
        db.refresh(item)
    return applied


def delete_override(db: Session, override: models.DateOverride) -> None:
    db.delete(override)
    db.commit()
