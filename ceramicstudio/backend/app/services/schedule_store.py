from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, ContextManager, Iterable, Iterator

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.calendar_date import CalendarDate
from ..db import models


class AvailabilityError(Exception):
    retryable = False


class StoreReadError(AvailabilityError):
    """Schedule or booking data could not be loaded.

    Never to be read as "no slots" or "fully booked".
    """

    retryable = True


@dataclass(frozen=True, slots=True)
class StoredSlot:
    id: str
    start_time: str
    end_time: str


@dataclass(frozen=True, slots=True)
class StoredOverride:
    id: int
    is_available: bool
    slots: list[StoredSlot] = field(default_factory=list)


class ScheduleStore:
    """Read access the engine needs from persistence."""

    def get_override(self, course_id: str, day: CalendarDate) -> StoredOverride | None:
        raise NotImplementedError

    def special_slots(self, course_id: str) -> list[StoredSlot]:
        raise NotImplementedError

    def recurring_slots(
        self, course_id: str, day_of_week: int
    ) -> tuple[list[StoredSlot], list[StoredSlot]]:
        """Return ``(course_specific, global)`` active slots for the weekday."""
        raise NotImplementedError

    def booked_seats(self, slot_ids: Iterable[str], day: CalendarDate) -> dict[str, int]:
        raise NotImplementedError


StoreFactory = Callable[[], ContextManager[ScheduleStore]]


def _stored(slot) -> StoredSlot:
    return StoredSlot(id=slot.id, start_time=slot.start_time, end_time=slot.end_time)


class SqlScheduleStore(ScheduleStore):
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_override(self, course_id: str, day: CalendarDate) -> StoredOverride | None:
        try:
            override = self.db.execute(
                select(models.DateOverride).where(
                    models.DateOverride.course_id == course_id,
                    models.DateOverride.override_date == day.to_date(),
                )
            ).scalar_one_or_none()
            if override is None:
                return None
            slots: list[models.OverrideSlot] = []
            if override.is_available:
                slots = list(
                    self.db.execute(
                        select(models.OverrideSlot)
                        .where(
                            models.OverrideSlot.override_id == override.id,
                            models.OverrideSlot.is_active.is_(True),
                        )
                        .order_by(models.OverrideSlot.start_time, models.OverrideSlot.id)
                    )
                    .scalars()
                    .all()
                )
        except SQLAlchemyError as exc:
            raise StoreReadError(
                f"Failed to load date override for {course_id} on {day}"
            ) from exc
        return StoredOverride(
            id=override.id,
            is_available=override.is_available,
            slots=[_stored(slot) for slot in slots],
        )

    def special_slots(self, course_id: str) -> list[StoredSlot]:
        try:
            slots = (
                self.db.execute(
                    select(models.SpecialRecurringSlot)
                    .where(
                        models.SpecialRecurringSlot.course_id == course_id,
                        models.SpecialRecurringSlot.is_active.is_(True),
                    )
                    .order_by(
                        models.SpecialRecurringSlot.start_time,
                        models.SpecialRecurringSlot.id,
                    )
                )
                .scalars()
                .all()
            )
        except SQLAlchemyError as exc:
            raise StoreReadError(f"Failed to load first-Sunday slots for {course_id}") from exc
        return [_stored(slot) for slot in slots]

    def recurring_slots(
        self, course_id: str, day_of_week: int
    ) -> tuple[list[StoredSlot], list[StoredSlot]]:
        try:
            slots = (
                self.db.execute(
                    select(models.RecurringSlot)
                    .where(
                        (models.RecurringSlot.course_id == course_id)
                        | models.RecurringSlot.course_id.is_(None),
                        models.RecurringSlot.day_of_week == day_of_week,
                        models.RecurringSlot.is_active.is_(True),
                    )
                    .order_by(models.RecurringSlot.start_time, models.RecurringSlot.id)
                )
                .scalars()
                .all()
            )
        except SQLAlchemyError as exc:
            raise StoreReadError(
                f"Failed to load weekly slots for {course_id} on day {day_of_week}"
            ) from exc
        course_specific = [_stored(slot) for slot in slots if slot.course_id is not None]
        global_slots = [_stored(slot) for slot in slots if slot.course_id is None]
        return course_specific, global_slots

    def booked_seats(self, slot_ids: Iterable[str], day: CalendarDate) -> dict[str, int]:
        ids = list(slot_ids)
        if not ids:
            return {}
        try:
            rows = self.db.execute(
                select(
                    models.Booking.slot_reference_id,
                    func.coalesce(func.sum(models.Booking.participants), 0),
                )
                .where(
                    models.Booking.slot_reference_id.in_(ids),
                    models.Booking.booking_date == day.to_date(),
                    models.Booking.status.in_(models.ACTIVE_BOOKING_STATUSES),
                )
                .group_by(models.Booking.slot_reference_id)
            ).all()
        except SQLAlchemyError as exc:
            raise StoreReadError(f"Failed to load bookings for {day}") from exc
        return {slot_id: int(total or 0) for slot_id, total in rows}


@contextmanager
def session_store(session_factory: sessionmaker) -> Iterator[SqlScheduleStore]:
    db = session_factory()
    try:
        yield SqlScheduleStore(db)
    finally:
        db.close()


def sql_store_factory(session_factory: sessionmaker) -> StoreFactory:
    return lambda: session_store(session_factory)


__all__ = [
    "AvailabilityError",
    "StoreReadError",
    "StoredSlot",
    "StoredOverride",
    "ScheduleStore",
    "StoreFactory",
    "SqlScheduleStore",
    "session_store",
    "sql_store_factory",
]
