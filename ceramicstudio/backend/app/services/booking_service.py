from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.calendar_date import CalendarDate
from ..db import models
from ..db.models.booking import ACTIVE_BOOKING_STATUSES, BookingStatus
from . import events as ev
from .availability_service import format_time, resolve
from .capacity_service import SlotCapacity, with_capacity
from .schedule_store import SqlScheduleStore


class BookingError(Exception):
    pass


@dataclass(slots=True)
class BookingResult:
    booking: models.Booking
    capacity: SlotCapacity


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _slot_capacity(
    db: Session,
    course: models.Course,
    day: CalendarDate,
    slot_id: str,
    events: ev.EventSink | None = None,
) -> SlotCapacity | None:
    store = SqlScheduleStore(db)
    windows = [window for window in resolve(course, day, store, events) if window.id == slot_id]
    if not windows:
        return None
    return with_capacity(course, day, windows, store, events)[0]


def _lock_course(db: Session, course_id: str) -> models.Course:
    # serializes seat checks of concurrent bookings for the same course
    return db.execute(
        select(models.Course).where(models.Course.id == course_id).with_for_update()
    ).scalar_one()


def create_booking(
    db: Session,
    course: models.Course,
    *,
    slot_id: str,
    booking_date: CalendarDate,
    today: CalendarDate,
    customer_name: str,
    customer_email: str,
    participants: int = 1,
    notes: str | None = None,
    status: BookingStatus = BookingStatus.confirmed,
    events: ev.EventSink | None = None,
) -> BookingResult:
    if participants < 1:
        raise BookingError("At least one participant is required")
    if status not in ACTIVE_BOOKING_STATUSES:
        raise BookingError("New bookings must be pending or confirmed")
    if booking_date < today:
        raise BookingError("Booking date is in the past")
    try:
        locked_course = _lock_course(db, course.id)
        capacity = _slot_capacity(db, locked_course, booking_date, slot_id, events)
        if capacity is None:
            raise BookingError("Slot is not available on this date")
        if capacity.remaining_seats < participants:
            raise BookingError("No free seats")
        window = capacity.window
        booking = models.Booking(
            course_id=locked_course.id,
            slot_reference_id=window.id,
            booking_date=booking_date.to_date(),
            start_time=format_time(window.start_time),
            end_time=format_time(window.end_time),
            participants=participants,
            status=status,
            customer_name=customer_name.strip(),
            customer_email=customer_email.strip(),
            notes=notes,
        )
        db.add(booking)
        db.commit()
    except Exception:
        # releases the course row lock
        db.rollback()
        raise
    db.refresh(booking)
    refreshed = _slot_capacity(db, course, booking_date, slot_id, events)
    return BookingResult(booking=booking, capacity=refreshed or capacity)


def cancel_booking(db: Session, booking: models.Booking, actor: str) -> models.Booking:
    if booking.status not in ACTIVE_BOOKING_STATUSES:
        raise BookingError("Cannot cancel")
    booking.status = BookingStatus.cancelled
    booking.cancelled_at = _utc_now()
    booking.cancelled_by = actor
    db.commit()
    db.refresh(booking)
    return booking


def update_status(
    db: Session, booking: models.Booking, status: BookingStatus, actor: str
) -> models.Booking:
    if booking.status == status:
        return booking
    if status == BookingStatus.cancelled:
        return cancel_booking(db, booking, actor)
    if status in ACTIVE_BOOKING_STATUSES and booking.status not in ACTIVE_BOOKING_STATUSES:
        # reactivating takes seats again
        course = _lock_course(db, booking.course_id)
        capacity = _slot_capacity(
            db,
            course,
            CalendarDate.from_date(booking.booking_date),
            booking.slot_reference_id,
        )
        if capacity is None or capacity.remaining_seats < booking.participants:
            db.rollback()
            raise BookingError("No free seats")
        booking.cancelled_at = None
        booking.cancelled_by = None
    booking.status = status
    db.commit()
    db.refresh(booking)
    return booking


def add_participant(
    db: Session, booking: models.Booking, participant_name: str
) -> models.Booking:
    name = participant_name.strip()
    if not name:
        raise BookingError("Participant name is required")
    if booking.status not in ACTIVE_BOOKING_STATUSES:
        raise BookingError("Booking is not active")
    course = _lock_course(db, booking.course_id)
    capacity = _slot_capacity(
        db,
        course,
        CalendarDate.from_date(booking.booking_date),
        booking.slot_reference_id,
    )
    if capacity is None or capacity.remaining_seats < 1:
        db.rollback()
        raise BookingError("No free seats")

    number = booking.participants + 1
    line = f"Teilnehmer {number}: {name}"
    notes = (booking.notes or "").strip()
    if not notes:
        notes = f"Teilnehmer:\n{line}"
    elif "Teilnehmer:" in notes:
        notes = f"{notes}\n{line}"
    else:
        notes = f"{notes}\n\nTeilnehmer:\n{line}"

    booking.participants = number
    booking.notes = notes
    db.commit()
    db.refresh(booking)
    return booking
