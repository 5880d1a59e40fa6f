from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timezone
from enum import Enum

from sqlalchemy.orm import Session

from ..core.calendar_date import CalendarDate
from ..core.constants import SYSTEM_ACTOR, WAITLIST_BOOKING_NOTE, WAITLIST_HORIZON_DAYS
from ..db import models
from . import booking_service, notification_service
from .availability_service import format_time
from .calendar_service import slot_options
from .capacity_service import SlotCapacity
from .schedule_store import SqlScheduleStore

logger = logging.getLogger(__name__)


class WaitlistError(Exception):
    pass


class WaitlistAction(str, Enum):
    converted = "converted"
    notified = "notified"


@dataclass(slots=True)
class OpenSlot:
    date: CalendarDate
    capacity: SlotCapacity


@dataclass(slots=True)
class WaitlistOutcome:
    entry: models.WaitlistEntry
    action: WaitlistAction
    slot: OpenSlot
    booking: models.Booking | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def join_waitlist(
    db: Session,
    course: models.Course,
    *,
    customer_name: str,
    customer_email: str,
    participants: int = 1,
    participant_names: str | None = None,
    auto_book: bool = False,
) -> models.WaitlistEntry:
    if participants < 1:
        raise WaitlistError("At least one participant is required")
    entry = models.WaitlistEntry(
        course_id=course.id,
        customer_name=customer_name.strip(),
        customer_email=customer_email.strip(),
        participants=participants,
        participant_names=participant_names,
        auto_book=auto_book,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def leave_waitlist(db: Session, entry: models.WaitlistEntry) -> models.WaitlistEntry:
    if entry.status != models.WaitlistStatus.pending:
        raise WaitlistError("Entry is no longer pending")
    entry.status = models.WaitlistStatus.cancelled
    db.commit()
    db.refresh(entry)
    return entry


def find_open_slot(
    db: Session,
    course: models.Course,
    participants: int,
    today: CalendarDate,
    horizon_days: int = WAITLIST_HORIZON_DAYS,
    now: time | None = None,
) -> OpenSlot | None:
    """First window from ``today`` on with room for ``participants``.

    With ``now`` given, windows of ``today`` that have already started are
    not offered.
    """
    store = SqlScheduleStore(db)
    for offset in range(horizon_days):
        day = today.add_days(offset)
        for line in slot_options(course, day, store):
            if offset == 0 and now is not None and line.window.start_time <= now:
                continue
            if line.remaining_seats >= participants:
                return OpenSlot(date=day, capacity=line)
    return None


def process_waitlist(
    db: Session,
    course: models.Course,
    today: CalendarDate,
    horizon_days: int = WAITLIST_HORIZON_DAYS,
    now: time | None = None,
) -> WaitlistOutcome | None:
    """Serve the oldest pending entry a slot can be found for.

    At most one entry is handled per call so two entries never compete for
    the same freed seats. Entries that cannot be booked or notified stay
    pending and the next entry is tried.
    """
    entries = (
        db.query(models.WaitlistEntry)
        .filter(models.WaitlistEntry.course_id == course.id)
        .filter(models.WaitlistEntry.status == models.WaitlistStatus.pending)
        .order_by(models.WaitlistEntry.created_at, models.WaitlistEntry.id)
        .all()
    )
    for entry in entries:
        slot = find_open_slot(db, course, entry.participants, today, horizon_days, now)
        if slot is None:
            continue
        if entry.auto_book:
            outcome = _convert(db, course, entry, slot, today)
        else:
            outcome = _notify(db, course, entry, slot)
        if outcome is not None:
            return outcome
    return None


def _convert(
    db: Session,
    course: models.Course,
    entry: models.WaitlistEntry,
    slot: OpenSlot,
    today: CalendarDate,
) -> WaitlistOutcome | None:
    notes = WAITLIST_BOOKING_NOTE
    if entry.participant_names:
        notes = f"{notes}\n\n{entry.participant_names}"
    try:
        result = booking_service.create_booking(
            db,
            course,
            slot_id=slot.capacity.window.id,
            booking_date=slot.date,
            today=today,
            customer_name=entry.customer_name,
            customer_email=entry.customer_email,
            participants=entry.participants,
            notes=notes,
        )
    except booking_service.BookingError:
        logger.warning(
            "Waitlist booking failed",
            extra={"entry_id": entry.id, "course_id": course.id, "actor": SYSTEM_ACTOR},
        )
        return None
    entry.status = models.WaitlistStatus.converted
    entry.converted_booking_id = result.booking.id
    entry.converted_at = _now()
    db.commit()
    db.refresh(entry)
    logger.info(
        "Waitlist entry converted",
        extra={"entry_id": entry.id, "booking_id": result.booking.id},
    )
    return WaitlistOutcome(
        entry=entry, action=WaitlistAction.converted, slot=slot, booking=result.booking
    )


def _notify(
    db: Session,
    course: models.Course,
    entry: models.WaitlistEntry,
    slot: OpenSlot,
) -> WaitlistOutcome | None:
    window = slot.capacity.window
    sent = notification_service.notify_waitlist_entry(
        notification_service.WaitlistNotification(
            entry_id=entry.id,
            customer_name=entry.customer_name,
            customer_email=entry.customer_email,
            course_id=course.id,
            course_title=course.title,
            date=slot.date.isoformat(),
            start_time=format_time(window.start_time),
            end_time=format_time(window.end_time),
            available_places=slot.capacity.remaining_seats,
        )
    )
    if not sent:
        return None
    entry.status = models.WaitlistStatus.notified
    entry.notified_at = _now()
    db.commit()
    db.refresh(entry)
    return WaitlistOutcome(entry=entry, action=WaitlistAction.notified, slot=slot)


def courses_with_pending_entries(db: Session) -> list[models.Course]:
    return (
        db.query(models.Course)
        .join(models.WaitlistEntry, models.WaitlistEntry.course_id == models.Course.id)
        .filter(models.WaitlistEntry.status == models.WaitlistStatus.pending)
        .distinct()
        .all()
    )
