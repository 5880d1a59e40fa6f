from datetime import date

import pytest

from app.core.calendar_date import CalendarDate
from app.db import models
from app.services import booking_service
from app.services.booking_service import BookingError
from app.services.schedule_store import StoreReadError

TODAY = CalendarDate(2025, 11, 1)
MONDAY = CalendarDate(2025, 11, 3)


def create_course(session, course_id="einsteiger-kurse-topferscheibe", **kwargs):
    kwargs.setdefault("capacity_class", models.CapacityClass.pottery_wheel)
    course = models.Course(id=course_id, title="Drehen an der Töpferscheibe", **kwargs)
    session.add(course)
    session.commit()
    return course


def add_weekly(session, course_id, day_of_week=1, start="10:00", end="12:00"):
    slot = models.RecurringSlot(
        course_id=course_id, day_of_week=day_of_week, start_time=start, end_time=end
    )
    session.add(slot)
    session.commit()
    return slot


def book(session, course, slot, participants=1, day=MONDAY, **kwargs):
    return booking_service.create_booking(
        session,
        course,
        slot_id=slot.id,
        booking_date=day,
        today=TODAY,
        customer_name="Anna Keller",
        customer_email="anna@example.com",
        participants=participants,
        **kwargs,
    )


def test_create_booking_copies_window_and_reports_seats(db_session, events):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)

    result = book(db_session, course, slot, participants=3, events=events)

    booking = result.booking
    assert booking.id is not None
    assert booking.slot_reference_id == slot.id
    assert booking.booking_date == date(2025, 11, 3)
    assert (booking.start_time, booking.end_time) == ("10:00", "12:00")
    assert booking.status == models.BookingStatus.confirmed
    assert result.capacity.total_capacity == 4
    assert result.capacity.remaining_seats == 1


def test_booking_beyond_capacity_is_rejected(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)
    book(db_session, course, slot, participants=3)

    with pytest.raises(BookingError, match="No free seats"):
        book(db_session, course, slot, participants=2)

    result = book(db_session, course, slot, participants=1)
    assert result.capacity.remaining_seats == 0
    assert db_session.query(models.Booking).count() == 2


def test_global_slot_can_be_booked(db_session):
    course = create_course(db_session, "handaufbau", capacity_class=models.CapacityClass.standard)
    slot = add_weekly(db_session, None)

    result = book(db_session, course, slot, participants=2)

    assert result.capacity.total_capacity == 12
    assert result.capacity.remaining_seats == 10


def test_booking_in_the_past_is_rejected(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id, day_of_week=5)

    with pytest.raises(BookingError, match="past"):
        book(db_session, course, slot, day=CalendarDate(2025, 10, 31))


def test_slot_must_resolve_on_the_booking_date(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)

    with pytest.raises(BookingError, match="not available"):
        book(db_session, course, slot, day=CalendarDate(2025, 11, 4))
    with pytest.raises(BookingError, match="not available"):
        booking_service.create_booking(
            db_session,
            course,
            slot_id="unknown",
            booking_date=MONDAY,
            today=TODAY,
            customer_name="Anna Keller",
            customer_email="anna@example.com",
        )


def test_closed_override_blocks_booking(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)
    db_session.add(
        models.DateOverride(course_id=course.id, override_date=date(2025, 11, 3), is_available=False)
    )
    db_session.commit()

    with pytest.raises(BookingError):
        book(db_session, course, slot)


def test_new_bookings_must_be_active(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)

    with pytest.raises(BookingError):
        book(db_session, course, slot, status=models.BookingStatus.cancelled)
    with pytest.raises(BookingError):
        book(db_session, course, slot, participants=0)


def test_cancel_frees_seats(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)
    booking = book(db_session, course, slot, participants=4).booking

    cancelled = booking_service.cancel_booking(db_session, booking, actor="admin")

    assert cancelled.status == models.BookingStatus.cancelled
    assert cancelled.cancelled_by == "admin"
    assert cancelled.cancelled_at is not None
    assert book(db_session, course, slot, participants=4).capacity.remaining_seats == 0


def test_cancel_twice_fails(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)
    booking = book(db_session, course, slot).booking
    booking_service.cancel_booking(db_session, booking, actor="admin")

    with pytest.raises(BookingError, match="Cannot cancel"):
        booking_service.cancel_booking(db_session, booking, actor="admin")


def test_reactivation_needs_free_seats(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)
    first = book(db_session, course, slot, participants=2).booking
    booking_service.cancel_booking(db_session, first, actor="admin")
    book(db_session, course, slot, participants=3)

    with pytest.raises(BookingError, match="No free seats"):
        booking_service.update_status(
            db_session, first, models.BookingStatus.confirmed, actor="admin"
        )
    db_session.refresh(first)
    assert first.status == models.BookingStatus.cancelled


def test_status_update_to_completed_and_back(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)
    booking = book(db_session, course, slot, participants=2).booking

    booking_service.update_status(db_session, booking, models.BookingStatus.completed, actor="admin")
    assert booking.status == models.BookingStatus.completed

    booking_service.update_status(db_session, booking, models.BookingStatus.pending, actor="admin")
    assert booking.status == models.BookingStatus.pending


def test_add_participant_updates_notes(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)
    booking = book(db_session, course, slot, notes="Bitte Schürze mitbringen").booking

    booking_service.add_participant(db_session, booking, "Ben")
    booking_service.add_participant(db_session, booking, " Clara ")

    assert booking.participants == 3
    assert booking.notes == (
        "Bitte Schürze mitbringen\n\nTeilnehmer:\nTeilnehmer 2: Ben\nTeilnehmer 3: Clara"
    )


def test_add_participant_respects_capacity(db_session):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)
    booking = book(db_session, course, slot, participants=4).booking

    with pytest.raises(BookingError, match="No free seats"):
        booking_service.add_participant(db_session, booking, "Ben")
    db_session.refresh(booking)
    assert booking.participants == 4


def test_failed_read_releases_the_transaction(db_session, monkeypatch):
    course = create_course(db_session)
    slot = add_weekly(db_session, course.id)

    def broken(*args, **kwargs):
        raise StoreReadError("database unavailable")

    monkeypatch.setattr(booking_service, "_slot_capacity", broken)

    with pytest.raises(StoreReadError):
        book(db_session, course, slot)
    assert not db_session.in_transaction()
    assert db_session.query(models.Booking).count() == 0
