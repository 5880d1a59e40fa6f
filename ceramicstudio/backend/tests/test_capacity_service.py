from datetime import date

import pytest

from app.core.calendar_date import CalendarDate
from app.db import models
from app.services import events as ev
from app.services import schedule_service
from app.services.availability_service import resolve
from app.services.capacity_service import effective_capacity, with_capacity
from app.services.schedule_store import ScheduleStore, SqlScheduleStore, StoredSlot

MONDAY = CalendarDate(2025, 11, 3)


def create_course(session, course_id="drehen-grundkurs", **kwargs):
    course = models.Course(id=course_id, title=course_id.title(), **kwargs)
    session.add(course)
    session.commit()
    return course


def add_weekly(session, course_id, day_of_week, start, end):
    slot = models.RecurringSlot(
        course_id=course_id, day_of_week=day_of_week, start_time=start, end_time=end
    )
    session.add(slot)
    session.commit()
    return slot


def add_booking(session, course, slot, day, participants, status=models.BookingStatus.confirmed):
    booking = models.Booking(
        course_id=course.id,
        slot_reference_id=slot.id,
        booking_date=day,
        start_time=slot.start_time,
        end_time=slot.end_time,
        participants=participants,
        status=status,
        customer_name="Anna Keller",
        customer_email="anna@example.com",
    )
    session.add(booking)
    session.commit()
    return booking


def lines_for(session, course, day, events):
    store = SqlScheduleStore(session)
    return with_capacity(course, day, resolve(course, day, store, events), store, events)


def test_monday_with_course_and_global_windows(db_session, events):
    course = create_course(db_session)
    global_slot = add_weekly(db_session, None, 1, "09:00", "12:00")
    add_weekly(db_session, course.id, 1, "14:00", "16:00")
    add_booking(db_session, course, global_slot, date(2025, 11, 3), 3)

    lines = lines_for(db_session, course, MONDAY, events)

    assert [
        (line.window.start_time.strftime("%H:%M"), line.total_capacity, line.remaining_seats)
        for line in lines
    ] == [("09:00", 12, 9), ("14:00", 12, 12)]
    assert lines[0].booked_seats == 3
    assert not lines[0].fully_booked


def test_only_pending_and_confirmed_bookings_take_seats(db_session, events):
    course = create_course(db_session, capacity=10)
    slot = add_weekly(db_session, course.id, 1, "10:00", "12:00")
    add_booking(db_session, course, slot, date(2025, 11, 3), 2)
    add_booking(db_session, course, slot, date(2025, 11, 3), 1, models.BookingStatus.pending)
    add_booking(db_session, course, slot, date(2025, 11, 3), 4, models.BookingStatus.cancelled)
    add_booking(db_session, course, slot, date(2025, 11, 3), 4, models.BookingStatus.completed)
    add_booking(db_session, course, slot, date(2025, 11, 10), 5)

    (line,) = lines_for(db_session, course, MONDAY, events)

    assert line.booked_seats == 3
    assert line.remaining_seats == 7


def test_overbooked_slot_is_clamped_and_reported(db_session, events):
    course = create_course(db_session, capacity=4)
    slot = add_weekly(db_session, course.id, 1, "10:00", "12:00")
    add_booking(db_session, course, slot, date(2025, 11, 3), 3)
    add_booking(db_session, course, slot, date(2025, 11, 3), 3)

    (line,) = lines_for(db_session, course, MONDAY, events)

    assert line.remaining_seats == 0
    assert line.overbooked
    assert line.fully_booked
    assert ev.OVERBOOKED in events.names()


def test_effective_capacity_defaults(db_session):
    standard = schedule_service.create_course(db_session, course_id="handaufbau", title="Handaufbau")
    wheel = schedule_service.create_course(
        db_session, course_id="einsteiger-kurse-topferscheibe", title="Drehen"
    )
    explicit = schedule_service.create_course(
        db_session, course_id="freies-drehen-topferscheibe", title="Freies Drehen", capacity=6
    )

    assert effective_capacity(standard) == 12
    assert effective_capacity(wheel) == 4
    assert effective_capacity(explicit) == 6


class FixedStore(ScheduleStore):
    def __init__(self, booked):
        self.booked = booked

    def get_override(self, course_id, day):
        return None

    def recurring_slots(self, course_id, day_of_week):
        return [StoredSlot(id="slot-1", start_time="10:00", end_time="12:00")], []

    def booked_seats(self, slot_ids, day):
        return {slot_id: self.booked for slot_id in slot_ids}


@pytest.mark.parametrize("capacity, booked", [(1, 0), (4, 4), (4, 9), (12, 11), (12, 30)])
def test_remaining_seats_never_negative(capacity, booked, events):
    course = models.Course(
        id="drehen", title="Drehen", capacity=capacity, capacity_class=models.CapacityClass.standard
    )
    store = FixedStore(booked)

    (line,) = with_capacity(course, MONDAY, resolve(course, MONDAY, store, events), store, events)

    assert line.remaining_seats == max(0, capacity - booked)
    assert 0 <= line.remaining_seats <= line.total_capacity
    assert line.overbooked is (booked > capacity)


def test_no_windows_means_no_lines(events):
    course = models.Course(id="drehen", title="Drehen", capacity=4)
    assert with_capacity(course, MONDAY, [], FixedStore(0), events) == []
