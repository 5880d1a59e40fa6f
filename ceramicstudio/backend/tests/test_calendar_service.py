from contextlib import contextmanager

import pytest

from app.core.calendar_date import CalendarDate
from app.db import models
from app.services.calendar_service import (
    DayState,
    DaySummary,
    day_state,
    month_summary,
    slot_options,
)
from app.services.schedule_store import (
    ScheduleStore,
    SqlScheduleStore,
    StoredOverride,
    StoredSlot,
    StoreReadError,
)

NOVEMBER = CalendarDate(2025, 11, 1)


class MemoryStore(ScheduleStore):
    """Weekly rules per weekday plus fixed bookings, no database."""

    def __init__(self, weekly=None, overrides=None, special=None, booked=None, failing=()):
        self.weekly = weekly or {}
        self.overrides = overrides or {}
        self.special = special or []
        self.booked = booked or {}
        self.failing = set(failing)

    def _check(self, day):
        if day in self.failing:
            raise StoreReadError(f"simulated failure for {day}")

    def get_override(self, course_id, day):
        self._check(day)
        return self.overrides.get(day)

    def special_slots(self, course_id):
        return list(self.special)

    def recurring_slots(self, course_id, day_of_week):
        return list(self.weekly.get(day_of_week, [])), []

    def booked_seats(self, slot_ids, day):
        return {slot_id: self.booked.get((slot_id, day), 0) for slot_id in slot_ids}


def factory_for(store):
    @contextmanager
    def open_store():
        yield store

    return open_store


def make_course(course_id="drehen", capacity=4, rule=models.ScheduleRule.standard):
    return models.Course(
        id=course_id,
        title=course_id.title(),
        capacity=capacity,
        schedule_rule=rule,
        capacity_class=models.CapacityClass.standard,
    )


def test_month_summary_covers_every_day_in_order(events):
    store = MemoryStore(weekly={1: [StoredSlot("mon", "10:00", "12:00")]})

    summary = month_summary(make_course(), NOVEMBER, factory_for(store), events=events)

    assert list(summary) == [day.isoformat() for day in NOVEMBER.month_days()]
    assert len(summary) == 30
    mondays = {"2025-11-03", "2025-11-10", "2025-11-17", "2025-11-24"}
    for key, entry in summary.items():
        if key in mondays:
            assert entry == DaySummary(has_slots=True, remaining_total=4)
        else:
            assert entry == DaySummary(has_slots=False, remaining_total=0)


def test_fully_booked_day_still_has_slots(events):
    day = CalendarDate(2025, 11, 10)
    store = MemoryStore(
        weekly={1: [StoredSlot("mon", "10:00", "12:00")]},
        booked={("mon", day): 6},
    )

    summary = month_summary(make_course(), NOVEMBER, factory_for(store), events=events)

    assert summary["2025-11-10"] == DaySummary(has_slots=True, remaining_total=0)


def test_closed_override_day_has_no_slots(events):
    day = CalendarDate(2025, 11, 17)
    store = MemoryStore(
        weekly={1: [StoredSlot("mon", "10:00", "12:00")]},
        overrides={day: StoredOverride(id=1, is_available=False)},
    )

    summary = month_summary(make_course(), NOVEMBER, factory_for(store), events=events)

    assert summary["2025-11-17"].has_slots is False
    assert summary["2025-11-10"].has_slots is True


def test_parallel_and_sequential_results_match(events):
    store = MemoryStore(
        weekly={
            1: [StoredSlot("mon", "10:00", "12:00")],
            3: [StoredSlot("wed-a", "10:00", "12:00"), StoredSlot("wed-b", "18:00", "20:00")],
        },
        booked={("wed-b", CalendarDate(2025, 11, 12)): 3},
    )
    course = make_course()

    parallel = month_summary(course, NOVEMBER, factory_for(store), max_workers=8, events=events)
    sequential = month_summary(course, NOVEMBER, factory_for(store), max_workers=1, events=events)

    assert parallel == sequential
    assert list(parallel) == list(sequential)
    assert parallel["2025-11-12"] == DaySummary(has_slots=True, remaining_total=5)


def test_failed_day_fails_the_month(events):
    store = MemoryStore(
        weekly={1: [StoredSlot("mon", "10:00", "12:00")]},
        failing={CalendarDate(2025, 11, 20)},
    )

    with pytest.raises(StoreReadError):
        month_summary(make_course(), NOVEMBER, factory_for(store), events=events)


def test_december_sundays_for_special_course(events):
    store = MemoryStore(special=[StoredSlot("sun", "10:00", "13:00")])
    course = make_course(
        "keramik-bemalen-sonntag", capacity=None, rule=models.ScheduleRule.first_sunday_of_month
    )

    summary = month_summary(course, CalendarDate(2025, 12, 1), factory_for(store), events=events)

    sundays = [key for key, entry in summary.items() if entry.has_slots]
    assert sundays == ["2025-12-07", "2025-12-14", "2025-12-21", "2025-12-28"]
    assert summary["2025-12-07"].remaining_total == 12


def test_month_summary_through_sql_store(db_session, events):
    course = models.Course(id="handaufbau", title="Handaufbau", capacity=5)
    db_session.add(course)
    db_session.add(
        models.RecurringSlot(course_id=None, day_of_week=6, start_time="10:00", end_time="13:00")
    )
    db_session.commit()

    @contextmanager
    def shared_store():
        yield SqlScheduleStore(db_session)

    summary = month_summary(course, NOVEMBER, shared_store, max_workers=1, events=events)

    saturdays = [key for key, entry in summary.items() if entry.has_slots]
    assert saturdays == ["2025-11-01", "2025-11-08", "2025-11-15", "2025-11-22", "2025-11-29"]


def test_slot_options_lists_every_window(events):
    store = MemoryStore(
        weekly={1: [StoredSlot("late", "18:00", "20:00"), StoredSlot("early", "09:00", "11:00")]}
    )

    lines = slot_options(make_course(), CalendarDate(2025, 11, 3), store, events)

    assert [line.window.id for line in lines] == ["early", "late"]


def test_day_state():
    today = CalendarDate(2025, 11, 10)
    summary = {
        "2025-11-07": DaySummary(has_slots=True, remaining_total=4),
        "2025-11-10": DaySummary(has_slots=True, remaining_total=4),
        "2025-11-11": DaySummary(has_slots=True, remaining_total=0),
        "2025-11-12": DaySummary(has_slots=False, remaining_total=0),
    }

    assert day_state(summary, CalendarDate(2025, 11, 7), today) == DayState.past
    assert day_state(summary, CalendarDate(2025, 11, 10), today) == DayState.available
    assert day_state(summary, CalendarDate(2025, 11, 11), today) == DayState.fully_booked
    assert day_state(summary, CalendarDate(2025, 11, 12), today) == DayState.unavailable
    assert day_state(summary, CalendarDate(2025, 11, 13), today) == DayState.unresolved
