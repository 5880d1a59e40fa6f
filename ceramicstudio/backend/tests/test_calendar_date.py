from datetime import date, datetime

import pytest

from app.core.calendar_date import CalendarDate


def test_day_of_week_starts_on_sunday():
    assert CalendarDate(2025, 12, 7).day_of_week == 0
    assert CalendarDate(2025, 11, 3).day_of_week == 1
    assert CalendarDate(2025, 11, 8).day_of_week == 6


def test_parse_and_isoformat_keep_the_civil_date():
    day = CalendarDate.parse("2025-03-09")
    assert day == CalendarDate(2025, 3, 9)
    assert day.isoformat() == "2025-03-09"
    assert str(day) == "2025-03-09"
    assert day.to_date() == date(2025, 3, 9)


@pytest.mark.parametrize("value", ["2025-02-30", "2025/02/01", "25-02-01", "2025-02", "abcd-ef-gh"])
def test_parse_rejects_invalid_dates(value):
    with pytest.raises(ValueError):
        CalendarDate.parse(value)


def test_from_date_rejects_datetimes():
    with pytest.raises(TypeError):
        CalendarDate.from_date(datetime(2025, 12, 7, 23, 30))
    assert CalendarDate.from_date(date(2025, 12, 7)) == CalendarDate(2025, 12, 7)


def test_first_sunday_and_december_flags():
    assert CalendarDate(2025, 11, 2).is_first_sunday_of_month
    assert not CalendarDate(2025, 11, 9).is_first_sunday_of_month
    assert not CalendarDate(2025, 11, 3).is_first_sunday_of_month
    assert CalendarDate(2025, 12, 21).is_december
    assert not CalendarDate(2025, 11, 30).is_december


def test_month_days_and_ordering():
    days = CalendarDate(2024, 2, 14).month_days()
    assert len(days) == 29
    assert days[0] == CalendarDate(2024, 2, 1)
    assert days[-1] == CalendarDate(2024, 2, 29)
    assert days == sorted(days)
    assert CalendarDate(2025, 12, 31).add_days(1) == CalendarDate(2026, 1, 1)
    assert CalendarDate(2025, 1, 31) < CalendarDate(2025, 2, 1)
