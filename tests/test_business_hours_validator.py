from datetime import date, time, timedelta

import pytest

from booking_engine.services.availability.business_hours_validator import BusinessHoursValidator
from booking_engine.services.schedule.schedule_store import ScheduleStore
from tests.utils.scheduling import MONDAY, SUNDAY, utc

FRIDAY = date(2026, 1, 9)
SATURDAY = date(2026, 1, 10)


@pytest.fixture
def validator(db):
    return BusinessHoursValidator(ScheduleStore(db))


def within(validator, business, day, hour, minute=0, duration=30):
    start = utc(day, hour, minute)
    return validator.is_within_hours(business, start, start + timedelta(minutes=duration))


def test_slot_starting_at_opening_is_inside(validator, make_business):
    business = make_business()
    assert within(validator, business, MONDAY, 9, 0)


def test_slot_ending_at_closing_is_inside(validator, make_business):
    business = make_business()
    assert within(validator, business, MONDAY, 16, 30)


def test_slot_past_closing_or_before_opening_is_outside(validator, make_business):
    business = make_business()
    assert not within(validator, business, MONDAY, 16, 31)
    assert not within(validator, business, MONDAY, 8, 59)


def test_day_without_periods_is_closed(validator, make_business):
    business = make_business()
    assert not within(validator, business, SUNDAY, 12, 0)


def test_business_with_no_hours_is_always_closed(validator, make_business):
    business = make_business(hours=[])
    for hour in range(0, 24):
        assert not within(validator, business, MONDAY, hour)


def test_split_periods_are_checked_independently(validator, make_business):
    business = make_business(hours=[(1, time(9, 0), time(12, 0)), (1, time(13, 0), time(17, 0))])

    assert within(validator, business, MONDAY, 11, 30)
    assert not within(validator, business, MONDAY, 11, 45)
    assert not within(validator, business, MONDAY, 12, 30)
    assert within(validator, business, MONDAY, 13, 0)


def test_overlapping_periods_any_covering_period_suffices(validator, make_business):
    business = make_business(hours=[(1, time(9, 0), time(12, 0)), (1, time(11, 0), time(14, 0))])
    assert within(validator, business, MONDAY, 11, 30, duration=60)
    assert within(validator, business, MONDAY, 12, 30)


def test_overnight_period_covers_late_evening_and_early_morning(validator, make_business):
    business = make_business(hours=[(5, time(22, 0), time(2, 0))])

    assert within(validator, business, FRIDAY, 22, 0)
    assert within(validator, business, FRIDAY, 23, 30, duration=60)
    assert within(validator, business, SATURDAY, 0, 30)
    assert within(validator, business, SATURDAY, 1, 30)
    assert not within(validator, business, SATURDAY, 1, 45)
    assert not within(validator, business, FRIDAY, 21, 45)


def test_midnight_end_means_end_of_day(validator, make_business):
    business = make_business(hours=[(1, time(18, 0), time(0, 0))])

    assert within(validator, business, MONDAY, 23, 30)
    assert not within(validator, business, MONDAY, 23, 45)


def test_hours_are_local_to_business_timezone(validator, make_business):
    business = make_business(tz="America/New_York")

    # 14:00 UTC is 09:00 EST
    assert within(validator, business, MONDAY, 14, 0)
    # 21:30 UTC is 16:30 EST
    assert within(validator, business, MONDAY, 21, 30)
    assert not within(validator, business, MONDAY, 9, 0)


def test_periods_read_once_per_weekday(db, make_business, monkeypatch):
    business = make_business()
    store = ScheduleStore(db)
    calls = []
    original = store.get_operating_hours

    def counting(business_id, day_of_week):
        calls.append(day_of_week)
        return original(business_id, day_of_week)

    monkeypatch.setattr(store, "get_operating_hours", counting)
    validator = BusinessHoursValidator(store)

    for minute in range(0, 8 * 60, 15):
        start = utc(MONDAY, 9) + timedelta(minutes=minute)
        validator.is_within_hours(business, start, start + timedelta(minutes=30))

    # Monday plus the preceding Sunday for overnight spill-over
    assert sorted(calls) == [1, 7]
