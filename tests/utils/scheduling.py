"""Dates and helpers shared by the scheduling tests"""
from datetime import date, datetime, time, timezone

# 2026-01-05 is a Monday
MONDAY = date(2026, 1, 5)
TUESDAY = date(2026, 1, 6)
SUNDAY = date(2026, 1, 11)

WEEKDAY_HOURS = [(day, time(9, 0), time(17, 0)) for day in range(1, 6)]


def utc(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def starts(result):
    """Slot starts of an AvailabilityResult as (hour, minute) tuples"""
    return [(slot.start.hour, slot.start.minute) for slot in result.slots]
