from datetime import timedelta

import pytest

from booking_engine.models import AllocationMode, BookingStatus
from booking_engine.services.availability.conflict_detector import ConflictDetector
from booking_engine.services.schedule.schedule_store import ConflictScope, ScheduleStore
from tests.utils.scheduling import MONDAY, utc


@pytest.fixture
def setup(make_business, make_service, make_staff, make_customer):
    business = make_business(mode=AllocationMode.STAFF_ONLY)
    service = make_service(business, duration=60)
    alex = make_staff(business, services=[service], name="Alex")
    sam = make_staff(business, services=[service], name="Sam")
    customer = make_customer(business, name="Jamie")
    other_customer = make_customer(business, name="Robin")
    return business, service, alex, sam, customer, other_customer


def conflict(db, scope, scope_id, start, minutes=30, exclude=None):
    detector = ConflictDetector(ScheduleStore(db))
    return detector.has_conflict(scope, scope_id, start, start + timedelta(minutes=minutes), exclude)


def test_strict_overlap_rule(db, setup, make_booking):
    business, service, alex, sam, customer, _ = setup
    # Occupies 10:00-11:00
    make_booking(business, service, customer, utc(MONDAY, 10), staff=alex)

    assert conflict(db, ConflictScope.STAFF, alex.id, utc(MONDAY, 10, 30))
    assert conflict(db, ConflictScope.STAFF, alex.id, utc(MONDAY, 9, 45))
    assert not conflict(db, ConflictScope.STAFF, alex.id, utc(MONDAY, 11, 0))
    assert not conflict(db, ConflictScope.STAFF, alex.id, utc(MONDAY, 9, 30))


def test_scopes_are_independent(db, setup, make_booking):
    business, service, alex, sam, customer, other_customer = setup
    make_booking(business, service, customer, utc(MONDAY, 10), staff=alex)

    assert conflict(db, ConflictScope.BUSINESS, business.id, utc(MONDAY, 10))
    assert conflict(db, ConflictScope.STAFF, alex.id, utc(MONDAY, 10))
    assert conflict(db, ConflictScope.CUSTOMER, customer.id, utc(MONDAY, 10))
    assert not conflict(db, ConflictScope.STAFF, sam.id, utc(MONDAY, 10))
    assert not conflict(db, ConflictScope.CUSTOMER, other_customer.id, utc(MONDAY, 10))


def test_cancelled_bookings_never_conflict(db, setup, make_booking):
    business, service, alex, sam, customer, _ = setup
    make_booking(business, service, customer, utc(MONDAY, 10), staff=alex, status=BookingStatus.CANCELLED)

    assert not conflict(db, ConflictScope.STAFF, alex.id, utc(MONDAY, 10))
    assert not conflict(db, ConflictScope.BUSINESS, business.id, utc(MONDAY, 10))


def test_completed_bookings_still_conflict(db, setup, make_booking):
    business, service, alex, sam, customer, _ = setup
    make_booking(business, service, customer, utc(MONDAY, 10), staff=alex, status=BookingStatus.COMPLETED)

    assert conflict(db, ConflictScope.STAFF, alex.id, utc(MONDAY, 10))


def test_excluded_booking_is_ignored(db, setup, make_booking):
    business, service, alex, sam, customer, _ = setup
    booking = make_booking(business, service, customer, utc(MONDAY, 10), staff=alex)

    assert not conflict(db, ConflictScope.STAFF, alex.id, utc(MONDAY, 10, 30), exclude=booking.id)


def test_prefetched_window_matches_direct_queries(db, setup, make_booking):
    business, service, alex, sam, customer, _ = setup
    make_booking(business, service, customer, utc(MONDAY, 10), staff=alex)
    make_booking(business, service, customer, utc(MONDAY, 14, 30), staff=alex)

    detector = ConflictDetector(ScheduleStore(db))
    detector.prefetch(ConflictScope.STAFF, alex.id, utc(MONDAY, 9), utc(MONDAY, 17))

    start = utc(MONDAY, 9)
    while start + timedelta(minutes=30) <= utc(MONDAY, 17):
        end = start + timedelta(minutes=30)
        direct = ConflictDetector(ScheduleStore(db)).has_conflict(ConflictScope.STAFF, alex.id, start, end)
        assert detector.has_conflict(ConflictScope.STAFF, alex.id, start, end) == direct
        start += timedelta(minutes=15)
