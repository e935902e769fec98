import uuid

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from booking_engine.config.database import get_db
from booking_engine.core.exceptions import StaffCannotProvideService
from booking_engine.main import create_app
from booking_engine.models import AllocationMode, Booking, BookingStatus
from tests.utils.scheduling import MONDAY, utc


@pytest.fixture
def client(session_factory):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def clinic(make_business, make_service, make_staff, make_customer):
    business = make_business(mode=AllocationMode.STAFF_ONLY, tz="Europe/London")
    service = make_service(business, duration=30, name="Check-up")
    staff = make_staff(business, services=[service], name="Dr. Lee")
    customer = make_customer(business)
    return business, service, staff, customer


def booking_payload(business, service, customer, booking_time, **extra):
    payload = {
        "customer_id": str(customer.id),
        "business_id": str(business.id),
        "service_id": str(service.id),
        "booking_time": booking_time,
    }
    payload.update(extra)
    return payload


def test_health(client):
    response = client.get("/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    detailed = client.get("/health/detailed")
    assert detailed.json()["database"] == "healthy"


def test_availability_endpoint(client, clinic):
    business, service, staff, customer = clinic

    response = client.get(
        f"/api/v1/businesses/{business.id}/availability",
        params={
            "service_id": str(service.id),
            "staff_id": str(staff.id),
            "window_start": "2026-01-05T08:00:00",
            "window_end": "2026-01-05T10:00:00",
            "interval_minutes": 30,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == "StaffOnly"
    assert body["timezone"] == "Europe/London"
    assert body["total"] == 2
    assert [slot["local_start"] for slot in body["slots"]] == [
        "2026-01-05T09:00:00+00:00",
        "2026-01-05T09:30:00+00:00",
    ]
    assert "X-Correlation-ID" in response.headers


def test_availability_requires_staff_in_staff_mode(client, clinic):
    business, service, staff, customer = clinic

    response = client.get(
        f"/api/v1/businesses/{business.id}/availability",
        params={
            "service_id": str(service.id),
            "window_start": "2026-01-05T08:00:00",
            "window_end": "2026-01-05T10:00:00",
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidRequest"


def test_availability_rejects_malformed_time(client, clinic):
    business, service, staff, customer = clinic

    response = client.get(
        f"/api/v1/businesses/{business.id}/availability",
        params={
            "service_id": str(service.id),
            "staff_id": str(staff.id),
            "window_start": "next monday",
            "window_end": "2026-01-05T10:00:00",
        },
        headers={"X-Correlation-ID": "req-42"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "InvalidTimeFormat"
    assert body["retryable"] is False
    assert body["correlation_id"] == "req-42"


def test_availability_unknown_business(client, clinic):
    business, service, staff, customer = clinic

    response = client.get(
        f"/api/v1/businesses/{uuid.uuid4()}/availability",
        params={
            "service_id": str(service.id),
            "window_start": "2026-01-05T08:00:00",
            "window_end": "2026-01-05T10:00:00",
        },
    )

    assert response.status_code == 404
    assert response.json()["details"]["entity"] == "Business"


def test_commit_then_conflict(client, clinic, db):
    business, service, staff, customer = clinic
    payload = booking_payload(business, service, customer, "2026-01-05T10:00:00", staff_id=str(staff.id))

    created = client.post("/api/v1/bookings", json=payload)
    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "Confirmed"
    assert body["staff_id"] == str(staff.id)
    assert body["local_start"] == "2026-01-05T10:00:00+00:00"

    repeated = client.post("/api/v1/bookings", json=payload)
    assert repeated.status_code == 409
    assert repeated.json()["code"] == "SlotNoLongerAvailable"
    assert repeated.json()["details"]["failed_check"] == "staff_conflict"

    db.expire_all()
    assert db.query(Booking).count() == 1


def test_commit_with_staff_lacking_service(client, clinic, make_staff):
    business, service, staff, customer = clinic
    intern = make_staff(business, name="Intern")

    response = client.post(
        "/api/v1/bookings",
        json=booking_payload(business, service, customer, "2026-01-05T10:00:00", staff_id=str(intern.id)),
    )

    assert response.status_code == 422
    assert response.json()["code"] == "StaffCannotProvideService"
    assert StaffCannotProvideService.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_commit_validates_payload(client, clinic):
    business, service, staff, customer = clinic

    response = client.post(
        "/api/v1/bookings",
        json=booking_payload(business, service, customer, "2026-01-05T10:00:00", resource_quantity=0),
    )
    assert response.status_code == 422


def test_get_and_cancel_booking(client, clinic, make_booking, db):
    business, service, staff, customer = clinic
    booking = make_booking(business, service, customer, utc(MONDAY, 11), staff=staff)

    fetched = client.get(f"/api/v1/bookings/{booking.id}")
    assert fetched.status_code == 200
    assert fetched.json()["end_time"].startswith("2026-01-05T11:30:00")

    cancelled = client.patch(f"/api/v1/bookings/{booking.id}", json={"status": "Cancelled"})
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "Cancelled"

    db.expire_all()
    assert db.query(Booking).one().status == BookingStatus.CANCELLED

    missing = client.get(f"/api/v1/bookings/{uuid.uuid4()}")
    assert missing.status_code == 404


def test_reschedule_through_api(client, clinic, make_booking):
    business, service, staff, customer = clinic
    booking = make_booking(business, service, customer, utc(MONDAY, 11), staff=staff)

    moved = client.patch(f"/api/v1/bookings/{booking.id}", json={"booking_time": "2026-01-05T15:00:00"})

    assert moved.status_code == 200
    assert moved.json()["local_start"] == "2026-01-05T15:00:00+00:00"
    assert moved.json()["staff_id"] == str(staff.id)


def test_list_bookings(client, clinic, make_booking):
    business, service, staff, customer = clinic
    make_booking(business, service, customer, utc(MONDAY, 14), staff=staff)
    make_booking(business, service, customer, utc(MONDAY, 10), staff=staff)
    make_booking(business, service, customer, utc(MONDAY, 12), staff=staff, status=BookingStatus.CANCELLED)

    response = client.get(f"/api/v1/businesses/{business.id}/bookings")
    assert response.status_code == 200
    body = response.json()
    assert body["total_bookings"] == 3
    assert [b["booking_time"][:16] for b in body["bookings"]] == [
        "2026-01-05T10:00", "2026-01-05T12:00", "2026-01-05T14:00"
    ]

    confirmed = client.get(f"/api/v1/businesses/{business.id}/bookings", params={"status": "Confirmed", "limit": 1})
    assert confirmed.json()["total_bookings"] == 2
    assert confirmed.json()["page"]["total_pages"] == 2
    assert len(confirmed.json()["bookings"]) == 1


def test_setup_report(client, clinic):
    business, service, staff, customer = clinic

    response = client.get(f"/api/v1/businesses/{business.id}/setup")

    assert response.status_code == 200
    body = response.json()
    assert body["overall_status"] == "ready"
    assert body["allocation_mode"] == "StaffOnly"
