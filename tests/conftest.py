import os

# Must be set before booking_engine builds its module-level engine
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")


import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from booking_engine.models import (
    AllocationMode,
    AvailabilityKind,
    Base,
    Booking,
    BookingStatus,
    Business,
    BusinessHours,
    Customer,
    Resource,
    ResourceType,
    ResourceUsage,
    Service,
    Staff,
    StaffAvailability,
)

from tests.utils.scheduling import WEEKDAY_HOURS


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_business(db):
    def _make(mode=AllocationMode.TIME_ONLY, hours=None, tz=None, name="Test Business"):
        business = Business(name=name, allocation_mode=mode, timezone=tz)
        db.add(business)
        db.flush()
        for day, start, end in (WEEKDAY_HOURS if hours is None else hours):
            db.add(BusinessHours(business_id=business.id, day_of_week=day, start_time=start, end_time=end))
        db.commit()
        return business
    return _make


@pytest.fixture
def make_service(db):
    def _make(business, duration=30, booking_mode=None, resource_types=(), name="Consultation"):
        service = Service(
            business_id=business.id,
            name=name,
            duration_minutes=duration,
            booking_mode=booking_mode,
        )
        service.required_resource_types.extend(resource_types)
        db.add(service)
        db.commit()
        return service
    return _make


@pytest.fixture
def make_staff(db):
    def _make(business, services=(), schedule=None, exceptions=(), name="Alex"):
        staff = Staff(business_id=business.id, name=name)
        staff.services.extend(services)
        db.add(staff)
        db.flush()
        for day, start, end in (WEEKDAY_HOURS if schedule is None else schedule):
            db.add(StaffAvailability(
                staff_id=staff.id,
                kind=AvailabilityKind.SCHEDULE,
                day_of_week=day,
                start_time=start,
                end_time=end,
            ))
        for on_date, start, end in exceptions:
            db.add(StaffAvailability(
                staff_id=staff.id,
                kind=AvailabilityKind.EXCEPTION,
                date=on_date,
                start_time=start,
                end_time=end,
            ))
        db.commit()
        return staff
    return _make


@pytest.fixture
def make_resource_type(db):
    def _make(business, capacity=1, name="Table", instances=0):
        resource_type = ResourceType(business_id=business.id, name=name, total_capacity=capacity)
        for i in range(instances):
            resource_type.resources.append(Resource(name=f"{name} {i + 1}"))
        db.add(resource_type)
        db.commit()
        return resource_type
    return _make


@pytest.fixture
def make_customer(db):
    def _make(business, name="Jamie"):
        customer = Customer(business_id=business.id, name=name)
        db.add(customer)
        db.commit()
        return customer
    return _make


@pytest.fixture
def make_booking(db):
    """Insert a booking directly, bypassing availability checks"""
    def _make(business, service, customer, start, staff=None, resource_type=None, quantity=1,
              status=BookingStatus.CONFIRMED):
        booking = Booking(
            business_id=business.id,
            customer_id=customer.id,
            service_id=service.id,
            staff_id=staff.id if staff else None,
            booking_time=start,
            status=status,
        )
        if resource_type is not None:
            booking.resource_usages.append(ResourceUsage(resource_type_id=resource_type.id, quantity=quantity))
        db.add(booking)
        db.commit()
        return booking
    return _make
