# booking_engine/services/schedule/schedule_store.py
"""
Schedule store accessor.

The only component that talks to the database. Every read returns ORM rows or
plain interval records; the validators above it never build queries. Reads
used while enumerating slots are advisory. The commit path re-reads through
the same methods after taking the row locks.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta
import enum
import logging
from typing import Iterator, List, Optional
from uuid import UUID

from sqlalchemy import func, or_, and_
from sqlalchemy.exc import InterfaceError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from booking_engine.core.exceptions import StoreUnavailable
from booking_engine.models import (
    AvailabilityKind,
    Booking,
    BookingStatus,
    Business,
    BusinessHours,
    Customer,
    ResourceType,
    ResourceUsage,
    Service,
    Staff,
    StaffAvailability,
    staff_services,
)

logger = logging.getLogger(__name__)


class ConflictScope(str, enum.Enum):
    BUSINESS = "business"
    STAFF = "staff"
    CUSTOMER = "customer"


@dataclass(frozen=True)
class BookingInterval:
    """Occupied span of one non-cancelled booking: [start, start + its service duration)"""
    booking_id: UUID
    start: datetime
    end: datetime
    staff_id: Optional[UUID] = None
    customer_id: Optional[UUID] = None
    quantity: int = 0

    def overlaps(self, start: datetime, end: datetime) -> bool:
        # Strict overlap: back-to-back intervals do not collide
        return self.start < end and start < self.end


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Surface connectivity, pool and lock timeouts as retryable StoreUnavailable"""
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError) as e:
        logger.warning(f"Store unavailable during {operation}: {e}")
        raise StoreUnavailable(
            f"Schedule store unavailable during {operation}, retry later",
            details={"operation": operation},
        ) from e


class ScheduleStore:
    """Typed reads and writes against one session"""

    def __init__(self, db: Session):
        self.db = db
        self._max_duration_minutes: Optional[int] = None

    # ========================================
    # Entity lookups
    # ========================================

    def get_business(self, business_id: UUID) -> Optional[Business]:
        return self.db.query(Business).filter(Business.id == business_id).first()

    def get_service(self, business_id: UUID, service_id: UUID) -> Optional[Service]:
        """Active service only when it belongs to the business"""
        return self.db.query(Service).filter(
            Service.id == service_id,
            Service.business_id == business_id,
            Service.is_active.is_(True)
        ).first()

    def get_staff(self, staff_id: UUID) -> Optional[Staff]:
        return self.db.query(Staff).filter(Staff.id == staff_id).first()

    def staff_provides_service(self, staff_id: UUID, service_id: UUID) -> bool:
        link = self.db.query(staff_services).filter(
            staff_services.c.staff_id == staff_id,
            staff_services.c.service_id == service_id
        ).first()
        return link is not None

    def get_customer(self, customer_id: UUID) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def get_resource_type(self, resource_type_id: UUID) -> Optional[ResourceType]:
        return self.db.query(ResourceType).filter(ResourceType.id == resource_type_id).first()

    def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    # ========================================
    # Row locks (commit path only)
    # ========================================

    def lock_business(self, business_id: UUID) -> Optional[Business]:
        """SELECT ... FOR UPDATE on the business row; serializes commits per business"""
        return self.db.query(Business).filter(
            Business.id == business_id
        ).with_for_update().first()

    def lock_customer(self, customer_id: UUID) -> Optional[Customer]:
        return self.db.query(Customer).filter(
            Customer.id == customer_id
        ).with_for_update().first()

    # ========================================
    # Hours and staff rules
    # ========================================

    def get_operating_hours(self, business_id: UUID, day_of_week: int) -> List[BusinessHours]:
        return self.db.query(BusinessHours).filter(
            BusinessHours.business_id == business_id,
            BusinessHours.day_of_week == day_of_week
        ).order_by(BusinessHours.start_time).all()

    def get_all_operating_hours(self, business_id: UUID) -> List[BusinessHours]:
        return self.db.query(BusinessHours).filter(
            BusinessHours.business_id == business_id
        ).order_by(BusinessHours.day_of_week, BusinessHours.start_time).all()

    def get_staff_rules(self, staff_id: UUID, day_of_week: int, on_date: date) -> List[StaffAvailability]:
        """Schedule rules for the weekday plus exception rules for the exact date"""
        return self.db.query(StaffAvailability).filter(
            StaffAvailability.staff_id == staff_id,
            or_(
                and_(
                    StaffAvailability.kind == AvailabilityKind.SCHEDULE,
                    StaffAvailability.day_of_week == day_of_week
                ),
                and_(
                    StaffAvailability.kind == AvailabilityKind.EXCEPTION,
                    StaffAvailability.date == on_date
                ),
            )
        ).all()

    def get_staff_rules_between(self, staff_id: UUID, first_day: date, last_day: date) -> List[StaffAvailability]:
        """All schedule rules plus exception rules dated within [first_day, last_day]"""
        return self.db.query(StaffAvailability).filter(
            StaffAvailability.staff_id == staff_id,
            or_(
                StaffAvailability.kind == AvailabilityKind.SCHEDULE,
                and_(
                    StaffAvailability.kind == AvailabilityKind.EXCEPTION,
                    StaffAvailability.date >= first_day,
                    StaffAvailability.date <= last_day
                ),
            )
        ).all()

    def count_staff_rules(self, staff_id: UUID) -> int:
        return self.db.query(func.count(StaffAvailability.id)).filter(
            StaffAvailability.staff_id == staff_id
        ).scalar() or 0

    # ========================================
    # Booking intervals
    # ========================================

    def max_service_duration(self) -> int:
        """Longest service duration in minutes; bounds how far back an overlapping booking can start"""
        if self._max_duration_minutes is None:
            self._max_duration_minutes = self.db.query(func.max(Service.duration_minutes)).scalar() or 0
        return self._max_duration_minutes

    def _overlapping_bookings_query(self, start: datetime, end: datetime, exclude_booking_id: Optional[UUID]):
        earliest_start = start - timedelta(minutes=self.max_service_duration())
        query = self.db.query(Booking, Service.duration_minutes).join(
            Service, Booking.service_id == Service.id
        ).filter(
            Booking.status != BookingStatus.CANCELLED,
            Booking.booking_time < end,
            Booking.booking_time > earliest_start
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        return query

    def booking_intervals(
        self,
        scope: ConflictScope,
        scope_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None
    ) -> List[BookingInterval]:
        """Non-cancelled bookings in scope whose own interval strictly overlaps [start, end)"""
        query = self._overlapping_bookings_query(start, end, exclude_booking_id)

        if scope == ConflictScope.BUSINESS:
            query = query.filter(Booking.business_id == scope_id)
        elif scope == ConflictScope.STAFF:
            query = query.filter(Booking.staff_id == scope_id)
        elif scope == ConflictScope.CUSTOMER:
            query = query.filter(Booking.customer_id == scope_id)
        else:
            raise ValueError(f"Unknown conflict scope: {scope}")

        intervals = []
        for booking, duration in query.order_by(Booking.booking_time).all():
            interval = BookingInterval(
                booking_id=booking.id,
                start=booking.booking_time,
                end=booking.booking_time + timedelta(minutes=duration),
                staff_id=booking.staff_id,
                customer_id=booking.customer_id,
            )
            if interval.overlaps(start, end):
                intervals.append(interval)
        return intervals

    def resource_usage_intervals(
        self,
        resource_type_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None
    ) -> List[BookingInterval]:
        """Usages of a resource type by non-cancelled bookings overlapping [start, end)"""
        query = self._overlapping_bookings_query(start, end, exclude_booking_id).add_columns(
            ResourceUsage.quantity
        ).join(
            ResourceUsage, ResourceUsage.booking_id == Booking.id
        ).filter(
            ResourceUsage.resource_type_id == resource_type_id
        )

        intervals = []
        for booking, duration, quantity in query.order_by(Booking.booking_time).all():
            interval = BookingInterval(
                booking_id=booking.id,
                start=booking.booking_time,
                end=booking.booking_time + timedelta(minutes=duration),
                staff_id=booking.staff_id,
                customer_id=booking.customer_id,
                quantity=quantity,
            )
            if interval.overlaps(start, end):
                intervals.append(interval)
        return intervals

    def resource_usage_sum(
        self,
        resource_type_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None
    ) -> int:
        return sum(
            interval.quantity
            for interval in self.resource_usage_intervals(resource_type_id, start, end, exclude_booking_id)
        )

    # ========================================
    # Writes
    # ========================================

    def create_booking(
        self,
        customer_id: UUID,
        business_id: UUID,
        service_id: UUID,
        booking_time: datetime,
        staff_id: Optional[UUID] = None,
        resource_type_id: Optional[UUID] = None,
        resource_quantity: int = 1,
        notes: Optional[str] = None
    ) -> Booking:
        """Stage booking, staff link and resource usage in the current transaction"""
        booking = Booking(
            customer_id=customer_id,
            business_id=business_id,
            service_id=service_id,
            staff_id=staff_id,
            booking_time=booking_time,
            status=BookingStatus.CONFIRMED,
            notes=notes,
        )
        if resource_type_id is not None:
            booking.resource_usages.append(
                ResourceUsage(resource_type_id=resource_type_id, quantity=resource_quantity)
            )
        self.db.add(booking)
        self.db.flush()
        return booking

    def apply_booking_update(
        self,
        booking: Booking,
        booking_time: Optional[datetime] = None,
        staff_id: Optional[UUID] = None,
        clear_staff: bool = False,
        status: Optional[BookingStatus] = None,
        notes: Optional[str] = None
    ) -> Booking:
        if booking_time is not None:
            booking.booking_time = booking_time
        if clear_staff:
            booking.staff_id = None
        elif staff_id is not None:
            booking.staff_id = staff_id
        if status is not None:
            booking.status = status
        if notes is not None:
            booking.notes = notes
        self.db.flush()
        return booking
