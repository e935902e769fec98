# ===== booking_engine/services/availability/availability_service.py =====
"""
Availability resolver.

One check plan per request, selected by the effective allocation mode:

    every mode         business hours
    TimeOnly           no business-wide conflict
    staff supplied     staff availability, no staff conflict
    resource supplied  resource capacity
    customer supplied  no customer conflict

StaffOnly requires a staff member, ResourceOnly a resource type and
StaffAndResource both. Enumeration and the commit path evaluate the same plan.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from booking_engine.config.settings import settings
from booking_engine.core.exceptions import (
    EntityNotFound,
    InvalidRequest,
    ServiceNotFound,
    StaffCannotProvideService,
)
from booking_engine.models import AllocationMode, Business, ResourceType, Service, Staff
from booking_engine.services.availability.business_hours_validator import BusinessHoursValidator
from booking_engine.services.availability.conflict_detector import ConflictDetector
from booking_engine.services.availability.resource_capacity_validator import ResourceCapacityValidator
from booking_engine.services.availability.staff_availability_validator import StaffAvailabilityValidator
from booking_engine.services.schedule.schedule_store import ConflictScope, ScheduleStore, translate_store_errors
from booking_engine.utils.time_normalizer import (
    get_zone,
    normalize,
    resolve_business_timezone,
    to_display_zone,
)

logger = logging.getLogger(__name__)


@dataclass
class CheckPlan:
    """Everything needed to decide one slot, resolved and validated up front"""
    business: Business
    service: Service
    mode: AllocationMode
    timezone: str
    staff: Optional[Staff] = None
    resource_type: Optional[ResourceType] = None
    resource_quantity: int = 1
    customer_id: Optional[UUID] = None

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.service.duration_minutes)

    @property
    def checks(self) -> List[str]:
        names = ["business_hours"]
        if self.mode == AllocationMode.TIME_ONLY:
            names.append("business_conflict")
        if self.staff is not None:
            names.extend(["staff_availability", "staff_conflict"])
        if self.resource_type is not None:
            names.append("resource_capacity")
        if self.customer_id is not None:
            names.append("customer_conflict")
        return names


@dataclass
class AvailableSlot:
    start: datetime
    end: datetime
    local_start: str
    local_end: str
    timezone: str


@dataclass
class AvailabilityResult:
    business_id: UUID
    service_id: UUID
    mode: AllocationMode
    timezone: str
    window_start: datetime
    window_end: datetime
    interval_minutes: int
    slots: List[AvailableSlot] = field(default_factory=list)


class SlotChecker:
    """Runs a plan's checks for single candidates, short-circuiting on the first failure"""

    def __init__(self, store: ScheduleStore, plan: CheckPlan):
        self.store = store
        self.plan = plan
        self.hours = BusinessHoursValidator(store)
        self.staff = StaffAvailabilityValidator(store)
        self.capacity = ResourceCapacityValidator(store)
        self.conflicts = ConflictDetector(store)

    def prefetch(self, start: datetime, end: datetime, exclude_booking_id: Optional[UUID] = None) -> None:
        """Load staff rules and booking intervals the plan needs for [start, end] in one pass per scope"""
        plan = self.plan
        if plan.mode == AllocationMode.TIME_ONLY:
            self.conflicts.prefetch(ConflictScope.BUSINESS, plan.business.id, start, end, exclude_booking_id)
        if plan.staff is not None:
            self.staff.prefetch(plan.staff, start, end, plan.timezone)
            self.conflicts.prefetch(ConflictScope.STAFF, plan.staff.id, start, end, exclude_booking_id)
        if plan.resource_type is not None:
            self.capacity.prefetch(plan.resource_type.id, start, end, exclude_booking_id)
        if plan.customer_id is not None:
            self.conflicts.prefetch(ConflictScope.CUSTOMER, plan.customer_id, start, end, exclude_booking_id)

    def _passes(self, check: str, start: datetime, end: datetime, exclude_booking_id: Optional[UUID]) -> bool:
        plan = self.plan
        if check == "business_hours":
            return self.hours.is_within_hours(plan.business, start, end, plan.timezone)
        if check == "business_conflict":
            return not self.conflicts.has_conflict(
                ConflictScope.BUSINESS, plan.business.id, start, end, exclude_booking_id
            )
        if check == "staff_availability":
            return self.staff.is_staff_available(plan.staff, start, end, plan.timezone)
        if check == "staff_conflict":
            return not self.conflicts.has_conflict(
                ConflictScope.STAFF, plan.staff.id, start, end, exclude_booking_id
            )
        if check == "resource_capacity":
            return self.capacity.has_capacity(
                plan.resource_type, start, end, plan.resource_quantity, exclude_booking_id
            )
        if check == "customer_conflict":
            return not self.conflicts.has_conflict(
                ConflictScope.CUSTOMER, plan.customer_id, start, end, exclude_booking_id
            )
        raise ValueError(f"Unknown check: {check}")

    def first_failure(self, start: datetime, exclude_booking_id: Optional[UUID] = None) -> Optional[str]:
        """Name of the first failing check for a slot starting at `start`, or None if it is free"""
        end = start + self.plan.duration
        for check in self.plan.checks:
            if not self._passes(check, start, end, exclude_booking_id):
                return check
        return None

    def is_available(self, start: datetime, exclude_booking_id: Optional[UUID] = None) -> bool:
        return self.first_failure(start, exclude_booking_id) is None


class AvailabilityService:
    """Resolves bookable slots for a business and service"""

    @staticmethod
    def build_plan(
            store: ScheduleStore,
            business_id: UUID,
            service_id: UUID,
            staff_id: Optional[UUID] = None,
            resource_type_id: Optional[UUID] = None,
            resource_quantity: int = 1,
            customer_id: Optional[UUID] = None,
            business: Optional[Business] = None
    ) -> CheckPlan:
        """
        Resolve and validate everything a slot check depends on.

        Raises:
            EntityNotFound: business missing or inactive; staff, resource type or customer missing
            ServiceNotFound: service missing or not offered by the business
            StaffCannotProvideService: staff outside the business or without the service
            InvalidRequest: mode requirements missing or inconsistent
        """
        if business is None:
            business = store.get_business(business_id)
        if business is None or not business.is_active:
            raise EntityNotFound("Business", business_id)

        service = store.get_service(business.id, service_id)
        if service is None:
            raise ServiceNotFound(service_id, business.id)

        mode = service.booking_mode or business.allocation_mode

        # ========================================
        # Staff
        # ========================================
        staff = None
        if staff_id is None and mode.requires_staff:
            raise InvalidRequest(
                f"Allocation mode {mode.value} requires a staff member",
                details={"mode": mode.value},
            )
        if staff_id is not None:
            staff = store.get_staff(staff_id)
            if staff is None:
                raise EntityNotFound("Staff", staff_id)
            if staff.business_id != business.id:
                raise StaffCannotProvideService(
                    f"Staff {staff_id} does not work for business {business.id}",
                    details={"staff_id": str(staff_id), "business_id": str(business.id)},
                )
            if not staff.is_active or not store.staff_provides_service(staff.id, service.id):
                raise StaffCannotProvideService(
                    f"Staff {staff_id} cannot provide service {service.id}",
                    details={"staff_id": str(staff_id), "service_id": str(service.id)},
                )

        # ========================================
        # Resource type
        # ========================================
        if resource_quantity is None or resource_quantity < 1:
            raise InvalidRequest(
                "Resource quantity must be at least 1",
                details={"resource_quantity": resource_quantity},
            )

        required_types = list(service.required_resource_types)
        if resource_type_id is None and mode.requires_resource:
            if len(required_types) == 1:
                resource_type_id = required_types[0].id
            else:
                raise InvalidRequest(
                    f"Allocation mode {mode.value} requires a resource type",
                    details={"mode": mode.value},
                )

        resource_type = None
        if resource_type_id is not None:
            resource_type = store.get_resource_type(resource_type_id)
            if resource_type is None or resource_type.business_id != business.id:
                raise EntityNotFound("ResourceType", resource_type_id)
            if required_types and resource_type.id not in {rt.id for rt in required_types}:
                raise InvalidRequest(
                    f"Resource type {resource_type.id} is not used by service {service.id}",
                    details={"resource_type_id": str(resource_type.id)},
                )

        # ========================================
        # Customer
        # ========================================
        if customer_id is not None:
            customer = store.get_customer(customer_id)
            if customer is None or customer.business_id != business.id:
                raise EntityNotFound("Customer", customer_id)

        return CheckPlan(
            business=business,
            service=service,
            mode=mode,
            timezone=resolve_business_timezone(business),
            staff=staff,
            resource_type=resource_type,
            resource_quantity=resource_quantity,
            customer_id=customer_id,
        )

    @staticmethod
    def candidate_starts(
            window_start: datetime,
            window_end: datetime,
            duration: timedelta,
            interval_minutes: int
    ) -> List[datetime]:
        """Slot starts from window_start every interval while start + duration <= window_end"""
        step = timedelta(minutes=interval_minutes)
        starts = []
        current = window_start
        while current + duration <= window_end:
            starts.append(current)
            current += step
        return starts

    @staticmethod
    def resolve_availability(
            db: Session,
            business_id: UUID,
            service_id: UUID,
            window_start: Union[str, datetime],
            window_end: Union[str, datetime],
            interval_minutes: Optional[int] = None,
            staff_id: Optional[UUID] = None,
            resource_type_id: Optional[UUID] = None,
            resource_quantity: int = 1,
            customer_id: Optional[UUID] = None,
            display_timezone: Optional[str] = None
    ) -> AvailabilityResult:
        """
        Enumerate bookable slots in [window_start, window_end].

        Results are advisory: a slot may be taken before it is committed. Failing
        slots are left out, never raised.
        """
        interval = interval_minutes if interval_minutes is not None else settings.DEFAULT_SLOT_INTERVAL_MINUTES
        if interval < 1:
            raise InvalidRequest("Slot interval must be at least 1 minute", details={"interval_minutes": interval})
        if display_timezone:
            get_zone(display_timezone)

        with translate_store_errors("resolve_availability"):
            store = ScheduleStore(db)
            plan = AvailabilityService.build_plan(
                store,
                business_id,
                service_id,
                staff_id=staff_id,
                resource_type_id=resource_type_id,
                resource_quantity=resource_quantity,
                customer_id=customer_id,
            )

            start = normalize(window_start, plan.timezone)
            end = normalize(window_end, plan.timezone)
            if end <= start:
                raise InvalidRequest(
                    "Window end must be after window start",
                    details={"window_start": start.isoformat(), "window_end": end.isoformat()},
                )

            max_slots = settings.MAX_CANDIDATE_SLOTS
            span = end - start - plan.duration
            candidate_count = 0 if span < timedelta(0) else span // timedelta(minutes=interval) + 1
            if candidate_count > max_slots:
                raise InvalidRequest(
                    f"Window produces {candidate_count} candidate slots, the limit is {max_slots}",
                    details={"candidate_count": candidate_count, "max_candidate_slots": max_slots},
                )

            display_zone = display_timezone or plan.timezone
            result = AvailabilityResult(
                business_id=plan.business.id,
                service_id=plan.service.id,
                mode=plan.mode,
                timezone=display_zone,
                window_start=start,
                window_end=end,
                interval_minutes=interval,
            )

            starts = AvailabilityService.candidate_starts(start, end, plan.duration, interval)
            if not starts:
                return result

            checker = SlotChecker(store, plan)
            checker.prefetch(start, end)

            for slot_start in starts:
                if checker.is_available(slot_start):
                    slot_end = slot_start + plan.duration
                    result.slots.append(AvailableSlot(
                        start=slot_start,
                        end=slot_end,
                        local_start=to_display_zone(slot_start, display_zone),
                        local_end=to_display_zone(slot_end, display_zone),
                        timezone=display_zone,
                    ))

        logger.info(
            f"Resolved {len(result.slots)}/{len(starts)} slots for business {business_id}, "
            f"service {service_id} ({plan.mode.value})"
        )
        return result

    @staticmethod
    def check_slot(
            db: Session,
            business_id: UUID,
            service_id: UUID,
            slot_start: Union[str, datetime],
            staff_id: Optional[UUID] = None,
            resource_type_id: Optional[UUID] = None,
            resource_quantity: int = 1,
            customer_id: Optional[UUID] = None,
            exclude_booking_id: Optional[UUID] = None
    ) -> bool:
        """Whether one exact slot passes the plan, read fresh from the store"""
        with translate_store_errors("check_slot"):
            store = ScheduleStore(db)
            plan = AvailabilityService.build_plan(
                store,
                business_id,
                service_id,
                staff_id=staff_id,
                resource_type_id=resource_type_id,
                resource_quantity=resource_quantity,
                customer_id=customer_id,
            )
            start = normalize(slot_start, plan.timezone)
            return SlotChecker(store, plan).is_available(start, exclude_booking_id)
