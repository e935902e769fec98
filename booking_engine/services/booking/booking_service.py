# ============================================================================
# booking_engine/services/booking/booking_service.py
# ============================================================================
"""
Booking commit and update.

Both paths take the business and customer row locks first, then re-run the
availability plan for the exact slot and write inside the same transaction.
Two commits racing for the last unit therefore serialize: the second one sees
the first booking and fails with SlotNoLongerAvailable.
"""
from datetime import datetime
import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from booking_engine.core.exceptions import (
    EntityNotFound,
    InsufficientCapacity,
    InvalidRequest,
    SlotNoLongerAvailable,
)
from booking_engine.models import BookingStatus
from booking_engine.schemas.booking import BookingRecord
from booking_engine.services.availability.availability_service import AvailabilityService, SlotChecker
from booking_engine.services.schedule.schedule_store import ScheduleStore, translate_store_errors
from booking_engine.utils.time_normalizer import normalize, resolve_business_timezone

logger = logging.getLogger(__name__)


class _Unset:
    """Marks an update argument the caller did not pass"""

    def __repr__(self):
        return "UNSET"


UNSET = _Unset()


class BookingService:
    """Handles booking commits and updates"""

    @staticmethod
    def create_booking(
            db: Session,
            customer_id: UUID,
            business_id: UUID,
            service_id: UUID,
            booking_time: Union[str, datetime],
            staff_id: Optional[UUID] = None,
            resource_type_id: Optional[UUID] = None,
            resource_quantity: int = 1,
            notes: Optional[str] = None
    ) -> BookingRecord:
        """
        Re-validate one slot and persist the booking atomically.

        Raises:
            EntityNotFound / ServiceNotFound: unknown or foreign references
            StaffCannotProvideService: staff lacks the capability link
            InsufficientCapacity: quantity above the resource type's total capacity
            SlotNoLongerAvailable: the slot failed re-validation
            StoreUnavailable: transient store failure, safe to retry
        """
        with translate_store_errors("create_booking"):
            try:
                store = ScheduleStore(db)

                # Lock order: business, then customer
                business = store.lock_business(business_id)
                if business is None:
                    raise EntityNotFound("Business", business_id)
                customer = store.lock_customer(customer_id)
                if customer is None or customer.business_id != business.id:
                    raise EntityNotFound("Customer", customer_id)

                plan = AvailabilityService.build_plan(
                    store,
                    business.id,
                    service_id,
                    staff_id=staff_id,
                    resource_type_id=resource_type_id,
                    resource_quantity=resource_quantity,
                    customer_id=customer.id,
                    business=business,
                )

                if plan.resource_type is not None and resource_quantity > plan.resource_type.total_capacity:
                    raise InsufficientCapacity(
                        f"Requested {resource_quantity} of resource type {plan.resource_type.id}, "
                        f"total capacity is {plan.resource_type.total_capacity}",
                        details={
                            "resource_type_id": str(plan.resource_type.id),
                            "requested": resource_quantity,
                            "total_capacity": plan.resource_type.total_capacity,
                        },
                    )

                start = normalize(booking_time, plan.timezone)
                failed_check = SlotChecker(store, plan).first_failure(start)
                if failed_check is not None:
                    raise SlotNoLongerAvailable(
                        f"Slot {start.isoformat()} is no longer available",
                        details={"booking_time": start.isoformat(), "failed_check": failed_check},
                    )

                booking = store.create_booking(
                    customer_id=customer.id,
                    business_id=business.id,
                    service_id=plan.service.id,
                    booking_time=start,
                    staff_id=plan.staff.id if plan.staff else None,
                    resource_type_id=plan.resource_type.id if plan.resource_type else None,
                    resource_quantity=resource_quantity,
                    notes=notes,
                )
                db.commit()
                db.refresh(booking)
            except Exception:
                db.rollback()
                raise

        logger.info(
            f"✅ Booking {booking.id} confirmed for customer {customer_id} at {start.isoformat()} "
            f"({plan.mode.value})"
        )
        return BookingRecord.from_booking(booking, plan.timezone)

    @staticmethod
    def update_booking(
            db: Session,
            booking_id: UUID,
            booking_time: Union[str, datetime, _Unset] = UNSET,
            staff_id: Union[UUID, None, _Unset] = UNSET,
            status: Optional[Union[BookingStatus, str]] = None,
            notes: Optional[str] = None
    ) -> BookingRecord:
        """
        Apply a partial update.

        The slot is re-validated, excluding the booking itself, only when the
        time or staff changes or a cancelled booking becomes active again.
        """
        if booking_time is None:
            raise InvalidRequest("booking_time cannot be cleared")

        new_status = None
        if status is not None:
            try:
                new_status = BookingStatus(status)
            except ValueError:
                raise InvalidRequest(f"Invalid booking status: {status}", details={"status": str(status)})

        with translate_store_errors("update_booking"):
            try:
                store = ScheduleStore(db)
                booking = store.get_booking(booking_id)
                if booking is None:
                    raise EntityNotFound("Booking", booking_id)

                business = store.lock_business(booking.business_id)
                store.lock_customer(booking.customer_id)
                db.refresh(booking)

                zone = resolve_business_timezone(business)
                usage = booking.resource_usages[0] if booking.resource_usages else None
                target_staff_id = booking.staff_id if staff_id is UNSET else staff_id
                target_status = new_status or booking.status
                target_time = booking.booking_time
                if booking_time is not UNSET:
                    target_time = normalize(booking_time, zone)

                time_changed = target_time != booking.booking_time
                staff_changed = target_staff_id != booking.staff_id
                reactivated = not booking.status.occupies_time and target_status.occupies_time
                revalidate = target_status.occupies_time and (time_changed or staff_changed or reactivated)

                if revalidate or staff_changed:
                    plan = AvailabilityService.build_plan(
                        store,
                        business.id,
                        booking.service_id,
                        staff_id=target_staff_id,
                        resource_type_id=usage.resource_type_id if usage else None,
                        resource_quantity=usage.quantity if usage else 1,
                        customer_id=booking.customer_id,
                        business=business,
                    )
                    if revalidate:
                        failed_check = SlotChecker(store, plan).first_failure(
                            target_time, exclude_booking_id=booking.id
                        )
                        if failed_check is not None:
                            raise SlotNoLongerAvailable(
                                f"Slot {target_time.isoformat()} is no longer available",
                                details={
                                    "booking_id": str(booking.id),
                                    "booking_time": target_time.isoformat(),
                                    "failed_check": failed_check,
                                },
                            )
                else:
                    logger.debug(f"Booking {booking.id} update skips re-validation")

                store.apply_booking_update(
                    booking,
                    booking_time=target_time if time_changed else None,
                    staff_id=target_staff_id if staff_changed else None,
                    clear_staff=staff_changed and target_staff_id is None,
                    status=new_status,
                    notes=notes,
                )
                db.commit()
                db.refresh(booking)
            except Exception:
                db.rollback()
                raise

        logger.info(f"Booking {booking.id} updated (status={booking.status.value})")
        return BookingRecord.from_booking(booking, zone)
