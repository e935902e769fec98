# ============================================================================
# booking_engine/api/v1/bookings.py
# Thin HTTP layer over BookingService / BookingQueryService
# ============================================================================
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from booking_engine.config.database import get_db
from booking_engine.schemas.booking import BookingCreateRequest, BookingUpdateRequest, BookingRecord
from booking_engine.services.booking.booking_query_service import BookingQueryService
from booking_engine.services.booking.booking_service import BookingService, UNSET

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingRecord, status_code=status.HTTP_201_CREATED)
def create_booking(
        request: BookingCreateRequest,
        db: Session = Depends(get_db)
):
    """
    Commit a booking for one slot.
    409 means the slot was taken in the meantime: re-query availability.
    """
    logger.info(f"Booking request for business {request.business_id} at {request.booking_time}")
    return BookingService.create_booking(
        db=db,
        customer_id=request.customer_id,
        business_id=request.business_id,
        service_id=request.service_id,
        booking_time=request.booking_time,
        staff_id=request.staff_id,
        resource_type_id=request.resource_type_id,
        resource_quantity=request.resource_quantity,
        notes=request.notes
    )


@router.patch("/{booking_id}", response_model=BookingRecord)
def update_booking(
        request: BookingUpdateRequest,
        booking_id: UUID = Path(..., description="The booking ID"),
        db: Session = Depends(get_db)
):
    """
    Update time, staff, status or notes.
    Only fields present in the body are applied.
    """
    provided = request.model_fields_set
    return BookingService.update_booking(
        db=db,
        booking_id=booking_id,
        booking_time=request.booking_time if "booking_time" in provided else UNSET,
        staff_id=request.staff_id if "staff_id" in provided else UNSET,
        status=request.status,
        notes=request.notes
    )


@router.get("/{booking_id}", response_model=BookingRecord)
def get_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        db: Session = Depends(get_db)
):
    """Get a single booking."""
    return BookingQueryService.get_booking(db=db, booking_id=booking_id)
