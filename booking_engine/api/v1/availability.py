# ============================================================================
# booking_engine/api/v1/availability.py
# Thin HTTP layer over AvailabilityService
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from booking_engine.config.database import get_db
from booking_engine.schemas.availability import AvailabilityResponse
from booking_engine.services.availability.availability_service import AvailabilityService

router = APIRouter(tags=["availability"])


@router.get("/businesses/{business_id}/availability", response_model=AvailabilityResponse)
def resolve_availability(
        business_id: UUID = Path(..., description="The business ID"),
        service_id: UUID = Query(..., description="Service to book"),
        window_start: str = Query(..., description="ISO-8601 window start; no offset means business time zone"),
        window_end: str = Query(..., description="ISO-8601 window end (inclusive for slot ends)"),
        interval_minutes: Optional[int] = Query(None, ge=1, le=1440, description="Step between candidate starts"),
        staff_id: Optional[UUID] = Query(None, description="Required for StaffOnly and StaffAndResource"),
        resource_type_id: Optional[UUID] = Query(None, description="Required for resource modes unless implied by the service"),
        resource_quantity: int = Query(1, ge=1, description="Units of the resource type per booking"),
        customer_id: Optional[UUID] = Query(None, description="Also exclude slots clashing with this customer's bookings"),
        display_timezone: Optional[str] = Query(None, description="IANA zone for local_start/local_end"),
        db: Session = Depends(get_db)
):
    """
    List bookable slots for a service in a window.
    Results are advisory; committing a slot re-validates it.
    """
    result = AvailabilityService.resolve_availability(
        db=db,
        business_id=business_id,
        service_id=service_id,
        window_start=window_start,
        window_end=window_end,
        interval_minutes=interval_minutes,
        staff_id=staff_id,
        resource_type_id=resource_type_id,
        resource_quantity=resource_quantity,
        customer_id=customer_id,
        display_timezone=display_timezone
    )
    return AvailabilityResponse.from_result(result)
