# ============================================================================
# booking_engine/api/v1/businesses.py
# Business-scoped booking listing and setup verification
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from booking_engine.config.database import get_db
from booking_engine.models import BookingStatus
from booking_engine.schemas.setup import SetupReport
from booking_engine.services.booking.booking_query_service import BookingQueryService
from booking_engine.services.business.business_setup_service import BusinessSetupService

router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.get("/{business_id}/bookings")
def list_bookings(
        business_id: UUID = Path(..., description="The business ID"),
        customer_id: Optional[UUID] = Query(None, description="Filter by customer"),
        staff_id: Optional[UUID] = Query(None, description="Filter by staff member"),
        status: Optional[BookingStatus] = Query(None, description="Confirmed, Cancelled or Completed"),
        start: Optional[str] = Query(None, description="Bookings starting at or after this time"),
        end: Optional[str] = Query(None, description="Bookings starting before this time"),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        db: Session = Depends(get_db)
):
    """Paginated bookings of a business, oldest first."""
    return BookingQueryService.list_bookings(
        db=db,
        business_id=business_id,
        customer_id=customer_id,
        staff_id=staff_id,
        status=status,
        start=start,
        end=end,
        skip=skip,
        limit=limit
    )


@router.get("/{business_id}/setup", response_model=SetupReport)
def verify_setup(
        business_id: UUID = Path(..., description="The business ID"),
        service_id: Optional[UUID] = Query(None, description="Check one service instead of the whole business"),
        db: Session = Depends(get_db)
):
    """Report whether the business, or one of its services, is ready to take bookings."""
    if service_id:
        return BusinessSetupService.verify_service_setup(db=db, business_id=business_id, service_id=service_id)
    return BusinessSetupService.verify_business_setup(db=db, business_id=business_id)
