# ============================================================================
# booking_engine/services/booking/booking_query_service.py
# Read-only booking queries - no FastAPI dependencies
# ============================================================================
from sqlalchemy.orm import Session, selectinload
from datetime import datetime
from typing import Optional, Dict, Any, Union
from uuid import UUID

from booking_engine.core.exceptions import EntityNotFound, InvalidRequest
from booking_engine.models import Booking, BookingStatus
from booking_engine.schemas.booking import BookingRecord
from booking_engine.services.schedule.schedule_store import ScheduleStore, translate_store_errors
from booking_engine.utils.time_normalizer import normalize, resolve_business_timezone


class BookingQueryService:
    """Listing and lookup of bookings"""

    @staticmethod
    def list_bookings(
            db: Session,
            business_id: UUID,
            customer_id: Optional[UUID] = None,
            staff_id: Optional[UUID] = None,
            status: Optional[Union[BookingStatus, str]] = None,
            start: Optional[Union[str, datetime]] = None,
            end: Optional[Union[str, datetime]] = None,
            skip: int = 0,
            limit: int = 50
    ) -> Dict[str, Any]:
        """Get paginated list of bookings with filters, ordered by start time."""
        with translate_store_errors("list_bookings"):
            business = ScheduleStore(db).get_business(business_id)
            if business is None:
                raise EntityNotFound("Business", business_id)
            zone = resolve_business_timezone(business)

            query = db.query(Booking).options(
                selectinload(Booking.service),
                selectinload(Booking.resource_usages)
            ).filter(Booking.business_id == business_id)

            start_utc = normalize(start, zone) if start else None
            end_utc = normalize(end, zone) if end else None
            if start_utc and end_utc and end_utc <= start_utc:
                raise InvalidRequest("end must be after start")

            if start_utc:
                query = query.filter(Booking.booking_time >= start_utc)
            if end_utc:
                query = query.filter(Booking.booking_time < end_utc)
            if customer_id:
                query = query.filter(Booking.customer_id == customer_id)
            if staff_id:
                query = query.filter(Booking.staff_id == staff_id)
            if status:
                try:
                    query = query.filter(Booking.status == BookingStatus(status))
                except ValueError:
                    raise InvalidRequest(f"Invalid booking status: {status}", details={"status": str(status)})

            query = query.order_by(Booking.booking_time.asc())
            total = query.count()
            bookings = query.offset(skip).limit(limit).all()

            return {
                "business_id": str(business_id),
                "total_bookings": total,
                "page": {
                    "skip": skip,
                    "limit": limit,
                    "total_pages": (total + limit - 1) // limit if total > 0 else 0
                },
                "filters": {
                    "customer_id": str(customer_id) if customer_id else None,
                    "staff_id": str(staff_id) if staff_id else None,
                    "status": BookingStatus(status).value if status else None,
                    "start": start_utc.isoformat() if start_utc else None,
                    "end": end_utc.isoformat() if end_utc else None
                },
                "bookings": [BookingRecord.from_booking(booking, zone) for booking in bookings]
            }

    @staticmethod
    def get_booking(db: Session, booking_id: UUID) -> BookingRecord:
        """Get a single booking by ID. Raises EntityNotFound if missing."""
        with translate_store_errors("get_booking"):
            booking = ScheduleStore(db).get_booking(booking_id)
            if booking is None:
                raise EntityNotFound("Booking", booking_id)
            return BookingRecord.from_booking(booking, resolve_business_timezone(booking.business))
