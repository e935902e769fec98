"""
Pydantic schemas for booking commits, updates and booking records
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, timedelta
from uuid import UUID

from booking_engine.models import Booking, BookingStatus
from booking_engine.utils.time_normalizer import to_display_zone


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class BookingCreateRequest(BaseModel):
    """Commit a booking for one exact slot"""
    customer_id: UUID
    business_id: UUID
    service_id: UUID
    booking_time: str = Field(..., description="ISO-8601; without an offset it is read in the business time zone")
    staff_id: Optional[UUID] = None
    resource_type_id: Optional[UUID] = None
    resource_quantity: int = Field(1, ge=1)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator('booking_time')
    @classmethod
    def validate_booking_time(cls, v):
        if not v or not v.strip():
            raise ValueError('booking_time cannot be empty')
        return v.strip()


class BookingUpdateRequest(BaseModel):
    """
    Partial update. Only fields present in the payload are applied;
    an explicit null staff_id clears the assignment.
    """
    booking_time: Optional[str] = None
    staff_id: Optional[UUID] = None
    status: Optional[BookingStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator('booking_time')
    @classmethod
    def validate_booking_time(cls, v):
        if v is not None and not v.strip():
            raise ValueError('booking_time cannot be empty')
        return v.strip() if v else v


# ============================================================================
# Response Schemas (for outgoing data)
# ============================================================================

class BookingRecord(BaseModel):
    """A persisted booking with its resolved relations"""
    id: UUID
    business_id: UUID
    customer_id: UUID
    service_id: UUID
    staff_id: Optional[UUID] = None
    booking_time: datetime
    end_time: datetime
    local_start: str
    timezone: str
    status: BookingStatus
    notes: Optional[str] = None
    resource_type_id: Optional[UUID] = None
    resource_quantity: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_booking(cls, booking: Booking, zone_name: str) -> "BookingRecord":
        usage = booking.resource_usages[0] if booking.resource_usages else None
        return cls(
            id=booking.id,
            business_id=booking.business_id,
            customer_id=booking.customer_id,
            service_id=booking.service_id,
            staff_id=booking.staff_id,
            booking_time=booking.booking_time,
            end_time=booking.booking_time + timedelta(minutes=booking.service.duration_minutes),
            local_start=to_display_zone(booking.booking_time, zone_name),
            timezone=zone_name,
            status=booking.status,
            notes=booking.notes,
            resource_type_id=usage.resource_type_id if usage else None,
            resource_quantity=usage.quantity if usage else None,
            created_at=booking.created_at,
        )
