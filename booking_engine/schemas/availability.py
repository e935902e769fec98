"""
Pydantic schemas for availability queries
"""
from pydantic import BaseModel
from typing import List
from datetime import datetime
from uuid import UUID

from booking_engine.models import AllocationMode


class SlotResponse(BaseModel):
    """One bookable slot, in UTC and in the display time zone"""
    start: datetime
    end: datetime
    local_start: str
    local_end: str

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    business_id: UUID
    service_id: UUID
    mode: AllocationMode
    timezone: str
    window_start: datetime
    window_end: datetime
    interval_minutes: int
    total: int
    slots: List[SlotResponse]

    @classmethod
    def from_result(cls, result) -> "AvailabilityResponse":
        return cls(
            business_id=result.business_id,
            service_id=result.service_id,
            mode=result.mode,
            timezone=result.timezone,
            window_start=result.window_start,
            window_end=result.window_end,
            interval_minutes=result.interval_minutes,
            total=len(result.slots),
            slots=[SlotResponse.model_validate(slot) for slot in result.slots],
        )
