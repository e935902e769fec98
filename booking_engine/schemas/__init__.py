# booking_engine/schemas/__init__.py
from .availability import (
    SlotResponse,
    AvailabilityResponse
)

from .booking import (
    BookingCreateRequest,
    BookingUpdateRequest,
    BookingRecord
)

from .setup import (
    SetupSection,
    StaffSetupSummary,
    SetupReport
)
