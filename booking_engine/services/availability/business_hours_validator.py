# booking_engine/services/availability/business_hours_validator.py
"""
Business hours validator.

A slot is inside business hours when at least one open period for the slot's
local weekday fully contains it. A weekday without periods is closed.
"""
from datetime import datetime
import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from booking_engine.models import Business, BusinessHours
from booking_engine.services.availability.time_windows import LocalSlot, span_covers
from booking_engine.services.schedule.schedule_store import ScheduleStore
from booking_engine.utils.time_normalizer import iso_weekday, resolve_business_timezone

logger = logging.getLogger(__name__)


class BusinessHoursValidator:
    """Reads each weekday's periods at most once per instance"""

    def __init__(self, store: ScheduleStore):
        self.store = store
        self._periods: Dict[Tuple[UUID, int], List[BusinessHours]] = {}

    def periods_for(self, business_id: UUID, day_of_week: int) -> List[BusinessHours]:
        key = (business_id, day_of_week)
        if key not in self._periods:
            self._periods[key] = self.store.get_operating_hours(business_id, day_of_week)
        return self._periods[key]

    def is_within_hours(
        self,
        business: Business,
        start: datetime,
        end: datetime,
        zone_name: Optional[str] = None
    ) -> bool:
        zone = zone_name or resolve_business_timezone(business)
        slot = LocalSlot.from_utc(start, end, zone)

        for anchor in slot.anchor_days():
            for period in self.periods_for(business.id, iso_weekday(anchor)):
                if span_covers(anchor, period.start_time, period.end_time, slot):
                    return True
        return False
