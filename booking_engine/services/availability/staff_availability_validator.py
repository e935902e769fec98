# booking_engine/services/availability/staff_availability_validator.py
"""
Staff availability validator.

    available = (positive exception covers OR schedule covers) AND NOT blocked

A full-day block is an EXCEPTION rule on the slot's local date running from
00:00 to 23:59 or later. It wins over every schedule and every other exception
on that date. Any other exception only grants its own exact window.
"""
from datetime import date, datetime, timedelta
import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from booking_engine.models import AvailabilityKind, Staff, StaffAvailability
from booking_engine.services.availability.time_windows import LocalSlot, is_full_day_block, span_covers
from booking_engine.services.schedule.schedule_store import ScheduleStore
from booking_engine.utils.time_normalizer import iso_weekday, resolve_business_timezone, to_local

logger = logging.getLogger(__name__)


def _is_block(rule: StaffAvailability) -> bool:
    return rule.kind == AvailabilityKind.EXCEPTION and is_full_day_block(rule.start_time, rule.end_time)


class StaffAvailabilityValidator:
    """Reads each staff member's rules at most once per date per instance"""

    def __init__(self, store: ScheduleStore):
        self.store = store
        self._rules: Dict[Tuple[UUID, date], List[StaffAvailability]] = {}

    def rules_for(self, staff_id: UUID, on_date: date) -> List[StaffAvailability]:
        key = (staff_id, on_date)
        if key not in self._rules:
            self._rules[key] = self.store.get_staff_rules(staff_id, iso_weekday(on_date), on_date)
        return self._rules[key]

    def prefetch(self, staff: Staff, start: datetime, end: datetime, zone_name: Optional[str] = None) -> None:
        """Load rules for every local date touched by [start, end], plus the day before, in one read"""
        zone = zone_name or resolve_business_timezone(staff.business)
        first_day = to_local(start, zone).date() - timedelta(days=1)
        last_day = to_local(end, zone).date()
        rules = self.store.get_staff_rules_between(staff.id, first_day, last_day)

        day = first_day
        while day <= last_day:
            weekday = iso_weekday(day)
            self._rules[(staff.id, day)] = [
                rule for rule in rules
                if (rule.kind == AvailabilityKind.SCHEDULE and rule.day_of_week == weekday)
                or (rule.kind == AvailabilityKind.EXCEPTION and rule.date == day)
            ]
            day += timedelta(days=1)
        logger.debug(f"Prefetched {len(rules)} rules for staff {staff.id} ({first_day} to {last_day})")

    def is_blocked(self, staff_id: UUID, on_date: date) -> bool:
        return any(_is_block(rule) for rule in self.rules_for(staff_id, on_date))

    def is_staff_available(
        self,
        staff: Staff,
        start: datetime,
        end: datetime,
        zone_name: Optional[str] = None
    ) -> bool:
        zone = zone_name or resolve_business_timezone(staff.business)
        slot = LocalSlot.from_utc(start, end, zone)

        if self.is_blocked(staff.id, slot.day):
            return False

        for anchor in slot.anchor_days():
            # A blocked previous day contributes no overnight coverage
            if anchor != slot.day and self.is_blocked(staff.id, anchor):
                continue
            for rule in self.rules_for(staff.id, anchor):
                if _is_block(rule):
                    continue
                if span_covers(anchor, rule.start_time, rule.end_time, slot):
                    return True
        return False
