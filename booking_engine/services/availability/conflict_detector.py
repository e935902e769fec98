# booking_engine/services/availability/conflict_detector.py
"""Booking overlap checks for business-wide, staff and customer scopes"""
from datetime import datetime
import logging
from typing import Dict, Optional, Tuple
from uuid import UUID

from booking_engine.services.availability.time_windows import PrefetchedIntervals
from booking_engine.services.schedule.schedule_store import BookingInterval, ConflictScope, ScheduleStore

logger = logging.getLogger(__name__)


class ConflictDetector:

    def __init__(self, store: ScheduleStore):
        self.store = store
        self._prefetched: Dict[Tuple[ConflictScope, UUID], PrefetchedIntervals[BookingInterval]] = {}

    def prefetch(
        self,
        scope: ConflictScope,
        scope_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None
    ) -> None:
        intervals = self.store.booking_intervals(scope, scope_id, start, end, exclude_booking_id)
        self._prefetched[(scope, scope_id)] = PrefetchedIntervals(start, end, exclude_booking_id, intervals)
        logger.debug(f"Prefetched {len(intervals)} {scope.value} bookings for {scope_id}")

    def has_conflict(
        self,
        scope: ConflictScope,
        scope_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None
    ) -> bool:
        """True when a non-cancelled booking in scope strictly overlaps [start, end)"""
        cached = self._prefetched.get((scope, scope_id))
        if cached is not None and cached.covers(start, end, exclude_booking_id):
            return bool(cached.overlapping(start, end))
        return bool(self.store.booking_intervals(scope, scope_id, start, end, exclude_booking_id))
