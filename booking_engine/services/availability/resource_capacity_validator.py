# booking_engine/services/availability/resource_capacity_validator.py
"""
Resource capacity validator.

    has_capacity = total_capacity >= used + required

`used` sums the quantities of every non-cancelled booking of the resource type
whose own interval [booking_time, booking_time + its service duration)
strictly overlaps the candidate.
"""
from datetime import datetime
import logging
from typing import Dict, Optional
from uuid import UUID

from booking_engine.models import ResourceType
from booking_engine.services.availability.time_windows import PrefetchedIntervals
from booking_engine.services.schedule.schedule_store import BookingInterval, ScheduleStore

logger = logging.getLogger(__name__)


class ResourceCapacityValidator:

    def __init__(self, store: ScheduleStore):
        self.store = store
        self._prefetched: Dict[UUID, PrefetchedIntervals[BookingInterval]] = {}

    def prefetch(
        self,
        resource_type_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None
    ) -> None:
        """Load usages for a whole window so per-slot checks stay in memory"""
        intervals = self.store.resource_usage_intervals(resource_type_id, start, end, exclude_booking_id)
        self._prefetched[resource_type_id] = PrefetchedIntervals(start, end, exclude_booking_id, intervals)
        logger.debug(f"Prefetched {len(intervals)} usages for resource type {resource_type_id}")

    def used_quantity(
        self,
        resource_type_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None
    ) -> int:
        cached = self._prefetched.get(resource_type_id)
        if cached is not None and cached.covers(start, end, exclude_booking_id):
            return sum(interval.quantity for interval in cached.overlapping(start, end))
        return self.store.resource_usage_sum(resource_type_id, start, end, exclude_booking_id)

    def has_capacity(
        self,
        resource_type: ResourceType,
        start: datetime,
        end: datetime,
        required_quantity: int,
        exclude_booking_id: Optional[UUID] = None
    ) -> bool:
        used = self.used_quantity(resource_type.id, start, end, exclude_booking_id)
        return resource_type.total_capacity >= used + required_quantity
