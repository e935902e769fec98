# booking_engine/services/availability/time_windows.py
"""
Wall-clock window helpers shared by the hours and staff validators.

Hours and staff rules are stored as local times of day. A rule is anchored on
a concrete local date to get a real span:
    09:00-17:00 on Mon -> Mon 09:00 .. Mon 17:00
    22:00-02:00 on Mon -> Mon 22:00 .. Tue 02:00   (overnight)
    18:00-00:00 on Mon -> Mon 18:00 .. Tue 00:00   (00:00 end means midnight)
Coverage is closed containment on both ends so back-to-back slots fit.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Generic, List, Optional, Tuple, TypeVar
from uuid import UUID

from booking_engine.utils.time_normalizer import to_local

MIDNIGHT = time(0, 0)
FULL_DAY_END = time(23, 59)


@dataclass(frozen=True)
class LocalSlot:
    """Candidate interval as naive wall-clock datetimes in the business zone"""
    start: datetime
    end: datetime

    @classmethod
    def from_utc(cls, start: datetime, end: datetime, zone_name: str) -> "LocalSlot":
        return cls(
            start=to_local(start, zone_name).replace(tzinfo=None),
            end=to_local(end, zone_name).replace(tzinfo=None),
        )

    @property
    def day(self) -> date:
        return self.start.date()

    def anchor_days(self) -> Tuple[date, date]:
        """Local date of the start, then the previous date for overnight spill-over"""
        return self.day, self.day - timedelta(days=1)


def anchored_span(anchor: date, start: time, end: time) -> Tuple[datetime, datetime]:
    span_start = datetime.combine(anchor, start)
    if end == MIDNIGHT or end <= start:
        span_end = datetime.combine(anchor + timedelta(days=1), end)
    else:
        span_end = datetime.combine(anchor, end)
    return span_start, span_end


def span_covers(anchor: date, start: time, end: time, slot: LocalSlot) -> bool:
    span_start, span_end = anchored_span(anchor, start, end)
    return span_start <= slot.start and slot.end <= span_end


def is_full_day_block(start: time, end: time) -> bool:
    """Exception window from 00:00 through 23:59 or later (or through midnight)"""
    return start == MIDNIGHT and (end >= FULL_DAY_END or end == MIDNIGHT)


T = TypeVar("T")


@dataclass
class PrefetchedIntervals(Generic[T]):
    """Intervals loaded once for a whole window and filtered per candidate in memory"""
    start: datetime
    end: datetime
    exclude_booking_id: Optional[UUID]
    intervals: List[T]

    def covers(self, start: datetime, end: datetime, exclude_booking_id: Optional[UUID]) -> bool:
        return (
            self.start <= start
            and end <= self.end
            and self.exclude_booking_id == exclude_booking_id
        )

    def overlapping(self, start: datetime, end: datetime) -> List[T]:
        return [interval for interval in self.intervals if interval.overlaps(start, end)]
