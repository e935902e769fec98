# booking_engine/utils/time_normalizer.py
"""
Time normalization utilities.

Every instant the engine compares is an aware UTC datetime. Raw inputs arrive
as ISO-8601 strings (with or without an offset, "Z" accepted), date-only
strings, SQL style "YYYY-MM-DD HH:MM[:SS]" strings or datetime objects. Values
without offset information are interpreted in the business time zone.
"""
from datetime import date, datetime, time
import logging
import re
from typing import Optional, Union

import pytz

from booking_engine.config.settings import settings
from booking_engine.core.exceptions import InvalidTimeFormat

logger = logging.getLogger(__name__)

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

RawTimestamp = Union[str, datetime, date]


def get_zone(name: Optional[str]) -> pytz.BaseTzInfo:
    """Return the pytz zone for an IANA name; raise InvalidTimeFormat if unknown"""
    if not name:
        return pytz.UTC
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimeFormat(f"Unknown time zone: {name}", details={"timezone": name})


def resolve_business_timezone(business) -> str:
    """
    Effective IANA zone of a business.

    An unset or unrecognised zone falls back to DEFAULT_TIMEZONE so a bad
    stored value never blocks availability queries.
    """
    name = getattr(business, "timezone", None)
    if not name:
        return settings.DEFAULT_TIMEZONE
    try:
        pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(
            f"Business {getattr(business, 'id', None)} has unknown timezone '{name}', "
            f"falling back to {settings.DEFAULT_TIMEZONE}"
        )
        return settings.DEFAULT_TIMEZONE
    return name


def detect_offset(raw: RawTimestamp) -> bool:
    """True when the input carries explicit offset information"""
    if isinstance(raw, datetime):
        return raw.tzinfo is not None
    if isinstance(raw, date):
        return False
    try:
        return _parse_string(raw).tzinfo is not None
    except InvalidTimeFormat:
        return False


def _parse_string(raw: str) -> datetime:
    value = raw.strip()
    if not value:
        raise InvalidTimeFormat("Empty timestamp")

    if _DATE_ONLY.match(value):
        try:
            return datetime.combine(date.fromisoformat(value), time.min)
        except ValueError:
            raise InvalidTimeFormat(f"Invalid date: {raw}", details={"value": raw})

    if value[-1] in ("z", "Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise InvalidTimeFormat(
            f"Invalid timestamp format: {raw}. Expected ISO-8601, e.g. 2024-01-15T09:00:00Z",
            details={"value": raw},
        )


def localize(naive: datetime, zone_name: Optional[str]) -> datetime:
    """Attach a zone to a naive wall-clock datetime"""
    tz = get_zone(zone_name)
    return tz.normalize(tz.localize(naive))


def normalize(raw: RawTimestamp, default_timezone: Optional[str] = "UTC") -> datetime:
    """
    Convert a raw timestamp to an aware UTC datetime.

    Args:
        raw: ISO-8601 / SQL style string, date or datetime
        default_timezone: zone applied when the input has no offset

    Raises:
        InvalidTimeFormat: on malformed input or an unknown zone
    """
    if raw is None:
        raise InvalidTimeFormat("Timestamp is required")

    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, date):
        parsed = datetime.combine(raw, time.min)
    elif isinstance(raw, str):
        parsed = _parse_string(raw)
    else:
        raise InvalidTimeFormat(f"Unsupported timestamp type: {type(raw).__name__}")

    if parsed.tzinfo is None:
        parsed = localize(parsed, default_timezone)
    return parsed.astimezone(pytz.UTC)


def to_local(instant: datetime, zone_name: Optional[str]) -> datetime:
    """UTC instant -> aware datetime in the given zone"""
    if instant.tzinfo is None:
        instant = pytz.UTC.localize(instant)
    return instant.astimezone(get_zone(zone_name))


def to_display_zone(instant: datetime, zone_name: Optional[str]) -> str:
    """Localized ISO-8601 string with offset, for presentation only"""
    return to_local(instant, zone_name).isoformat()


def iso_weekday(value: Union[datetime, date]) -> int:
    """1=Monday ... 7=Sunday"""
    return value.isoweekday()


def minutes_of_day(value: Union[datetime, time]) -> int:
    return value.hour * 60 + value.minute
