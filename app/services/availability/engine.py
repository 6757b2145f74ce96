"""
Availability engine.
Determines whether a calendar day can be booked, given business hours,
the backend's per-day snapshot and the current time.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional, Union
from zoneinfo import ZoneInfo

from app.core.config import settings

from .clock import DateLike, date_key, get_zone, local_now, minutes_since_midnight, to_local_date, weekday_name
from .types import AvailabilityStatus, BusinessHoursConfig, InvalidInput, SnapshotStatus


logger = logging.getLogger(__name__)

BOOKABLE = (AvailabilityStatus.AVAILABLE, AvailabilityStatus.LIMITED)

_SNAPSHOT_TO_STATUS = {
    SnapshotStatus.AVAILABLE: AvailabilityStatus.AVAILABLE,
    SnapshotStatus.LIMITED: AvailabilityStatus.LIMITED,
    SnapshotStatus.FULL: AvailabilityStatus.UNAVAILABLE,
    SnapshotStatus.UNAVAILABLE: AvailabilityStatus.UNAVAILABLE,
}

Snapshot = Mapping[str, Union[str, SnapshotStatus]]
BusinessHoursLike = Union[BusinessHoursConfig, Mapping[str, Any]]


def normalize_snapshot_status(raw: Any) -> AvailabilityStatus:
    """Map a backend status onto the bookable status; anything unknown is unavailable."""
    if raw is None:
        return AvailabilityStatus.UNAVAILABLE
    try:
        return _SNAPSHOT_TO_STATUS[SnapshotStatus(raw)]
    except ValueError:
        return AvailabilityStatus.UNAVAILABLE


def _coerce_business_hours(business_hours: Optional[BusinessHoursLike]) -> Optional[BusinessHoursConfig]:
    if business_hours is None:
        return None
    if isinstance(business_hours, BusinessHoursConfig):
        return business_hours
    return BusinessHoursConfig.from_dict(business_hours)


def get_date_availability(
    day: Optional[DateLike],
    business_hours: Optional[BusinessHoursLike],
    snapshot: Optional[Snapshot],
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> AvailabilityStatus:
    """
    Get the bookable status of a single day.

    Never raises for bad input: invalid dates, malformed config and days
    missing from the snapshot all resolve to UNAVAILABLE.
    """
    if day is None:
        return AvailabilityStatus.UNAVAILABLE

    try:
        zone = tz or get_zone()
        config = _coerce_business_hours(business_hours)
        local_day = to_local_date(day, zone)
    except InvalidInput as e:
        logger.debug(f"Availability input rejected: {e}")
        return AvailabilityStatus.UNAVAILABLE

    if config is None:
        return AvailabilityStatus.UNAVAILABLE

    schedule = config.for_day(weekday_name(local_day))
    if schedule is None or not schedule.is_open:
        return AvailabilityStatus.UNAVAILABLE

    current = local_now(zone, now)
    today = current.date()
    if local_day < today:
        return AvailabilityStatus.UNAVAILABLE
    if local_day == today and minutes_since_midnight(current) >= schedule.time_slot.end_minutes:
        return AvailabilityStatus.UNAVAILABLE

    if not isinstance(snapshot, Mapping):
        return AvailabilityStatus.UNAVAILABLE
    return normalize_snapshot_status(snapshot.get(date_key(local_day)))


def find_earliest_available_date(
    min_date: DateLike,
    max_date: Optional[DateLike],
    business_hours: Optional[BusinessHoursLike],
    snapshot: Optional[Snapshot],
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
    scan_cap_days: Optional[int] = None,
) -> Optional[date]:
    """
    Scan day by day from min_date (inclusive) for the first AVAILABLE or LIMITED day.

    Stops at max_date (inclusive) or after scan_cap_days days, whichever comes first.
    Returns None if nothing bookable is found.
    """
    cap = settings.AVAILABILITY_SCAN_CAP_DAYS if scan_cap_days is None else scan_cap_days
    try:
        zone = tz or get_zone()
        start = to_local_date(min_date, zone)
        end = to_local_date(max_date, zone) if max_date is not None else start + timedelta(days=cap)
        config = _coerce_business_hours(business_hours)
    except InvalidInput as e:
        logger.debug(f"Earliest-date search rejected: {e}")
        return None

    current = start
    days_checked = 0
    while current <= end and days_checked < cap:
        status = get_date_availability(current, config, snapshot, now=now, tz=zone)
        if status in BOOKABLE:
            return current
        current += timedelta(days=1)
        days_checked += 1

    return None


def get_range_availability(
    start: date,
    end: date,
    business_hours: Optional[BusinessHoursLike],
    snapshot: Optional[Snapshot],
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> dict[str, AvailabilityStatus]:
    """Per-day status for every day in [start, end]."""
    result = {}
    current = start
    while current <= end:
        result[date_key(current)] = get_date_availability(current, business_hours, snapshot, now=now, tz=tz)
        current += timedelta(days=1)
    return result
