"""
Canonical-timezone helpers.

Day keys, weekday lookup and "has today's slot passed" checks all go through
these functions so they agree on which calendar day a moment belongs to.
"""

from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import settings

from .types import DAY_NAMES, InvalidInput


DateLike = Union[date, datetime, str]


@lru_cache(maxsize=16)
def get_zone(name: Optional[str] = None) -> ZoneInfo:
    zone_name = name or settings.RESERVATION_TIMEZONE
    try:
        return ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInput(f"Unknown timezone: {zone_name}") from e


def local_now(tz: Optional[ZoneInfo] = None, now: Optional[datetime] = None) -> datetime:
    """Current wall-clock time in the reporting zone.

    A naive `now` is taken to be UTC.
    """
    zone = tz or get_zone()
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone)


def to_local_date(value: DateLike, tz: Optional[ZoneInfo] = None) -> date:
    """
    Resolve a value to a calendar day in the reporting zone.

    - date: already a calendar day, returned as-is
    - aware datetime: converted to the reporting zone first
    - naive datetime: treated as wall-clock time in the reporting zone
    - str: ISO date or datetime
    """
    zone = tz or get_zone()
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(zone).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return to_local_date(datetime.fromisoformat(text.replace("Z", "+00:00")), zone)
        except ValueError as e:
            raise InvalidInput(f"Invalid date: {value!r}") from e
    raise InvalidInput(f"Unsupported date value: {value!r}")


def date_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def weekday_name(day: date) -> str:
    return DAY_NAMES[day.weekday()]


def local_today(tz: Optional[ZoneInfo] = None, now: Optional[datetime] = None) -> date:
    return local_now(tz, now).date()


def minutes_since_midnight(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute
