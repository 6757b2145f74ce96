"""
Internal data types for availability logic.
Decoupled from SQLAlchemy models so the engine stays a pure function of its inputs.
"""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Mapping, Optional


DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]  # date.weekday() order


class InvalidInput(Exception):
    pass


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    LIMITED = "limited"
    UNAVAILABLE = "unavailable"


class SnapshotStatus(str, Enum):
    """Aggregate per-day status as stored/computed on the backend side."""
    AVAILABLE = "available"
    LIMITED = "limited"
    FULL = "full"
    UNAVAILABLE = "unavailable"


def parse_hhmm(value: Any) -> time:
    """Parse an HH:MM string (or pass a time through)."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise InvalidInput(f"Expected HH:MM string, got {value!r}")
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise InvalidInput(f"Invalid time format: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidInput(f"Time out of range: {value!r}")
    return time(hours, minutes)


def format_hhmm(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def to_minutes(value: time) -> int:
    """Minutes since midnight."""
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


@dataclass(frozen=True)
class TimeWindow:
    start: time
    end: time

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def contains(self, start: time, end: time) -> bool:
        return self.start <= start and end <= self.end

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TimeWindow":
        if not isinstance(raw, Mapping):
            raise InvalidInput(f"Time slot must be a mapping with start and end: {raw!r}")
        window = cls(start=parse_hhmm(raw.get("start")), end=parse_hhmm(raw.get("end")))
        if window.end <= window.start:
            raise InvalidInput(f"Time slot end must be after start: {raw!r}")
        return window

    def to_dict(self) -> dict:
        return {"start": format_hhmm(self.start), "end": format_hhmm(self.end)}


@dataclass(frozen=True)
class DaySchedule:
    enabled: bool
    time_slot: Optional[TimeWindow] = None  # ignored when not enabled

    @property
    def is_open(self) -> bool:
        return self.enabled and self.time_slot is not None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DaySchedule":
        enabled = raw.get("enabled", False)
        if not isinstance(enabled, bool):
            raise InvalidInput(f"Schedule 'enabled' must be true or false: {enabled!r}")
        slot_raw = raw.get("timeSlot")
        # Older documents stored a list of windows; the first one wins.
        legacy = raw.get("timeSlots")
        if slot_raw is None and legacy is not None:
            if not isinstance(legacy, list):
                raise InvalidInput(f"timeSlots must be a list: {legacy!r}")
            slot_raw = legacy[0] if legacy else None
        if not enabled:
            return cls(enabled=False, time_slot=None)
        return cls(enabled=True, time_slot=TimeWindow.from_dict(slot_raw) if slot_raw else None)

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "timeSlot": self.time_slot.to_dict() if self.time_slot else None,
        }


@dataclass(frozen=True)
class BusinessHoursConfig:
    """Weekday name (sunday..saturday) -> DaySchedule. Missing days are closed."""
    days: dict[str, DaySchedule] = field(default_factory=dict)

    def for_day(self, day_name: str) -> Optional[DaySchedule]:
        return self.days.get(day_name)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "BusinessHoursConfig":
        if not isinstance(raw, Mapping):
            raise InvalidInput("Business hours must be a mapping of weekday name to schedule")
        days = {}
        for name, schedule in raw.items():
            key = str(name).lower()
            if key not in DAY_NAMES:
                raise InvalidInput(f"Unknown weekday: {name!r}")
            if schedule is not None and not isinstance(schedule, Mapping):
                raise InvalidInput(f"Schedule for {key} must be a mapping")
            days[key] = DaySchedule.from_dict(schedule or {})
        return cls(days=days)

    def to_dict(self) -> dict:
        return {name: schedule.to_dict() for name, schedule in self.days.items()}


@dataclass(frozen=True)
class CapacityPolicy:
    allow_overlapping: bool = True
    max_overlapping: int = 1

    @property
    def capacity(self) -> int:
        return max(self.max_overlapping, 1) if self.allow_overlapping else 1


@dataclass(frozen=True)
class BookedInterval:
    """An existing booking that consumes capacity on a given day."""
    day: date
    start: time
    end: time
    reservation_id: Optional[int] = None


@dataclass
class SlotStatus:
    time: str  # HH:MM
    available: bool
    status: SnapshotStatus
    occupancy: int = 0
    max_occupancy: int = 1
