"""
Per-slot occupancy and day snapshot building.
Turns existing bookings into the per-day status map the engine consumes.
"""

from datetime import date, time, timedelta
from typing import Iterable, Optional

from .clock import date_key, weekday_name
from .types import (
    BookedInterval,
    BusinessHoursConfig,
    CapacityPolicy,
    SlotStatus,
    SnapshotStatus,
    format_hhmm,
    from_minutes,
    to_minutes,
)


def times_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    """Check if two time ranges overlap (same day)."""
    return start1 < end2 and start2 < end1


def slot_status_for_occupancy(occupancy: int, policy: CapacityPolicy) -> tuple[SnapshotStatus, bool]:
    """Status and bookability of a slot holding `occupancy` bookings."""
    if occupancy == 0:
        return SnapshotStatus.AVAILABLE, True
    if not policy.allow_overlapping:
        return SnapshotStatus.FULL, False
    if occupancy < policy.capacity:
        return SnapshotStatus.LIMITED, True
    return SnapshotStatus.FULL, False


def count_occupancy(slot_minutes: int, bookings: Iterable[BookedInterval]) -> int:
    return sum(
        1 for b in bookings
        if to_minutes(b.start) <= slot_minutes < to_minutes(b.end)
    )


def build_day_slots(
    day: date,
    business_hours: BusinessHoursConfig,
    bookings: list[BookedInterval],
    interval_minutes: int,
    policy: CapacityPolicy,
    blackout_dates: Optional[set[date]] = None,
) -> list[SlotStatus]:
    """
    Generate slot start times for a day and annotate each with its occupancy.

    Closed days and blackout dates yield no slots.
    """
    if blackout_dates and day in blackout_dates:
        return []

    schedule = business_hours.for_day(weekday_name(day))
    if schedule is None or not schedule.is_open:
        return []

    step = max(interval_minutes, 1)
    day_bookings = [b for b in bookings if b.day == day]
    slots = []

    minutes = schedule.time_slot.start_minutes
    while minutes < schedule.time_slot.end_minutes:
        occupancy = count_occupancy(minutes, day_bookings)
        status, available = slot_status_for_occupancy(occupancy, policy)
        slots.append(SlotStatus(
            time=format_hhmm(from_minutes(minutes)),
            available=available,
            status=status,
            occupancy=occupancy,
            max_occupancy=policy.capacity,
        ))
        minutes += step

    return slots


def summarize_day(slots: list[SlotStatus]) -> SnapshotStatus:
    """Collapse a day's slots into one aggregate status."""
    if not slots:
        return SnapshotStatus.UNAVAILABLE
    if any(s.status == SnapshotStatus.AVAILABLE for s in slots):
        return SnapshotStatus.AVAILABLE
    if any(s.status == SnapshotStatus.LIMITED for s in slots):
        return SnapshotStatus.LIMITED
    return SnapshotStatus.FULL


def build_availability_snapshot(
    start: date,
    end: date,
    business_hours: BusinessHoursConfig,
    bookings: list[BookedInterval],
    interval_minutes: int,
    policy: CapacityPolicy,
    blackout_dates: Optional[set[date]] = None,
) -> dict[str, SnapshotStatus]:
    """Aggregate status for every day in [start, end], keyed YYYY-MM-DD."""
    snapshot = {}
    current = start
    while current <= end:
        slots = build_day_slots(current, business_hours, bookings, interval_minutes, policy, blackout_dates)
        snapshot[date_key(current)] = summarize_day(slots)
        current += timedelta(days=1)
    return snapshot
