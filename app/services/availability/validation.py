"""
Reservation request validation.
Checks a requested booking against booking policy and current occupancy.
"""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import Optional

from .clock import weekday_name
from .slots import count_occupancy, slot_status_for_occupancy, times_overlap
from .types import (
    BookedInterval,
    BusinessHoursConfig,
    CapacityPolicy,
    SnapshotStatus,
    format_hhmm,
    from_minutes,
    to_minutes,
)


@dataclass
class BookingRequest:
    day: date
    start: time
    end: time
    attendees: int = 1


@dataclass
class BookingContext:
    """Everything needed to validate requests for one day."""
    business_hours: BusinessHoursConfig
    policy: CapacityPolicy
    bookings: list[BookedInterval] = field(default_factory=list)
    blackout_dates: set[date] = field(default_factory=set)
    min_duration: int = 30
    max_duration: int = 240
    interval_minutes: int = 30
    min_advance_booking_days: int = 0
    max_advance_booking_days: Optional[int] = None


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    availability_status: SnapshotStatus = SnapshotStatus.UNAVAILABLE
    current_occupancy: int = 0
    max_capacity: int = 1
    conflicting_reservation_ids: list[int] = field(default_factory=list)
    affected_time_slots: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def affected_time_slots(start: time, end: time, interval_minutes: int) -> list[str]:
    step = max(interval_minutes, 1)
    return [
        format_hhmm(from_minutes(m))
        for m in range(to_minutes(start), to_minutes(end), step)
    ]


def _check_date(request: BookingRequest, ctx: BookingContext, today: date, errors: list[str]) -> bool:
    if request.day < today:
        errors.append("Reservation date cannot be in the past")
        return False

    if ctx.min_advance_booking_days > 0:
        min_bookable = today + timedelta(days=ctx.min_advance_booking_days)
        if request.day < min_bookable:
            day_text = "day" if ctx.min_advance_booking_days == 1 else "days"
            errors.append(f"Reservations must be made at least {ctx.min_advance_booking_days} {day_text} in advance")
            return False

    if ctx.max_advance_booking_days is not None:
        max_bookable = today + timedelta(days=ctx.max_advance_booking_days)
        if request.day > max_bookable:
            errors.append(f"Reservations cannot be made more than {ctx.max_advance_booking_days} days in advance")
            return False

    if request.day in ctx.blackout_dates:
        errors.append("Selected date is not available for reservations")
        return False

    schedule = ctx.business_hours.for_day(weekday_name(request.day))
    if schedule is None or not schedule.enabled:
        errors.append("Selected date is not available for reservations")
        return False

    return True


def _check_times(request: BookingRequest, ctx: BookingContext, errors: list[str], warnings: list[str]) -> bool:
    if request.end <= request.start:
        errors.append("End time must be after start time")
        return False

    schedule = ctx.business_hours.for_day(weekday_name(request.day))
    if schedule is None or schedule.time_slot is None:
        warnings.append(f"No time slot configured for {weekday_name(request.day)}")
        errors.append("Requested time is outside operational hours")
        return False

    if not schedule.time_slot.contains(request.start, request.end):
        errors.append("Requested time is outside operational hours")

    duration = to_minutes(request.end) - to_minutes(request.start)
    if duration < ctx.min_duration:
        errors.append(f"Minimum reservation duration is {ctx.min_duration} minutes")
    if duration > ctx.max_duration:
        errors.append(f"Maximum reservation duration is {ctx.max_duration} minutes")
    if ctx.interval_minutes > 0 and duration % ctx.interval_minutes != 0:
        warnings.append(f"Reservation duration should be in {ctx.interval_minutes}-minute intervals")

    return True


def validate_reservation_request(
    request: BookingRequest,
    ctx: BookingContext,
    today: date,
) -> ValidationResult:
    """
    Validate a booking request.

    Date checks run first; time and capacity checks only run for a bookable day.
    The worst occupancy across the requested window decides the status.
    """
    result = ValidationResult(max_capacity=ctx.policy.capacity)

    if request.attendees < 1:
        result.errors.append("Number of attendees must be at least 1")

    if not _check_date(request, ctx, today, result.errors):
        return result
    if not _check_times(request, ctx, result.errors, result.warnings):
        return result

    _check_capacity(request, ctx, result)
    return result


def check_capacity(request: BookingRequest, ctx: BookingContext) -> ValidationResult:
    """Occupancy check only. Used when approving, where date policy was already applied at submission."""
    result = ValidationResult(max_capacity=ctx.policy.capacity)
    if request.end <= request.start:
        result.errors.append("End time must be after start time")
        return result
    _check_capacity(request, ctx, result)
    return result


def _check_capacity(request: BookingRequest, ctx: BookingContext, result: ValidationResult) -> None:
    day_bookings = [b for b in ctx.bookings if b.day == request.day]
    overlapping = [b for b in day_bookings if times_overlap(request.start, request.end, b.start, b.end)]
    result.conflicting_reservation_ids = [b.reservation_id for b in overlapping if b.reservation_id is not None]
    result.affected_time_slots = affected_time_slots(request.start, request.end, ctx.interval_minutes)

    # Peak overlap is reached at the request start or at some later booking start.
    checkpoints = {to_minutes(request.start)} | {to_minutes(b.start) for b in overlapping if b.start > request.start}
    worst = max((count_occupancy(m, overlapping) for m in checkpoints), default=0)
    result.current_occupancy = worst
    status, bookable = slot_status_for_occupancy(worst, ctx.policy)
    result.availability_status = status

    if not bookable:
        result.errors.append("The requested time is fully booked")
    elif status == SnapshotStatus.LIMITED:
        result.warnings.append(f"{worst} other reservation(s) overlap the requested time")