"""
Availability service package.

Usage:
    from datetime import date
    from app.services.availability import get_date_availability, find_earliest_available_date

    status = get_date_availability(date(2025, 1, 20), business_hours, {"2025-01-20": "limited"})
    earliest = find_earliest_available_date(date(2025, 1, 20), None, business_hours, snapshot)

    # Or build the snapshot from stored reservations first
    from app.services.availability import load_booking_context, build_availability_snapshot
"""

from .types import (
    AvailabilityStatus,
    SnapshotStatus,
    TimeWindow,
    DaySchedule,
    BusinessHoursConfig,
    CapacityPolicy,
    BookedInterval,
    SlotStatus,
    InvalidInput,
)
from .clock import date_key, get_zone, local_now, local_today, to_local_date, weekday_name
from .engine import (
    get_date_availability,
    find_earliest_available_date,
    get_range_availability,
    normalize_snapshot_status,
)
from .slots import build_day_slots, build_availability_snapshot, summarize_day
from .validation import BookingRequest, BookingContext, ValidationResult, check_capacity, validate_reservation_request
from .data_loader import load_booking_context, load_business_hours, load_bookings

__all__ = [
    # Types
    "AvailabilityStatus",
    "SnapshotStatus",
    "TimeWindow",
    "DaySchedule",
    "BusinessHoursConfig",
    "CapacityPolicy",
    "BookedInterval",
    "SlotStatus",
    "InvalidInput",
    "BookingRequest",
    "BookingContext",
    "ValidationResult",
    # Main entry points
    "get_date_availability",
    "find_earliest_available_date",
    "get_range_availability",
    "validate_reservation_request",
    "check_capacity",
    # Lower-level functions
    "normalize_snapshot_status",
    "build_day_slots",
    "build_availability_snapshot",
    "summarize_day",
    "load_booking_context",
    "load_business_hours",
    "load_bookings",
    "date_key",
    "get_zone",
    "local_now",
    "local_today",
    "to_local_date",
    "weekday_name",
]
