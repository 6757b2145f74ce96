"""
Data loader for availability checks.
Fetches settings and bookings from the database and converts to internal types.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from app.db.models.blackout_dates import BlackoutDates
from app.db.models.reservations import Reservations, ReservationStatus
from app.services.site_settings import get_system_settings, get_time_slot_settings

from .types import BookedInterval, BusinessHoursConfig, CapacityPolicy, InvalidInput
from .validation import BookingContext


logger = logging.getLogger(__name__)


def load_business_hours(db: Session) -> Optional[BusinessHoursConfig]:
    """Parse stored business hours. Malformed config yields None (everything closed)."""
    row = get_time_slot_settings(db)
    try:
        return BusinessHoursConfig.from_dict(row.business_hours or {})
    except InvalidInput as e:
        logger.error(f"Stored business hours are malformed: {e}")
        return None


def load_capacity_policy(db: Session) -> CapacityPolicy:
    system = get_system_settings(db)
    return CapacityPolicy(
        allow_overlapping=system.allow_overlapping,
        max_overlapping=system.max_overlapping_reservations,
    )


def load_blackout_dates(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> set[date]:
    stmt = select(BlackoutDates)
    if start is not None:
        stmt = stmt.where(BlackoutDates.date >= start)
    if end is not None:
        stmt = stmt.where(BlackoutDates.date <= end)
    return {row.date for row in db.execute(stmt).scalars().all()}


def load_bookings(
    db: Session,
    start: date,
    end: date,
    exclude_reservation_id: Optional[int] = None,
) -> list[BookedInterval]:
    """Approved reservations in [start, end]; only these consume capacity."""
    stmt = select(Reservations).where(
        and_(
            Reservations.date >= start,
            Reservations.date <= end,
            Reservations.status == ReservationStatus.APPROVED,
        )
    )
    rows = db.execute(stmt).scalars().all()

    return [
        BookedInterval(day=r.date, start=r.start_time, end=r.end_time, reservation_id=r.id)
        for r in rows
        if r.id != exclude_reservation_id
    ]


def load_booking_context(db: Session, start: date, end: date) -> Optional[BookingContext]:
    """Load everything the slot builder and validator need for a date range."""
    business_hours = load_business_hours(db)
    if business_hours is None:
        return None

    time_slots = get_time_slot_settings(db)
    system = get_system_settings(db)

    return BookingContext(
        business_hours=business_hours,
        policy=load_capacity_policy(db),
        bookings=load_bookings(db, start, end),
        blackout_dates=load_blackout_dates(db, start, end),
        min_duration=time_slots.min_duration,
        max_duration=time_slots.max_duration,
        interval_minutes=time_slots.time_slot_interval,
        min_advance_booking_days=system.min_advance_booking_days,
        max_advance_booking_days=system.max_advance_booking_days,
    )
