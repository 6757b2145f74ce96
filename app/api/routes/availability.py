from datetime import date, timedelta
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import settings
from app.schemas.availability import AvailabilityResponse, DaySlotsResponse, EarliestAvailableResponse, TimeSlotResponse
from app.services.availability import (
    build_availability_snapshot,
    build_day_slots,
    find_earliest_available_date,
    get_date_availability,
    get_range_availability,
    get_zone,
    load_booking_context,
    local_today,
)
from app.services.availability.engine import BOOKABLE

router = APIRouter(prefix="/availability", tags=["availability"])

MAX_RANGE_DAYS = 366


def _load_snapshot(db: Session, start: date, end: date):
    ctx = load_booking_context(db, start, end)
    if ctx is None:
        return None, {}
    snapshot = build_availability_snapshot(
        start, end, ctx.business_hours, ctx.bookings, ctx.interval_minutes, ctx.policy, ctx.blackout_dates,
    )
    return ctx, snapshot


@router.get("", response_model=AvailabilityResponse, response_model_exclude_unset=True)
def get_availability(
    start_date: date,
    end_date: date,
    include_availability_map: bool = False,
    db: Session = Depends(get_db),
):
    if start_date > end_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date must be before or equal to end date")
    if (end_date - start_date).days >= MAX_RANGE_DAYS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Date range cannot exceed {MAX_RANGE_DAYS} days")

    ctx, snapshot = _load_snapshot(db, start_date, end_date)
    business_hours = ctx.business_hours if ctx else None
    availability = get_range_availability(start_date, end_date, business_hours, snapshot, tz=get_zone())

    available_dates = [date.fromisoformat(key) for key, value in availability.items() if value in BOOKABLE]

    optional = {}
    if include_availability_map:
        optional["availability_map"] = availability
    if start_date == end_date and ctx is not None:
        optional["time_slots"] = [
            TimeSlotResponse.model_validate(slot)
            for slot in build_day_slots(start_date, ctx.business_hours, ctx.bookings, ctx.interval_minutes, ctx.policy, ctx.blackout_dates)
        ]

    return AvailabilityResponse(
        available_dates=available_dates,
        earliest_available_date=available_dates[0] if available_dates else None,
        **optional,
    )


@router.get("/earliest", response_model=EarliestAvailableResponse)
def get_earliest_available(
    min_date: Optional[date] = None,
    max_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    zone = get_zone()
    start = min_date or local_today(zone)
    cap = settings.AVAILABILITY_SCAN_CAP_DAYS
    end = max_date or start + timedelta(days=cap)
    if start > end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="min_date must be before or equal to max_date")
    # the scan never looks further than the cap, so neither does the snapshot
    end = min(end, start + timedelta(days=cap - 1))

    ctx, snapshot = _load_snapshot(db, start, end)
    earliest = find_earliest_available_date(
        start, end, ctx.business_hours if ctx else None, snapshot, tz=zone, scan_cap_days=cap,
    )
    return EarliestAvailableResponse(earliest_available_date=earliest)


@router.get("/slots", response_model=DaySlotsResponse)
def get_day_slots(
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    ctx, snapshot = _load_snapshot(db, day, day)
    if ctx is None:
        return DaySlotsResponse(date=day, status=get_date_availability(day, None, snapshot), slots=[])

    slots = build_day_slots(day, ctx.business_hours, ctx.bookings, ctx.interval_minutes, ctx.policy, ctx.blackout_dates)
    return DaySlotsResponse(
        date=day,
        status=get_date_availability(day, ctx.business_hours, snapshot, tz=get_zone()),
        slots=[TimeSlotResponse.model_validate(slot) for slot in slots],
    )
