from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user, require_admin
from app.db.models.blackout_dates import BlackoutDates
from app.db.models.users import Users
from app.schemas.settings import (
    BlackoutDateCreate,
    BlackoutDateResponse,
    EmailSettingsResponse,
    EmailSettingsUpdate,
    SystemSettingsResponse,
    SystemSettingsUpdate,
    TimeSlotSettingsResponse,
    TimeSlotSettingsUpdate,
)
from app.services.site_settings import get_email_settings, get_system_settings, get_time_slot_settings

router = APIRouter(prefix="/settings", tags=["settings"])


def _apply(row, payload) -> None:
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(row, field, value)


@router.get("/system", response_model=SystemSettingsResponse)
def read_system_settings(
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    return get_system_settings(db)


@router.put("/system", response_model=SystemSettingsResponse)
def update_system_settings(
    payload: SystemSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_admin),
):
    row = get_system_settings(db)
    _apply(row, payload)
    db.commit()
    db.refresh(row)
    return row


@router.get("/time-slots", response_model=TimeSlotSettingsResponse)
def read_time_slot_settings(db: Session = Depends(get_db)):
    # public: the booking calendar needs business hours before sign-in
    return get_time_slot_settings(db)


@router.put("/time-slots", response_model=TimeSlotSettingsResponse)
def update_time_slot_settings(
    payload: TimeSlotSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_admin),
):
    row = get_time_slot_settings(db)
    min_duration = payload.min_duration if payload.min_duration is not None else row.min_duration
    max_duration = payload.max_duration if payload.max_duration is not None else row.max_duration
    if min_duration > max_duration:
        raise HTTPException(status_code=400, detail="min_duration cannot exceed max_duration")
    _apply(row, payload)
    db.commit()
    db.refresh(row)
    return row


@router.get("/email", response_model=EmailSettingsResponse)
def read_email_settings(
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_admin),
):
    return get_email_settings(db)


@router.put("/email", response_model=EmailSettingsResponse)
def update_email_settings(
    payload: EmailSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_admin),
):
    row = get_email_settings(db)
    data = payload.model_dump(exclude_unset=True)
    if "templates" in data:
        # partial template edits merge into the stored set
        row.templates = {**(row.templates or {}), **data.pop("templates")}
    for field, value in data.items():
        setattr(row, field, value)
    db.commit()
    db.refresh(row)
    return row


@router.get("/blackout-dates", response_model=List[BlackoutDateResponse])
def list_blackout_dates(db: Session = Depends(get_db)):
    return db.query(BlackoutDates).order_by(BlackoutDates.date).all()


@router.post("/blackout-dates", response_model=BlackoutDateResponse, status_code=status.HTTP_201_CREATED)
def create_blackout_date(
    payload: BlackoutDateCreate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_admin),
):
    existing = db.query(BlackoutDates).filter(BlackoutDates.date == payload.date).first()
    if existing:
        raise HTTPException(status_code=409, detail="Blackout date already exists")

    row = BlackoutDates(**payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/blackout-dates/{blackout_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_blackout_date(
    blackout_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_admin),
):
    row = db.query(BlackoutDates).filter(BlackoutDates.id == blackout_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Blackout date not found")
    db.delete(row)
    db.commit()
