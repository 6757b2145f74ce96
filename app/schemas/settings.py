from pydantic import BaseModel, Field, field_validator
from datetime import date as date_type, datetime
from typing import Dict, List, Optional
from app.services.availability.types import BusinessHoursConfig, InvalidInput


class SystemSettingsBase(BaseModel):
    system_name: str
    organization_name: str
    contact_email: Optional[str]
    require_approval: bool
    allow_overlapping: bool
    max_overlapping_reservations: int = Field(ge=1)
    public_calendar: bool
    reservation_types: List[str]
    use_12_hour_format: bool
    min_advance_booking_days: int = Field(ge=0)
    max_advance_booking_days: Optional[int] = Field(default=None, ge=0)


class SystemSettingsUpdate(BaseModel):
    system_name: Optional[str] = None
    organization_name: Optional[str] = None
    contact_email: Optional[str] = None
    require_approval: Optional[bool] = None
    allow_overlapping: Optional[bool] = None
    max_overlapping_reservations: Optional[int] = Field(default=None, ge=1)
    public_calendar: Optional[bool] = None
    reservation_types: Optional[List[str]] = None
    use_12_hour_format: Optional[bool] = None
    min_advance_booking_days: Optional[int] = Field(default=None, ge=0)
    max_advance_booking_days: Optional[int] = Field(default=None, ge=0)


class SystemSettingsResponse(SystemSettingsBase):
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


def _check_business_hours(value: Optional[dict]) -> Optional[dict]:
    if value is None:
        return value
    try:
        return BusinessHoursConfig.from_dict(value).to_dict()
    except InvalidInput as e:
        raise ValueError(f"Invalid business hours: {e}") from e


class TimeSlotSettingsUpdate(BaseModel):
    business_hours: Optional[dict] = None
    min_duration: Optional[int] = Field(default=None, ge=1)
    max_duration: Optional[int] = Field(default=None, ge=1)
    time_slot_interval: Optional[int] = Field(default=None, ge=1)
    buffer_time: Optional[int] = Field(default=None, ge=0)

    @field_validator("business_hours")
    @classmethod
    def validate_business_hours(cls, value):
        return _check_business_hours(value)


class TimeSlotSettingsResponse(BaseModel):
    business_hours: dict
    min_duration: int
    max_duration: int
    time_slot_interval: int
    buffer_time: int
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class EmailSettingsUpdate(BaseModel):
    send_user_emails: Optional[bool] = None
    send_admin_emails: Optional[bool] = None
    templates: Optional[Dict[str, str]] = None


class EmailSettingsResponse(BaseModel):
    send_user_emails: bool
    send_admin_emails: bool
    templates: Dict[str, str]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class BlackoutDateCreate(BaseModel):
    date: date_type
    reason: str = ""


class BlackoutDateResponse(BlackoutDateCreate):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True
