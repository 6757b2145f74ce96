from pydantic import BaseModel, Field, model_validator
from datetime import date as date_type, datetime, time
from typing import List, Optional
from app.db.models.reservations import ReservationStatus


class ReservationBase(BaseModel):
    date: date_type
    start_time: time
    end_time: time
    purpose: str = Field(min_length=1, max_length=500)
    attendees: int = Field(ge=1)
    type: str = Field(min_length=1, max_length=100)
    notes: Optional[str] = None


class ReservationCreate(ReservationBase):
    # default to the signed-in user's profile
    name: Optional[str] = None
    email: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class ReservationDecision(BaseModel):
    reason: Optional[str] = None


class ReservationResponse(ReservationBase):
    id: int
    user_id: int
    name: str
    email: str
    status: ReservationStatus
    status_reason: Optional[str]
    reviewed_by_user_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReservationSubmitResponse(BaseModel):
    reservation: ReservationResponse
    warnings: List[str] = []
    notification_task_ids: List[str] = []
