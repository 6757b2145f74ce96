from pydantic import BaseModel
from datetime import date as date_type
from typing import Dict, List, Optional
from app.services.availability.types import AvailabilityStatus, SnapshotStatus


class TimeSlotResponse(BaseModel):
    time: str
    available: bool
    status: SnapshotStatus
    occupancy: int
    max_occupancy: int

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    availability_map: Optional[Dict[str, AvailabilityStatus]] = None
    available_dates: List[date_type]
    earliest_available_date: Optional[date_type]
    time_slots: Optional[List[TimeSlotResponse]] = None


class EarliestAvailableResponse(BaseModel):
    earliest_available_date: Optional[date_type]


class DaySlotsResponse(BaseModel):
    date: date_type
    status: AvailabilityStatus
    slots: List[TimeSlotResponse]
