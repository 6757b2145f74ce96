from pydantic import BaseModel, Field
from datetime import date as date_type


class ReservationSessionData(BaseModel):
    date: date_type
    time: str = Field(pattern=r"^\d{2}:\d{2}$")
    duration: int = Field(ge=1)


class ReservationSessionCreated(BaseModel):
    session_id: str
