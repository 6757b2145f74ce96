from typing import Optional
from datetime import datetime
from sqlalchemy import JSON, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class TimeSlotSettings(Base):
    __tablename__ = "time_slot_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # {"monday": {"enabled": true, "timeSlot": {"start": "08:00", "end": "17:00"}}, ...}
    business_hours: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    min_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=30)  # minutes
    max_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=240)
    time_slot_interval: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    buffer_time: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, server_default=func.now(), onupdate=func.now())
