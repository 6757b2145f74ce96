from typing import Optional
from datetime import datetime
from sqlalchemy import JSON, Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class SystemSettings(Base):
    """Single-row document (id=1) holding organisation-wide booking policy."""
    __tablename__ = "system_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    system_name: Mapped[str] = mapped_column(String(200), nullable=False, default="Reservation System")
    organization_name: Mapped[str] = mapped_column(String(200), nullable=False, default="Your Organization")
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    require_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_overlapping: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    max_overlapping_reservations: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    public_calendar: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reservation_types: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    use_12_hour_format: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    min_advance_booking_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_advance_booking_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, server_default=func.now(), onupdate=func.now())
