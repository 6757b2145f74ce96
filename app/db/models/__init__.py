from app.db.database import Base

# Import models
from app.db.models.users import Users, UserRole
from app.db.models.reservations import Reservations, ReservationStatus
from app.db.models.system_settings import SystemSettings
from app.db.models.time_slot_settings import TimeSlotSettings
from app.db.models.blackout_dates import BlackoutDates
from app.db.models.email_settings import EmailSettings

__all__ = [
    "Base",
    # Models
    "Users",
    "Reservations",
    "SystemSettings",
    "TimeSlotSettings",
    "BlackoutDates",
    "EmailSettings",
    # Enums
    "UserRole",
    "ReservationStatus",
]
