"""
Single-row settings documents with lazily created defaults.
"""

import logging

from sqlalchemy.orm import Session

from app.db.models.email_settings import EmailSettings
from app.db.models.system_settings import SystemSettings
from app.db.models.time_slot_settings import TimeSlotSettings


logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1

_WEEKDAY_HOURS = {"enabled": True, "timeSlot": {"start": "08:00", "end": "17:00"}}
_CLOSED = {"enabled": False, "timeSlot": None}

DEFAULT_BUSINESS_HOURS = {
    "monday": dict(_WEEKDAY_HOURS),
    "tuesday": dict(_WEEKDAY_HOURS),
    "wednesday": dict(_WEEKDAY_HOURS),
    "thursday": dict(_WEEKDAY_HOURS),
    "friday": dict(_WEEKDAY_HOURS),
    "saturday": dict(_CLOSED),
    "sunday": dict(_CLOSED),
}

DEFAULT_RESERVATION_TYPES = ["event", "training", "gym", "other"]

DEFAULT_EMAIL_TEMPLATES = {
    "submission": (
        "Dear {name},\n\nWe have received your reservation request for {date} from {startTime} to {endTime}.\n\n"
        "Purpose: {purpose}\nAttendees: {attendees}\n\nYou will receive another email once it has been reviewed."
    ),
    "approval": (
        "Dear {name},\n\nYour reservation request for {date} from {startTime} to {endTime} has been approved.\n\n"
        "Purpose: {purpose}\n\nThank you!"
    ),
    "rejection": (
        "Dear {name},\n\nWe regret to inform you that your reservation request for {date} from {startTime} to {endTime} "
        "has been rejected.\n\nPurpose: {purpose}\n\nPlease contact us if you have any questions."
    ),
    "cancellation": (
        "Dear {name},\n\nYour reservation for {date} from {startTime} to {endTime} has been cancelled.\n\n"
        "Purpose: {purpose}"
    ),
    "notification": (
        "New reservation request:\n\nName: {name}\nEmail: {email}\nDate: {date}\nTime: {startTime} - {endTime}\n"
        "Purpose: {purpose}\nAttendees: {attendees}\nStatus: {status}"
    ),
}


def get_system_settings(db: Session) -> SystemSettings:
    row = db.get(SystemSettings, SETTINGS_ROW_ID)
    if row is None:
        logger.info("System settings missing, creating defaults")
        row = SystemSettings(
            id=SETTINGS_ROW_ID,
            system_name="Reservation System",
            organization_name="Your Organization",
            contact_email="admin@example.com",
            require_approval=True,
            allow_overlapping=True,
            max_overlapping_reservations=2,
            public_calendar=True,
            reservation_types=list(DEFAULT_RESERVATION_TYPES),
            use_12_hour_format=True,
            min_advance_booking_days=0,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def get_time_slot_settings(db: Session) -> TimeSlotSettings:
    row = db.get(TimeSlotSettings, SETTINGS_ROW_ID)
    if row is None:
        logger.info("Time slot settings missing, creating defaults")
        row = TimeSlotSettings(
            id=SETTINGS_ROW_ID,
            business_hours={k: dict(v) for k, v in DEFAULT_BUSINESS_HOURS.items()},
            min_duration=30,
            max_duration=240,
            time_slot_interval=30,
            buffer_time=15,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def get_email_settings(db: Session) -> EmailSettings:
    row = db.get(EmailSettings, SETTINGS_ROW_ID)
    if row is None:
        logger.info("Email settings missing, creating defaults")
        row = EmailSettings(
            id=SETTINGS_ROW_ID,
            send_user_emails=True,
            send_admin_emails=True,
            templates=dict(DEFAULT_EMAIL_TEMPLATES),
        )
        db.add(row)
        db.commit()
        db.refresh(row)
    return row
