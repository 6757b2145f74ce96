"""
Email message formatting.

Stored templates are plain text with {placeholder} tokens. Substitution is a
literal replace of the known tokens only, so stray braces in admin-edited
templates are left alone.
"""

import html
import re
from datetime import date
from typing import Any, Mapping, Optional

from app.services.availability.types import format_hhmm
from app.services.site_settings import DEFAULT_EMAIL_TEMPLATES

from .mailer import OutgoingEmail
from .types import TaskType


PLACEHOLDERS = ("name", "email", "date", "startTime", "endTime", "purpose", "attendees", "type", "notes", "id", "status")

SUBJECTS = {
    TaskType.USER_CONFIRMATION: "Reservation Request Received - Pending Approval",
    TaskType.APPROVAL: "Your Reservation Has Been Approved",
    TaskType.REJECTION: "Your Reservation Request Has Been Rejected",
    TaskType.CANCELLATION: "Reservation Cancelled",
    TaskType.ADMIN_NOTIFICATION: "New Reservation Request - {name}",
}

TEMPLATE_KEYS = {
    TaskType.USER_CONFIRMATION: "submission",
    TaskType.APPROVAL: "approval",
    TaskType.REJECTION: "rejection",
    TaskType.CANCELLATION: "cancellation",
    TaskType.ADMIN_NOTIFICATION: "notification",
}

HEADINGS = {
    TaskType.USER_CONFIRMATION: "Reservation Request Received",
    TaskType.APPROVAL: "Reservation Approved",
    TaskType.REJECTION: "Reservation Request Rejected",
    TaskType.CANCELLATION: "Reservation Cancelled",
    TaskType.ADMIN_NOTIFICATION: "New Reservation Request",
}

REASON_LABELS = {
    TaskType.REJECTION: "Reason",
    TaskType.CANCELLATION: "Cancellation Reason",
}


def format_long_date(value: date) -> str:
    """e.g. 'Monday, January 6, 2025'."""
    return f"{value:%A, %B} {value.day}, {value.year}"


def reservation_placeholders(reservation: Any) -> dict[str, str]:
    """Placeholder values from a reservation row (or anything shaped like one)."""
    status = getattr(reservation, "status", "")
    return {
        "name": reservation.name or "",
        "email": reservation.email or "",
        "date": format_long_date(reservation.date),
        "startTime": format_hhmm(reservation.start_time),
        "endTime": format_hhmm(reservation.end_time),
        "purpose": reservation.purpose or "",
        "attendees": str(reservation.attendees),
        "type": reservation.type or "",
        "notes": reservation.notes or "",
        "id": str(reservation.id or ""),
        "status": getattr(status, "value", status) or "",
    }


def render_template(template: str, values: Mapping[str, str]) -> str:
    for key in PLACEHOLDERS:
        template = template.replace("{" + key + "}", values.get(key, ""))
    return template


def text_to_html(text: str) -> str:
    escaped = html.escape(text)
    escaped = re.sub(r"\*\*(.*?)\*\*", r"<strong>\1</strong>", escaped)
    escaped = re.sub(r"\*(.*?)\*", r"<em>\1</em>", escaped)
    return escaped.replace("\n", "<br>")


def _wrap_html(heading: str, body: str, footer_note: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        f"<h2>{html.escape(heading)}</h2>"
        f"{text_to_html(body)}"
        f'<p style="margin: 20px 0;">{html.escape(footer_note)}</p>'
        '<hr style="border: none; border-top: 1px solid #eee;">'
        '<p style="color: #666; font-size: 14px;">This is an automated message from the Reservation System.</p>'
        "</div>"
    )


def build_message(
    task_type: TaskType,
    reservation: Any,
    recipient: str,
    templates: Optional[Mapping[str, str]] = None,
    reason: Optional[str] = None,
) -> OutgoingEmail:
    """Render the email for one notification task."""
    task_type = TaskType(task_type)
    key = TEMPLATE_KEYS[task_type]
    template = (templates or {}).get(key) or DEFAULT_EMAIL_TEMPLATES[key]
    values = reservation_placeholders(reservation)

    body = render_template(template, values)
    label = REASON_LABELS.get(task_type)
    if label and reason:
        body += f"\n\n**{label}:** {reason}"

    if task_type == TaskType.USER_CONFIRMATION:
        footer_note = f"Your reservation ID: {values['id']}"
    elif task_type == TaskType.ADMIN_NOTIFICATION:
        footer_note = "Log in to the admin panel to approve or reject this reservation."
    else:
        footer_note = f"Reservation ID: {values['id']}"

    return OutgoingEmail(
        to=recipient,
        subject=SUBJECTS[task_type].replace("{name}", values["name"]),
        text=body,
        html=_wrap_html(HEADINGS[task_type], body, footer_note),
    )
