"""
Notification service package.

Usage:
    from app.services.notifications import NotificationQueue, NotificationDispatcher, get_mail_sender

    dispatcher = NotificationDispatcher(SessionLocal, get_mail_sender())
    queue = NotificationQueue(dispatcher)
    queue.start()  # inside the running event loop

    from app.services.notifications import queue_approval_email
    queue_approval_email(queue, reservation.id)
"""

from .types import (
    TaskType,
    Priority,
    TaskPayload,
    TaskSpec,
    NotificationTask,
    QueueStats,
    ReservationNotFound,
    TransientDeliveryFailure,
)
from .queue import NotificationQueue, QueueNotRunning, retry_delay
from .mailer import BaseMailSender, ConsoleMailSender, DeliveryResult, OutgoingEmail, SmtpMailSender, get_mail_sender
from .templates import build_message, render_template, text_to_html
from .dispatcher import NotificationDispatcher
from .helpers import (
    queue_reservation_emails,
    queue_approval_email,
    queue_rejection_email,
    queue_cancellation_email,
)

__all__ = [
    # Types
    "TaskType",
    "Priority",
    "TaskPayload",
    "TaskSpec",
    "NotificationTask",
    "QueueStats",
    "ReservationNotFound",
    "TransientDeliveryFailure",
    "QueueNotRunning",
    "OutgoingEmail",
    "DeliveryResult",
    # Queue and handler
    "NotificationQueue",
    "NotificationDispatcher",
    "retry_delay",
    # Mail
    "BaseMailSender",
    "SmtpMailSender",
    "ConsoleMailSender",
    "get_mail_sender",
    "build_message",
    "render_template",
    "text_to_html",
    # Enqueue helpers
    "queue_reservation_emails",
    "queue_approval_email",
    "queue_rejection_email",
    "queue_cancellation_email",
]
