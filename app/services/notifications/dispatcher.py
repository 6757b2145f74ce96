"""
Queue handler that turns a notification task into a sent email.
"""

import asyncio
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.db.models.reservations import Reservations
from app.services.site_settings import get_email_settings, get_system_settings

from .mailer import BaseMailSender, OutgoingEmail
from .templates import build_message
from .types import NotificationTask, ReservationNotFound, TaskType, TransientDeliveryFailure


logger = logging.getLogger(__name__)

USER_TASK_TYPES = {
    TaskType.USER_CONFIRMATION,
    TaskType.APPROVAL,
    TaskType.REJECTION,
    TaskType.CANCELLATION,
}


class NotificationDispatcher:
    """
    Loads the reservation and email settings fresh for every task, so an
    edit made while a task waits in the queue is reflected in what is sent.
    """

    def __init__(self, session_factory: Callable[[], Session], mail_sender: BaseMailSender):
        self.session_factory = session_factory
        self.mail_sender = mail_sender

    async def __call__(self, task: NotificationTask) -> None:
        message = await asyncio.to_thread(self._prepare, task)
        if message is None:
            return

        result = await self.mail_sender.send(message)
        if not result.success:
            raise TransientDeliveryFailure(f"{self.mail_sender.backend_name()}: {result.error}")
        logger.info(f"Sent {task.type.value} email for reservation {task.payload.reservation_id} to {message.to}")

    def _prepare(self, task: NotificationTask) -> Optional[OutgoingEmail]:
        """Build the message, or None when settings say not to send it."""
        db = self.session_factory()
        try:
            reservation = db.get(Reservations, task.payload.reservation_id)
            if reservation is None:
                raise ReservationNotFound(f"Reservation {task.payload.reservation_id} not found")

            email_settings = get_email_settings(db)

            if task.type in USER_TASK_TYPES:
                if not email_settings.send_user_emails:
                    logger.info(f"User emails are disabled, skipping {task.type.value} for reservation {reservation.id}")
                    return None
                recipient = task.payload.recipient_email or reservation.email
            else:
                contact_email = get_system_settings(db).contact_email
                if not email_settings.send_admin_emails or not contact_email:
                    logger.info("Admin emails are disabled or no contact email configured, skipping admin notification")
                    return None
                recipient = task.payload.recipient_email or contact_email

            return build_message(
                task.type,
                reservation,
                recipient,
                templates=email_settings.templates,
                reason=task.payload.email_data.get("reason"),
            )
        finally:
            db.close()
