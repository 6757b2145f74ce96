"""
Enqueue helpers used by the reservation routes.

Recipients are left empty so the dispatcher resolves them from the
reservation row when the task runs.
"""

from typing import Optional

from .queue import NotificationQueue
from .types import Priority, TaskPayload, TaskSpec, TaskType


def queue_reservation_emails(queue: NotificationQueue, reservation_id: int) -> list[str]:
    """Submission confirmation for the requester plus the admin notification."""
    return [
        queue.enqueue(TaskSpec(
            type=TaskType.USER_CONFIRMATION,
            payload=TaskPayload(reservation_id=reservation_id),
            priority=Priority.HIGH,
            max_attempts=3,
        )),
        queue.enqueue(TaskSpec(
            type=TaskType.ADMIN_NOTIFICATION,
            payload=TaskPayload(reservation_id=reservation_id),
            priority=Priority.NORMAL,
            max_attempts=2,
        )),
    ]


def queue_approval_email(queue: NotificationQueue, reservation_id: int) -> str:
    return queue.enqueue(TaskSpec(
        type=TaskType.APPROVAL,
        payload=TaskPayload(reservation_id=reservation_id),
        priority=Priority.HIGH,
        max_attempts=3,
    ))


def queue_rejection_email(queue: NotificationQueue, reservation_id: int, reason: Optional[str] = None) -> str:
    return queue.enqueue(TaskSpec(
        type=TaskType.REJECTION,
        payload=TaskPayload(
            reservation_id=reservation_id,
            email_data={"reason": reason} if reason else {},
        ),
        priority=Priority.HIGH,
        max_attempts=3,
    ))


def queue_cancellation_email(queue: NotificationQueue, reservation_id: int, reason: Optional[str] = None) -> str:
    return queue.enqueue(TaskSpec(
        type=TaskType.CANCELLATION,
        payload=TaskPayload(
            reservation_id=reservation_id,
            email_data={"reason": reason} if reason else {},
        ),
        priority=Priority.NORMAL,
        max_attempts=2,
    ))
