"""
Notification task types.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class TaskType(str, Enum):
    USER_CONFIRMATION = "user_confirmation"
    ADMIN_NOTIFICATION = "admin_notification"
    APPROVAL = "approval"
    REJECTION = "rejection"
    CANCELLATION = "cancellation"


class Priority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Lower rank is served first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.NORMAL: 1, Priority.LOW: 2}


class ReservationNotFound(Exception):
    pass


class TransientDeliveryFailure(Exception):
    pass


@dataclass
class TaskPayload:
    reservation_id: int
    recipient_email: str = ""  # resolved from the reservation/settings when empty
    email_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class TaskSpec:
    """What callers hand to NotificationQueue.enqueue."""
    type: TaskType
    payload: TaskPayload
    priority: Priority = Priority.NORMAL
    max_attempts: int = 3


@dataclass
class NotificationTask:
    id: str
    type: TaskType
    priority: Priority
    payload: TaskPayload
    max_attempts: int
    created_at: datetime
    attempts: int = 0
    scheduled_at: Optional[datetime] = None

    @classmethod
    def from_spec(cls, spec: TaskSpec, created_at: datetime) -> "NotificationTask":
        task_type = TaskType(spec.type)
        return cls(
            id=f"{task_type.value}_{spec.payload.reservation_id}_{uuid.uuid4().hex[:12]}",
            type=task_type,
            priority=Priority(spec.priority),
            payload=spec.payload,
            max_attempts=max(spec.max_attempts, 1),
            created_at=created_at,
        )


@dataclass
class QueueStats:
    pending_count: int
    in_flight_count: int
    succeeded: int = 0
    retried: int = 0
    failed: int = 0
