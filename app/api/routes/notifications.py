from fastapi import APIRouter, Depends

from app.api.deps import get_notification_queue, require_staff_or_admin
from app.db.models.users import Users
from app.schemas.notifications import QueueStatsResponse
from app.services.notifications import NotificationQueue

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/stats", response_model=QueueStatsResponse)
def get_queue_stats(
    queue: NotificationQueue = Depends(get_notification_queue),
    current_user: Users = Depends(require_staff_or_admin),
):
    return QueueStatsResponse.model_validate(queue.get_stats())
