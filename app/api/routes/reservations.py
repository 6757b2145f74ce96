import logging
from typing import Callable, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user, get_notification_queue, is_staff_or_admin, require_admin, require_staff_or_admin
from app.db.models.reservations import Reservations, ReservationStatus
from app.db.models.users import Users
from app.schemas.reservations import ReservationCreate, ReservationDecision, ReservationResponse, ReservationSubmitResponse
from app.services.availability import (
    BookingRequest,
    check_capacity,
    load_booking_context,
    load_bookings,
    local_today,
    validate_reservation_request,
)
from app.services.notifications import (
    NotificationQueue,
    QueueNotRunning,
    queue_approval_email,
    queue_cancellation_email,
    queue_rejection_email,
    queue_reservation_emails,
)
from app.services.site_settings import get_system_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])

CANCELLABLE = (ReservationStatus.PENDING, ReservationStatus.APPROVED)


def _notify(enqueue: Callable, *args, **kwargs) -> List[str]:
    """Queue emails without letting a stopped queue fail the request; the DB write already happened."""
    try:
        result = enqueue(*args, **kwargs)
    except QueueNotRunning as e:
        logger.error(f"Could not queue {enqueue.__name__}: {e}")
        return []
    return result if isinstance(result, list) else [result]


def _get_reservation_or_404(db: Session, reservation_id: int) -> Reservations:
    reservation = db.query(Reservations).filter(Reservations.id == reservation_id).first()
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation


def _require_pending(reservation: Reservations) -> None:
    if reservation.status != ReservationStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Reservation is {reservation.status.value.lower()}, only pending reservations can be reviewed",
        )


@router.post("", response_model=ReservationSubmitResponse, status_code=status.HTTP_201_CREATED)
def create_reservation(
    payload: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
    queue: NotificationQueue = Depends(get_notification_queue),
):
    system = get_system_settings(db)
    if system.reservation_types and payload.type not in system.reservation_types:
        raise HTTPException(status_code=400, detail={"errors": [f"Unknown reservation type: {payload.type}"], "warnings": []})

    ctx = load_booking_context(db, payload.date, payload.date)
    if ctx is None:
        raise HTTPException(status_code=503, detail="Business hours are not configured")

    request = BookingRequest(day=payload.date, start=payload.start_time, end=payload.end_time, attendees=payload.attendees)
    result = validate_reservation_request(request, ctx, today=local_today())
    if not result.is_valid:
        raise HTTPException(status_code=400, detail={"errors": result.errors, "warnings": result.warnings})

    auto_approve = not system.require_approval
    reservation = Reservations(
        **payload.model_dump(exclude={"name", "email"}),
        name=payload.name or current_user.name,
        email=payload.email or current_user.email,
        user_id=current_user.id,
        status=ReservationStatus.APPROVED if auto_approve else ReservationStatus.PENDING,
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} created by user {current_user.id} ({reservation.status.value})")

    if auto_approve:
        task_ids = _notify(queue_approval_email, queue, reservation.id)
    else:
        task_ids = _notify(queue_reservation_emails, queue, reservation.id)

    return ReservationSubmitResponse(
        reservation=ReservationResponse.model_validate(reservation),
        warnings=result.warnings,
        notification_task_ids=task_ids,
    )


@router.get("", response_model=List[ReservationResponse])
def list_reservations(
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    user_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    query = db.query(Reservations)

    # regular users only ever see their own
    if not is_staff_or_admin(current_user):
        query = query.filter(Reservations.user_id == current_user.id)
    elif user_id:
        query = query.filter(Reservations.user_id == user_id)

    if status_filter:
        query = query.filter(Reservations.status == status_filter)

    return query.order_by(Reservations.date, Reservations.start_time).offset(skip).limit(limit).all()


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    reservation = _get_reservation_or_404(db, reservation_id)
    if reservation.user_id != current_user.id and not is_staff_or_admin(current_user):
        raise HTTPException(status_code=403, detail="No access to this reservation")
    return reservation


@router.post("/{reservation_id}/approve", response_model=ReservationResponse)
def approve_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_staff_or_admin),
    queue: NotificationQueue = Depends(get_notification_queue),
):
    reservation = _get_reservation_or_404(db, reservation_id)
    _require_pending(reservation)

    ctx = load_booking_context(db, reservation.date, reservation.date)
    if ctx is None:
        raise HTTPException(status_code=503, detail="Business hours are not configured")
    ctx.bookings = load_bookings(db, reservation.date, reservation.date, exclude_reservation_id=reservation.id)

    request = BookingRequest(day=reservation.date, start=reservation.start_time, end=reservation.end_time, attendees=reservation.attendees)
    capacity = check_capacity(request, ctx)
    if not capacity.is_valid:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"errors": capacity.errors, "warnings": capacity.warnings})

    reservation.status = ReservationStatus.APPROVED
    reservation.reviewed_by_user_id = current_user.id
    db.commit()
    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} approved by user {current_user.id}")

    _notify(queue_approval_email, queue, reservation.id)
    return reservation


@router.post("/{reservation_id}/reject", response_model=ReservationResponse)
def reject_reservation(
    reservation_id: int,
    payload: Optional[ReservationDecision] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_staff_or_admin),
    queue: NotificationQueue = Depends(get_notification_queue),
):
    reservation = _get_reservation_or_404(db, reservation_id)
    _require_pending(reservation)

    reservation.status = ReservationStatus.REJECTED
    reservation.status_reason = payload.reason if payload else None
    reservation.reviewed_by_user_id = current_user.id
    db.commit()
    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} rejected by user {current_user.id}")

    _notify(queue_rejection_email, queue, reservation.id, reason=reservation.status_reason)
    return reservation


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
def cancel_reservation(
    reservation_id: int,
    payload: Optional[ReservationDecision] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
    queue: NotificationQueue = Depends(get_notification_queue),
):
    reservation = _get_reservation_or_404(db, reservation_id)
    if reservation.user_id != current_user.id and not is_staff_or_admin(current_user):
        raise HTTPException(status_code=403, detail="No access to this reservation")
    if reservation.status not in CANCELLABLE:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Reservation is {reservation.status.value.lower()} and cannot be cancelled")

    reservation.status = ReservationStatus.CANCELLED
    reservation.status_reason = payload.reason if payload else None
    db.commit()
    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} cancelled by user {current_user.id}")

    _notify(queue_cancellation_email, queue, reservation.id, reason=reservation.status_reason)
    return reservation


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(require_admin),
):
    reservation = _get_reservation_or_404(db, reservation_id)
    db.delete(reservation)
    db.commit()
    logger.info(f"Reservation {reservation_id} deleted by admin {current_user.id}")
