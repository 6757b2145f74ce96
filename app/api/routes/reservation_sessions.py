from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_session_store
from app.schemas.reservation_sessions import ReservationSessionCreated, ReservationSessionData
from app.services.reservation_sessions import ReservationSessionStore

router = APIRouter(prefix="/reservation-sessions", tags=["reservation-sessions"])


@router.post("", response_model=ReservationSessionCreated, status_code=status.HTTP_201_CREATED)
def create_reservation_session(
    payload: ReservationSessionData,
    store: ReservationSessionStore = Depends(get_session_store),
):
    session_id = store.put(payload.model_dump(mode="json"))
    return ReservationSessionCreated(session_id=session_id)


@router.get("", response_model=ReservationSessionData)
def read_reservation_session(
    session_id: str,
    store: ReservationSessionStore = Depends(get_session_store),
):
    data = store.pop(session_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return data
