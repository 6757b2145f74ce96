from typing import Generator
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.db.database import SessionLocal
from app.core.security import decode_access_token
from app.db.models.users import Users, UserRole
from app.services.notifications import NotificationQueue
from app.services.reservation_sessions import ReservationSessionStore

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Users:
    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.query(Users).filter(Users.id == token_data.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    return user


def is_staff_or_admin(user: Users) -> bool:
    return user.role in (UserRole.ADMIN, UserRole.STAFF)


def require_staff_or_admin(current_user: Users = Depends(get_current_user)) -> Users:
    """Require user to have STAFF or ADMIN role"""
    if not is_staff_or_admin(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff or admin access required")
    return current_user


def require_admin(current_user: Users = Depends(get_current_user)) -> Users:
    """Require user to have ADMIN role"""
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def get_notification_queue(request: Request) -> NotificationQueue:
    return request.app.state.notification_queue


def get_session_store(request: Request) -> ReservationSessionStore:
    return request.app.state.reservation_sessions
