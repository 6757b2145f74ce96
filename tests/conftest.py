import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MAIL_BACKEND", "console")
os.environ.setdefault("RESERVATION_TIMEZONE", "Asia/Manila")

import pytest
from datetime import date, time, timedelta
from zoneinfo import ZoneInfo
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.db.database import Base, SessionLocal
from app.db.models import Reservations, ReservationStatus, Users, UserRole
from app.services.availability import local_today
from app.services.notifications import QueueStats

# One shared in-memory database for the app's sessions and the tests' own.
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
SessionLocal.configure(bind=test_engine)

MANILA = ZoneInfo("Asia/Manila")

BUSINESS_HOURS = {
    "monday": {"enabled": True, "timeSlot": {"start": "08:00", "end": "17:00"}},
    "tuesday": {"enabled": True, "timeSlot": {"start": "08:00", "end": "17:00"}},
    "wednesday": {"enabled": True, "timeSlot": {"start": "08:00", "end": "17:00"}},
    "thursday": {"enabled": True, "timeSlot": {"start": "08:00", "end": "17:00"}},
    "friday": {"enabled": True, "timeSlot": {"start": "08:00", "end": "17:00"}},
    "saturday": {"enabled": False, "timeSlot": None},
    "sunday": {"enabled": False, "timeSlot": None},
}


def get_test_monday() -> date:
    # fixed Monday for deterministic tests
    return date(2025, 1, 20)


def next_weekday(days_ahead: int = 7) -> date:
    """A Monday-Friday date at least `days_ahead` days after today (Manila)."""
    day = local_today() + timedelta(days=days_ahead)
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


class RecordingQueue:
    """Stands in for NotificationQueue in route tests; keeps what was enqueued."""

    def __init__(self):
        self.specs = []

    def enqueue(self, spec) -> str:
        self.specs.append(spec)
        return f"{spec.type.value}_{spec.payload.reservation_id}_{len(self.specs)}"

    def get_stats(self) -> QueueStats:
        return QueueStats(pending_count=len(self.specs), in_flight_count=0)

    @property
    def types(self) -> list[str]:
        return [spec.type.value for spec in self.specs]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=test_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def client(db, queue):
    from app.api.deps import get_notification_queue
    from app.main import app

    app.dependency_overrides[get_notification_queue] = lambda: queue
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, email: str, role: UserRole = UserRole.USER, name: str = "Test User") -> Users:
    user = Users(email=email, name=name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: Users) -> dict:
    token = create_access_token({"sub": user.id, "email": user.email})
    return {"Authorization": f"Bearer {token}"}


def make_reservation(
    db,
    user: Users,
    day: date,
    start: time = time(10, 0),
    end: time = time(11, 0),
    status: ReservationStatus = ReservationStatus.PENDING,
) -> Reservations:
    reservation = Reservations(
        user_id=user.id,
        name=user.name,
        email=user.email,
        date=day,
        start_time=start,
        end_time=end,
        purpose="Team meeting",
        attendees=5,
        type="event",
        status=status,
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation


@pytest.fixture
def regular_user(db) -> Users:
    return make_user(db, "alice@example.com", UserRole.USER, name="Alice Santos")


@pytest.fixture
def other_user(db) -> Users:
    return make_user(db, "bob@example.com", UserRole.USER, name="Bob Reyes")


@pytest.fixture
def staff_user(db) -> Users:
    return make_user(db, "staff@example.com", UserRole.STAFF, name="Front Desk")


@pytest.fixture
def admin_user(db) -> Users:
    return make_user(db, "admin@example.com", UserRole.ADMIN, name="Admin User")
