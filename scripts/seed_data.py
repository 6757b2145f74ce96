"""
Seed script for the reservation system development database.

- Admin, staff and regular user accounts (sign-in is handled by the external
  identity provider; the printed tokens are for local API testing)
- Default system, time slot and email settings
- A few reservations over the next two weeks, in every status
- One blackout date

Run with: python -m scripts.seed_data
"""

from datetime import time, timedelta
from app.db.database import Base, SessionLocal, engine
from app.core.security import create_access_token
from app.db.models.users import Users, UserRole
from app.db.models.reservations import Reservations, ReservationStatus
from app.db.models.blackout_dates import BlackoutDates
from app.services.availability import local_today
from app.services.site_settings import get_email_settings, get_system_settings, get_time_slot_settings


def reset_tables():
    """Drop and recreate every table."""
    print("Recreating tables...")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def seed_users(db):
    print("Seeding users...")
    users = [
        Users(id=1, email="admin@example.com", name="Admin User", role=UserRole.ADMIN),
        Users(id=2, email="staff@example.com", name="Front Desk", role=UserRole.STAFF),
        Users(id=3, email="alice@example.com", name="Alice Santos", role=UserRole.USER),
        Users(id=4, email="bob@example.com", name="Bob Reyes", role=UserRole.USER),
    ]
    db.add_all(users)
    db.commit()
    print(f"  Created {len(users)} users")


def seed_settings(db):
    print("Seeding settings...")
    get_system_settings(db)
    get_time_slot_settings(db)
    get_email_settings(db)


def _next_weekday(start, offset_days):
    day = start + timedelta(days=offset_days)
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


def seed_reservations(db):
    print("Seeding reservations...")
    today = local_today()
    rows = [
        (3, _next_weekday(today, 2), time(9, 0), time(10, 30), "Team planning", 12, "event", ReservationStatus.APPROVED),
        (4, _next_weekday(today, 2), time(10, 0), time(11, 0), "Yoga class", 8, "gym", ReservationStatus.APPROVED),
        (3, _next_weekday(today, 3), time(13, 0), time(15, 0), "Safety training", 20, "training", ReservationStatus.PENDING),
        (4, _next_weekday(today, 5), time(8, 0), time(9, 0), "Board meeting", 6, "other", ReservationStatus.REJECTED),
        (3, _next_weekday(today, 7), time(14, 0), time(16, 0), "Workshop", 15, "training", ReservationStatus.CANCELLED),
    ]
    users = {u.id: u for u in db.query(Users).all()}
    for user_id, day, start, end, purpose, attendees, kind, status in rows:
        user = users[user_id]
        db.add(Reservations(
            user_id=user_id,
            name=user.name,
            email=user.email,
            date=day,
            start_time=start,
            end_time=end,
            purpose=purpose,
            attendees=attendees,
            type=kind,
            status=status,
            reviewed_by_user_id=2 if status in (ReservationStatus.APPROVED, ReservationStatus.REJECTED) else None,
        ))
    db.commit()
    print(f"  Created {len(rows)} reservations")


def seed_blackout_dates(db):
    print("Seeding blackout dates...")
    day = _next_weekday(local_today(), 10)
    db.add(BlackoutDates(date=day, reason="Facility maintenance"))
    db.commit()
    print(f"  Blocked {day.isoformat()}")


def main():
    reset_tables()
    db = SessionLocal()
    try:
        seed_users(db)
        seed_settings(db)
        seed_reservations(db)
        seed_blackout_dates(db)

        print("\n" + "="*50)
        print("Seeding complete!")
        print("="*50)
        print("\nBearer tokens (valid for ACCESS_TOKEN_EXPIRE_MINUTES):")
        for user in db.query(Users).order_by(Users.id).all():
            token = create_access_token({"sub": user.id, "email": user.email})
            print(f"  {user.role.value:<5} {user.email}: {token}")
        print("="*50 + "\n")

    except Exception as e:
        db.rollback()
        print(f"\nError during seeding: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
