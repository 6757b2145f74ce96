from datetime import time, timedelta

from app.db.models.reservations import ReservationStatus
from app.services.site_settings import get_system_settings

from conftest import make_reservation, next_weekday


class TestGetAvailability:
    def test_range_with_map(self, client, db):
        start = next_weekday(7)
        end = start + timedelta(days=6)

        response = client.get("/api/v1/availability", params={
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "include_availability_map": True,
        })

        assert response.status_code == 200
        data = response.json()
        assert len(data["availability_map"]) == 7
        assert start.isoformat() in data["available_dates"]
        assert data["earliest_available_date"] == start.isoformat()
        assert "time_slots" not in data
        # a full week always contains a closed weekend
        assert "unavailable" in data["availability_map"].values()

    def test_map_omitted_by_default(self, client, db):
        start = next_weekday(7)
        response = client.get("/api/v1/availability", params={
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=2)).isoformat(),
        })
        assert response.status_code == 200
        assert "availability_map" not in response.json()

    def test_single_day_includes_time_slots(self, client, db, regular_user):
        day = next_weekday(7)
        make_reservation(db, regular_user, day, time(9, 0), time(10, 0), status=ReservationStatus.APPROVED)

        response = client.get("/api/v1/availability", params={"start_date": day.isoformat(), "end_date": day.isoformat()})

        assert response.status_code == 200
        slots = {s["time"]: s for s in response.json()["time_slots"]}
        assert slots["08:00"]["status"] == "available"
        assert slots["09:00"]["occupancy"] == 1
        assert slots["09:00"]["status"] == "limited"

    def test_pending_reservations_do_not_consume_capacity(self, client, db, regular_user):
        day = next_weekday(7)
        make_reservation(db, regular_user, day, time(9, 0), time(10, 0), status=ReservationStatus.PENDING)

        response = client.get("/api/v1/availability", params={"start_date": day.isoformat(), "end_date": day.isoformat()})
        slots = {s["time"]: s for s in response.json()["time_slots"]}
        assert slots["09:00"]["occupancy"] == 0

    def test_fully_booked_day_not_listed(self, client, db, regular_user):
        system = get_system_settings(db)
        system.allow_overlapping = False
        db.commit()
        day = next_weekday(7)
        make_reservation(db, regular_user, day, time(8, 0), time(17, 0), status=ReservationStatus.APPROVED)

        response = client.get("/api/v1/availability", params={"start_date": day.isoformat(), "end_date": day.isoformat()})
        assert response.json()["available_dates"] == []
        assert response.json()["earliest_available_date"] is None

    def test_start_after_end(self, client):
        day = next_weekday(7)
        response = client.get("/api/v1/availability", params={
            "start_date": day.isoformat(),
            "end_date": (day - timedelta(days=1)).isoformat(),
        })
        assert response.status_code == 400

    def test_range_too_long(self, client):
        day = next_weekday(7)
        response = client.get("/api/v1/availability", params={
            "start_date": day.isoformat(),
            "end_date": (day + timedelta(days=400)).isoformat(),
        })
        assert response.status_code == 400

    def test_invalid_date(self, client):
        response = client.get("/api/v1/availability", params={"start_date": "tomorrow", "end_date": "2025-01-01"})
        assert response.status_code == 422


class TestEarliestAndSlots:
    def test_earliest_skips_blackout(self, client, db, admin_user):
        from conftest import auth_headers

        day = next_weekday(7)
        client.post("/api/v1/settings/blackout-dates", json={"date": day.isoformat(), "reason": "Holiday"}, headers=auth_headers(admin_user))

        response = client.get("/api/v1/availability/earliest", params={"min_date": day.isoformat()})
        assert response.status_code == 200
        earliest = response.json()["earliest_available_date"]
        assert earliest is not None
        assert earliest > day.isoformat()

    def test_earliest_none_in_closed_window(self, client):
        day = next_weekday(7)
        saturday = day + timedelta(days=(5 - day.weekday()))
        response = client.get("/api/v1/availability/earliest", params={
            "min_date": saturday.isoformat(),
            "max_date": (saturday + timedelta(days=1)).isoformat(),
        })
        assert response.json()["earliest_available_date"] is None

    def test_day_slots(self, client):
        day = next_weekday(7)
        response = client.get("/api/v1/availability/slots", params={"date": day.isoformat()})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "available"
        assert data["slots"][0]["time"] == "08:00"
        assert data["slots"][-1]["time"] == "16:30"
