import pytest
from datetime import date, datetime, timezone

from app.services.availability import (
    AvailabilityStatus,
    BusinessHoursConfig,
    find_earliest_available_date,
    get_date_availability,
    get_range_availability,
    get_zone,
    normalize_snapshot_status,
)
from app.core.config import settings

from conftest import BUSINESS_HOURS, MANILA, get_test_monday


# 09:00 Monday 2025-01-20 in Manila (UTC+8)
MONDAY_MORNING = datetime(2025, 1, 20, 1, 0, tzinfo=timezone.utc)


def availability(day, snapshot, now=MONDAY_MORNING, business_hours=BUSINESS_HOURS):
    return get_date_availability(day, business_hours, snapshot, now=now, tz=MANILA)


class TestNormalizeSnapshotStatus:
    def test_pass_through(self):
        assert normalize_snapshot_status("available") == AvailabilityStatus.AVAILABLE
        assert normalize_snapshot_status("limited") == AvailabilityStatus.LIMITED
        assert normalize_snapshot_status("unavailable") == AvailabilityStatus.UNAVAILABLE

    def test_full_is_unavailable(self):
        assert normalize_snapshot_status("full") == AvailabilityStatus.UNAVAILABLE

    def test_unknown_and_missing_are_unavailable(self):
        assert normalize_snapshot_status("bogus") == AvailabilityStatus.UNAVAILABLE
        assert normalize_snapshot_status(None) == AvailabilityStatus.UNAVAILABLE


class TestGetDateAvailability:
    def test_open_day_uses_snapshot(self):
        assert availability(date(2025, 1, 21), {"2025-01-21": "available"}) == AvailabilityStatus.AVAILABLE

    def test_limited_passes_through(self):
        assert availability(date(2025, 1, 21), {"2025-01-21": "limited"}) == AvailabilityStatus.LIMITED

    def test_full_day(self):
        assert availability(date(2025, 1, 21), {"2025-01-21": "full"}) == AvailabilityStatus.UNAVAILABLE

    def test_missing_from_snapshot(self):
        assert availability(date(2025, 1, 21), {}) == AvailabilityStatus.UNAVAILABLE
        assert availability(date(2025, 1, 21), None) == AvailabilityStatus.UNAVAILABLE

    def test_closed_weekday_ignores_snapshot(self):
        saturday = date(2025, 1, 25)
        assert availability(saturday, {"2025-01-25": "available"}) == AvailabilityStatus.UNAVAILABLE

    def test_weekday_missing_from_config_is_closed(self):
        hours = {"monday": BUSINESS_HOURS["monday"]}
        assert availability(date(2025, 1, 21), {"2025-01-21": "available"}, business_hours=hours) == AvailabilityStatus.UNAVAILABLE

    def test_today_before_slot_end(self):
        today = get_test_monday()
        assert availability(today, {"2025-01-20": "available"}) == AvailabilityStatus.AVAILABLE

    def test_today_after_slot_end(self):
        evening = datetime(2025, 1, 20, 9, 30, tzinfo=timezone.utc)  # 17:30 Manila
        assert availability(get_test_monday(), {"2025-01-20": "available"}, now=evening) == AvailabilityStatus.UNAVAILABLE

    def test_today_exactly_at_slot_end(self):
        closing = datetime(2025, 1, 20, 9, 0, tzinfo=timezone.utc)  # 17:00 Manila
        assert availability(get_test_monday(), {"2025-01-20": "available"}, now=closing) == AvailabilityStatus.UNAVAILABLE

    def test_past_day(self):
        assert availability(date(2025, 1, 17), {"2025-01-17": "available"}) == AvailabilityStatus.UNAVAILABLE

    def test_now_is_read_in_canonical_zone(self):
        # 2025-01-20 18:00 UTC is already Tuesday 02:00 in Manila, so Monday is in the past
        late_utc = datetime(2025, 1, 20, 18, 0, tzinfo=timezone.utc)
        assert availability(get_test_monday(), {"2025-01-20": "available"}, now=late_utc) == AvailabilityStatus.UNAVAILABLE
        assert availability(date(2025, 1, 21), {"2025-01-21": "available"}, now=late_utc) == AvailabilityStatus.AVAILABLE

    def test_aware_datetime_resolves_to_local_day(self):
        # 20:00 UTC on the 21st is 04:00 on the 22nd in Manila
        moment = datetime(2025, 1, 21, 20, 0, tzinfo=timezone.utc)
        assert availability(moment, {"2025-01-22": "limited"}) == AvailabilityStatus.LIMITED

    def test_iso_string_input(self):
        assert availability("2025-01-21", {"2025-01-21": "available"}) == AvailabilityStatus.AVAILABLE

    def test_legacy_time_slots_list(self):
        hours = dict(BUSINESS_HOURS)
        hours["tuesday"] = {"enabled": True, "timeSlots": [{"start": "09:00", "end": "12:00"}]}
        assert availability(date(2025, 1, 21), {"2025-01-21": "available"}, business_hours=hours) == AvailabilityStatus.AVAILABLE

    def test_accepts_parsed_config(self):
        config = BusinessHoursConfig.from_dict(BUSINESS_HOURS)
        assert availability(date(2025, 1, 21), {"2025-01-21": "available"}, business_hours=config) == AvailabilityStatus.AVAILABLE

    @pytest.mark.parametrize("day", [None, "not-a-date", 12345])
    def test_invalid_day(self, day):
        assert availability(day, {"2025-01-21": "available"}) == AvailabilityStatus.UNAVAILABLE

    @pytest.mark.parametrize("hours", [
        None,
        {"funday": {"enabled": True, "timeSlot": {"start": "08:00", "end": "17:00"}}},
        {"tuesday": {"enabled": True, "timeSlot": {"start": "17:00", "end": "08:00"}}},
        {"tuesday": {"enabled": True, "timeSlot": {"start": "8am", "end": "5pm"}}},
        {"tuesday": "open"},
        ["monday"],
        {"tuesday": {"enabled": True, "timeSlots": 5}},
        {"tuesday": {"enabled": True, "timeSlots": {"a": 1}}},
        {"tuesday": {"enabled": True, "timeSlots": ["08:00-17:00"]}},
        {"tuesday": {"enabled": True, "timeSlots": []}},
        {"tuesday": {"enabled": "false", "timeSlot": {"start": "08:00", "end": "17:00"}}},
        {"tuesday": {"enabled": 1, "timeSlot": {"start": "08:00", "end": "17:00"}}},
    ])
    def test_malformed_business_hours(self, hours):
        assert availability(date(2025, 1, 21), {"2025-01-21": "available"}, business_hours=hours) == AvailabilityStatus.UNAVAILABLE

    @pytest.mark.parametrize("snapshot", [["2025-01-21"], "available", 5])
    def test_snapshot_not_a_mapping(self, snapshot):
        assert availability(date(2025, 1, 21), snapshot) == AvailabilityStatus.UNAVAILABLE


class TestFindEarliestAvailableDate:
    def find(self, min_date, max_date, snapshot, cap=90):
        return find_earliest_available_date(
            min_date, max_date, BUSINESS_HOURS, snapshot, now=MONDAY_MORNING, tz=MANILA, scan_cap_days=cap,
        )

    def test_skips_full_and_closed_days(self):
        snapshot = {
            "2025-01-24": "full",
            "2025-01-25": "available",  # Saturday, closed
            "2025-01-26": "available",  # Sunday, closed
            "2025-01-27": "available",
        }
        assert self.find(date(2025, 1, 24), None, snapshot) == date(2025, 1, 27)

    def test_limited_counts_as_bookable(self):
        assert self.find(date(2025, 1, 21), None, {"2025-01-21": "limited"}) == date(2025, 1, 21)

    def test_min_date_inclusive(self):
        snapshot = {"2025-01-21": "available", "2025-01-22": "available"}
        assert self.find(date(2025, 1, 21), None, snapshot) == date(2025, 1, 21)

    def test_max_date_inclusive(self):
        snapshot = {"2025-01-23": "available"}
        assert self.find(date(2025, 1, 21), date(2025, 1, 23), snapshot) == date(2025, 1, 23)

    def test_nothing_before_max_date(self):
        snapshot = {"2025-01-28": "available"}
        assert self.find(date(2025, 1, 21), date(2025, 1, 27), snapshot) is None

    def test_scan_cap_limits_search(self):
        snapshot = {"2025-06-02": "available"}
        assert self.find(date(2025, 1, 21), None, snapshot, cap=30) is None
        assert self.find(date(2025, 1, 21), date(2025, 12, 31), snapshot, cap=30) is None

    def test_min_after_max(self):
        assert self.find(date(2025, 1, 23), date(2025, 1, 21), {"2025-01-22": "available"}) is None

    def test_invalid_min_date(self):
        assert self.find("garbage", None, {"2025-01-22": "available"}) is None

    def test_past_days_not_returned(self):
        snapshot = {"2025-01-15": "available", "2025-01-22": "available"}
        assert self.find(date(2025, 1, 13), None, snapshot) == date(2025, 1, 22)

    def test_malformed_business_hours(self):
        hours = {"tuesday": {"enabled": True, "timeSlots": 5}}
        found = find_earliest_available_date(
            date(2025, 1, 21), None, hours, {"2025-01-21": "available"}, now=MONDAY_MORNING, tz=MANILA,
        )
        assert found is None

    def test_unknown_configured_timezone(self, monkeypatch):
        monkeypatch.setattr(settings, "RESERVATION_TIMEZONE", "Mars/Olympus_Mons")
        get_zone.cache_clear()
        try:
            assert find_earliest_available_date(date(2025, 1, 21), None, BUSINESS_HOURS, {"2025-01-21": "available"}) is None
            assert get_date_availability(date(2025, 1, 21), BUSINESS_HOURS, {"2025-01-21": "available"}) == AvailabilityStatus.UNAVAILABLE
        finally:
            get_zone.cache_clear()


class TestGetRangeAvailability:
    def test_every_day_keyed(self):
        result = get_range_availability(
            date(2025, 1, 20), date(2025, 1, 26), BUSINESS_HOURS,
            {"2025-01-21": "available", "2025-01-22": "full"},
            now=MONDAY_MORNING, tz=MANILA,
        )
        assert len(result) == 7
        assert result["2025-01-21"] == AvailabilityStatus.AVAILABLE
        assert result["2025-01-22"] == AvailabilityStatus.UNAVAILABLE
        assert result["2025-01-25"] == AvailabilityStatus.UNAVAILABLE
