"""Tests for event date/time validation."""

from datetime import timedelta, timezone

import pytest

from health_api.scheduling.time_validator import (
    normalize_event_date,
    parse_date,
    parse_time,
    validate_event_datetime,
)


class TestValidateEventDatetime:
    """Validator accepts iff the date is a real date and both times are HH:MM."""

    def test_valid_range(self):
        result = validate_event_datetime("2025-03-10", "09:00", "09:30")
        assert result.is_valid
        assert result.errors == {}

    def test_all_fields_missing_reports_every_field(self):
        result = validate_event_datetime(None, "", None)
        assert not result.is_valid
        assert result.errors == {
            "date": "Date is required.",
            "start_time": "Start time is required.",
            "end_time": "End time is required.",
        }

    @pytest.mark.parametrize("value", ["2025-02-30", "2025-13-01", "10/03/2025", "2025-3-10", "tomorrow"])
    def test_invalid_dates(self, value):
        result = validate_event_datetime(value, "09:00", "09:30")
        assert result.errors == {"date": "Invalid date."}

    @pytest.mark.parametrize("value", ["24:00", "9:00", "09:60", "0900", "noon"])
    def test_invalid_start_times(self, value):
        result = validate_event_datetime("2025-03-10", value, "09:30")
        assert result.errors == {"start_time": "Invalid start time."}

    def test_invalid_end_time(self):
        result = validate_event_datetime("2025-03-10", "09:00", "25:10")
        assert result.errors == {"end_time": "Invalid end time."}

    def test_leap_day(self):
        assert validate_event_datetime("2024-02-29", "00:00", "23:59").is_valid
        assert not validate_event_datetime("2023-02-29", "00:00", "23:59").is_valid

    def test_end_before_start_accepted_by_default(self):
        assert validate_event_datetime("2025-03-10", "10:00", "09:00").is_valid

    def test_end_before_start_rejected_when_enforced(self):
        result = validate_event_datetime("2025-03-10", "10:00", "09:00", enforce_order=True)
        assert result.errors == {"end_time": "End time must not be earlier than start time."}

    def test_equal_times_allowed_when_enforced(self):
        assert validate_event_datetime("2025-03-10", "10:00", "10:00", enforce_order=True).is_valid


def test_parse_helpers_return_none_for_garbage():
    assert parse_date("2025-03-10").isoformat() == "2025-03-10"
    assert parse_date("") is None
    assert parse_time("23:59").hour == 23
    assert parse_time("23:5") is None


class TestNormalizeEventDate:
    @pytest.mark.parametrize("offset_hours", [-11, -3, 0, 5, 11])
    def test_calendar_day_stable_across_offsets(self, offset_hours):
        tz = timezone(timedelta(hours=offset_hours))
        assert normalize_event_date("2025-03-10", tz) == "2025-03-10"

    def test_far_east_offset_moves_to_previous_utc_day(self):
        # Noon at UTC+13 is 23:00 of the previous day in UTC
        assert normalize_event_date("2025-03-10", timezone(timedelta(hours=13))) == "2025-03-09"
