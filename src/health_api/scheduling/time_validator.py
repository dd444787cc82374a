"""Date and time validation for calendar events.

Dates travel as ``YYYY-MM-DD`` and times as ``HH:MM`` (local, no timezone).
All validators are pure and return human-readable messages instead of
raising, so every invalid field can be reported in one response.
"""

import re
from datetime import date, datetime, time, timezone, tzinfo

from pydantic import BaseModel, Field

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


class TimeValidationResult(BaseModel):
    """Outcome of validating an event's date and time range."""

    is_valid: bool
    errors: dict[str, str] = Field(default_factory=dict)


def parse_date(value: str | None) -> date | None:
    """Parse a canonical ``YYYY-MM-DD`` string, returning None when it is not a real date."""
    if not value or not DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_time(value: str | None) -> time | None:
    """Parse a canonical ``HH:MM`` string, returning None when it is not a time of day."""
    if not value or not TIME_PATTERN.match(value):
        return None
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        return None


def validate_date(value: str | None) -> str | None:
    if not value:
        return "Date is required."
    if parse_date(value) is None:
        return "Invalid date."
    return None


def validate_start_time(value: str | None) -> str | None:
    if not value:
        return "Start time is required."
    if parse_time(value) is None:
        return "Invalid start time."
    return None


def validate_end_time(value: str | None) -> str | None:
    if not value:
        return "End time is required."
    if parse_time(value) is None:
        return "Invalid end time."
    return None


def validate_event_datetime(
    event_date: str | None,
    start_time: str | None,
    end_time: str | None,
    enforce_order: bool = False,
) -> TimeValidationResult:
    """Validate the date and time range of an event.

    Args:
        event_date: Date in ``YYYY-MM-DD`` form
        start_time: Start time in ``HH:MM`` form
        end_time: End time in ``HH:MM`` form
        enforce_order: Also reject an end time earlier than the start time

    Returns:
        TimeValidationResult with one message per invalid field
    """
    errors: dict[str, str] = {}

    for field, message in (
        ("date", validate_date(event_date)),
        ("start_time", validate_start_time(start_time)),
        ("end_time", validate_end_time(end_time)),
    ):
        if message:
            errors[field] = message

    if enforce_order and "start_time" not in errors and "end_time" not in errors:
        if parse_time(end_time) < parse_time(start_time):
            errors["end_time"] = "End time must not be earlier than start time."

    return TimeValidationResult(is_valid=not errors, errors=errors)


def normalize_event_date(value: str, tz: tzinfo | None = None) -> str:
    """Return the UTC calendar date of ``value`` taken at local noon.

    Anchoring at noon keeps the calendar day stable for every offset within
    +/-12 hours, where anchoring at midnight would shift it by one day.

    Args:
        value: Date in ``YYYY-MM-DD`` form, already validated
        tz: Local timezone of the caller; defaults to the server's local zone
    """
    local_noon = datetime.combine(date.fromisoformat(value), time(12, 0))
    local_noon = local_noon.replace(tzinfo=tz) if tz is not None else local_noon.astimezone()
    return local_noon.astimezone(timezone.utc).date().isoformat()
