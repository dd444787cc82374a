"""Tests for double-booking detection."""

import pytest

from health_api.exceptions import ConflictError
from health_api.models.db_model import HealthEvent, Professional
from health_api.scheduling.overlap import (
    OVERLAP_MESSAGE,
    ensure_no_overlap,
    find_overlapping_events,
    times_overlap,
)


@pytest.mark.parametrize(
    "a,b,expected",
    [
        (("09:00", "09:30"), ("09:15", "09:45"), True),
        (("09:15", "09:45"), ("09:00", "09:30"), True),
        (("09:00", "09:30"), ("09:30", "10:00"), True),  # touching boundary
        (("09:00", "09:30"), ("09:31", "10:00"), False),
        (("10:00", "11:00"), ("09:00", "09:59"), False),
        (("09:00", "12:00"), ("10:00", "10:30"), True),  # containment
    ],
)
def test_times_overlap(a, b, expected):
    assert times_overlap(*a, *b) is expected
    assert times_overlap(*b, *a) is expected


@pytest.fixture
def booked(session, user, professional) -> HealthEvent:
    event = HealthEvent(
        title="Consulta",
        date="2025-03-10",
        start_time="09:00",
        end_time="09:30",
        type="CONSULTATION",
        user_id=user.id,
        professional_id=professional.id,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


class TestFindOverlappingEvents:
    def test_finds_overlap_same_day(self, session, professional, booked):
        conflicts = find_overlapping_events(session, professional.id, "2025-03-10", "09:15", "09:45")
        assert [event.id for event in conflicts] == [booked.id]

    def test_touching_end_is_a_conflict(self, session, professional, booked):
        assert find_overlapping_events(session, professional.id, "2025-03-10", "09:30", "10:00")

    def test_other_day_is_free(self, session, professional, booked):
        assert find_overlapping_events(session, professional.id, "2025-03-11", "09:00", "09:30") == []

    def test_other_professional_is_free(self, session, user, booked):
        other = Professional(name="Dr. Paulo Lima", user_id=user.id)
        session.add(other)
        session.commit()
        assert find_overlapping_events(session, other.id, "2025-03-10", "09:00", "09:30") == []


def test_ensure_no_overlap_raises_conflict(session, professional, booked):
    with pytest.raises(ConflictError) as exc_info:
        ensure_no_overlap(session, professional.id, "2025-03-10", "09:15", "09:45")
    assert exc_info.value.message == OVERLAP_MESSAGE
    assert exc_info.value.status_code == 409


def test_ensure_no_overlap_passes_for_free_slot(session, professional, booked):
    ensure_no_overlap(session, professional.id, "2025-03-10", "10:00", "10:30")
