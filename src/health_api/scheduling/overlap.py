"""Double-booking detection for a professional's calendar.

Two ranges on the same day overlap when ``a.start <= b.end`` and
``a.end >= b.start``; touching boundaries count as an overlap. Times are
canonical ``HH:MM`` strings, so string comparison matches time order and the
check can run inside the database query.
"""

from uuid import UUID

from loguru import logger
from sqlmodel import Session, select

from health_api.database.advisory_lock import lock_professional_day
from health_api.exceptions import ConflictError
from health_api.models.db_model import HealthEvent

OVERLAP_MESSAGE = "An event already exists for this professional at this time (overlap)."


def times_overlap(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """Return True when the two ``HH:MM`` ranges share at least one instant."""
    return a_start <= b_end and a_end >= b_start


def find_overlapping_events(
    session: Session,
    professional_id: UUID,
    event_date: str,
    start_time: str,
    end_time: str,
) -> list[HealthEvent]:
    """Return the professional's events on ``event_date`` that overlap the range.

    Args:
        session: Database session
        professional_id: Professional whose calendar is checked
        event_date: Normalized ``YYYY-MM-DD`` date
        start_time: Candidate start time
        end_time: Candidate end time
    """
    stmt = select(HealthEvent).where(
        HealthEvent.professional_id == professional_id,
        HealthEvent.date == event_date,
        HealthEvent.start_time <= end_time,
        HealthEvent.end_time >= start_time,
    )
    return list(session.exec(stmt).all())


def ensure_no_overlap(
    session: Session,
    professional_id: UUID,
    event_date: str,
    start_time: str,
    end_time: str,
) -> None:
    """Raise ConflictError when the range collides with an existing event.

    The professional/day lock is held until the surrounding transaction ends,
    so a concurrent create for the same day waits for this one to commit
    before running its own check.

    Raises:
        ConflictError: If any overlapping event exists
    """
    lock_professional_day(session, professional_id, event_date)
    conflicts = find_overlapping_events(session, professional_id, event_date, start_time, end_time)
    if conflicts:
        logger.warning(
            f"Service: overlap for professional {professional_id} on {event_date} "
            f"{start_time}-{end_time} with {[str(event.id) for event in conflicts]}"
        )
        raise ConflictError(OVERLAP_MESSAGE)
