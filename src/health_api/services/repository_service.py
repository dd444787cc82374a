"""Read-only document repository view over a user's events."""

from collections.abc import Iterable
from functools import lru_cache
from uuid import UUID

from loguru import logger
from sqlmodel import Session, select

from health_api.models.api_model import FileSummary, RepositoryDateGroup, RepositoryEvent, RepositoryView
from health_api.models.db_model import HealthEvent, Professional


def _matches(event: RepositoryEvent, term: str) -> bool:
    return (
        term in event.title.lower()
        or term in event.professional_name.lower()
        or any(term in attachment.name.lower() for attachment in event.files)
    )


def summarize_files(events: Iterable[RepositoryEvent]) -> FileSummary:
    """Count attachments by slot, e.g. ``Total: 3 document(s) (2 Result(s) • 1 Invoice(s))``."""
    counts: dict[str, int] = {}
    for event in events:
        for attachment in event.files:
            counts[attachment.slot] = counts.get(attachment.slot, 0) + 1

    total = sum(counts.values())
    breakdown = " • ".join(f"{count} {slot[:1].upper()}{slot[1:]}(s)" for slot, count in counts.items())
    return FileSummary(total=total, counts=counts, display=f"Total: {total} document(s) ({breakdown})")


def build_repository_view(events: list[RepositoryEvent], search: str | None = None) -> RepositoryView:
    """Filter, group and summarize events for the repository screen.

    Args:
        events: The user's events with their professional names
        search: Case-insensitive term matched against title, professional
            name and attachment names; blank means no filter

    Returns:
        RepositoryView with date groups newest first. The file summary always
        covers every event, regardless of the filter.
    """
    term = (search or "").strip().lower()
    filtered = [event for event in events if _matches(event, term)] if term else list(events)

    grouped: dict[str, list[RepositoryEvent]] = {}
    for event in filtered:
        grouped.setdefault(event.date.split("T")[0], []).append(event)

    groups = [RepositoryDateGroup(date=day, events=grouped[day]) for day in sorted(grouped, reverse=True)]
    return RepositoryView(
        groups=groups,
        summary=summarize_files(events),
        total_events=len(events),
        filtered_events=len(filtered),
    )


class RepositoryService:
    """Loads a user's events and projects them into the repository view."""

    def load_events(self, session: Session, user_id: UUID) -> list[RepositoryEvent]:
        stmt = (
            select(HealthEvent, Professional.name)
            .join(Professional, Professional.id == HealthEvent.professional_id)
            .where(HealthEvent.user_id == user_id)
            .order_by(HealthEvent.date, HealthEvent.start_time)
        )
        return [
            RepositoryEvent(
                id=event.id,
                title=event.title,
                date=event.date,
                start_time=event.start_time,
                end_time=event.end_time,
                type=event.type,
                professional_name=professional_name,
                files=event.files or [],
            )
            for event, professional_name in session.exec(stmt).all()
        ]

    def get_repository(self, session: Session, user_id: UUID, search: str | None = None) -> RepositoryView:
        events = self.load_events(session, user_id)
        view = build_repository_view(events, search)
        logger.debug(f"Service: repository for user {user_id}: {view.filtered_events}/{view.total_events} events, {view.summary.total} documents")
        return view


@lru_cache
def get_repository_service() -> RepositoryService:
    """Get the repository service singleton."""
    return RepositoryService()
