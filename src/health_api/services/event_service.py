"""Service for health event lifecycle operations."""

from collections.abc import Sequence
from datetime import datetime, timezone
from functools import lru_cache
from uuid import UUID

from loguru import logger
from pydantic import BaseModel, Field
from sqlmodel import Session, select

from health_api.constants import DEFAULT_FILE_SLOTS, PROMOTED_EVENT_DESCRIPTION, PROTECTED_FILE_SLOTS
from health_api.database import atomic
from health_api.exceptions import InternalError, NotFoundError, ValidationError
from health_api.models.api_model import EventCreateInput, EventResponse, EventUpdateInput
from health_api.models.base_model import FileAttachment, NotificationStatus
from health_api.models.db_model import HealthEvent, Notification, Professional, User
from health_api.scheduling import (
    FileSlotConflict,
    ensure_no_overlap,
    normalize_event_date,
    parse_attachments,
    reconcile_files,
    validate_event_datetime,
)
from health_api.scheduling.file_slots import latest_per_slot
from health_api.services.storage_service import StorageService, get_storage_service
from health_api.settings import Settings, get_settings
from health_api.utils.model_converter import to_response_list, to_response_model

REQUIRED_FIELDS = ("title", "date", "type", "start_time", "end_time", "professional_id")

FIELD_LABELS = {
    "id": "Event id",
    "title": "Title",
    "date": "Date",
    "type": "Type",
    "start_time": "Start time",
    "end_time": "End time",
    "professional_id": "Professional",
}


class EventServiceConfig(BaseModel):
    """Configuration handed to the event service at construction."""

    file_slots: list[str] = Field(default_factory=lambda: list(DEFAULT_FILE_SLOTS))
    protected_slots: list[str] = Field(default_factory=lambda: list(PROTECTED_FILE_SLOTS))
    default_promoted_description: str = PROMOTED_EVENT_DESCRIPTION
    enforce_time_order: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "EventServiceConfig":
        return cls(
            file_slots=settings.file_slots,
            protected_slots=settings.protected_file_slots,
            enforce_time_order=settings.enforce_time_order,
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _replaced_entries(current: Sequence[dict], files: Sequence[FileAttachment]) -> list[dict]:
    """Stored entries whose slot now holds a document at a different URL."""
    urls = {attachment.slot: attachment.url for attachment in files}
    return [entry for entry in current if entry.get("slot") in urls and entry.get("url") != urls[entry["slot"]]]


class EventService:
    """Creates, updates and deletes health events.

    Create runs required-field checks, date/time validation and the overlap
    check, in that order. Update skips the overlap check. When a source
    notification is given, the event write and the notification archive
    commit in one transaction.
    """

    def __init__(self, config: EventServiceConfig | None = None, storage: StorageService | None = None):
        self.config = config or EventServiceConfig()
        self.storage = storage or get_storage_service()

    def _check_required(self, data: EventCreateInput, fields: Sequence[str]) -> None:
        missing = {field: f"{FIELD_LABELS[field]} is required." for field in fields if _is_blank(getattr(data, field))}
        if missing:
            logger.warning(f"Service: missing required event fields: {sorted(missing)}")
            raise ValidationError("Missing required fields", missing)

    def _check_times(self, data: EventCreateInput) -> str:
        """Validate date and times, returning the normalized date."""
        validation = validate_event_datetime(data.date, data.start_time, data.end_time, self.config.enforce_time_order)
        if not validation.is_valid:
            logger.warning(f"Service: event date/time validation failed: {validation.errors}")
            raise ValidationError.from_errors(validation.errors)
        return normalize_event_date(data.date)

    def _archive_notification(self, session: Session, notification_id: UUID) -> None:
        notification = session.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        notification.status = NotificationStatus.ARCHIVED.value
        notification.updated_at = _now()
        session.add(notification)

    def _get_event_model(self, session: Session, event_id: UUID) -> HealthEvent:
        event = session.get(HealthEvent, event_id)
        if event is None:
            logger.debug(f"Service: event not found: {event_id}")
            raise NotFoundError("Event", event_id)
        return event

    def get_event(self, session: Session, event_id: UUID) -> EventResponse:
        """Get an event by id.

        Raises:
            NotFoundError: If the event does not exist
        """
        return to_response_model(self._get_event_model(session, event_id), EventResponse)

    def list_events(self, session: Session, user_id: UUID) -> list[EventResponse]:
        """List a user's events in calendar order."""
        logger.debug(f"Service: list_events for user {user_id}")
        stmt = select(HealthEvent).where(HealthEvent.user_id == user_id).order_by(HealthEvent.date, HealthEvent.start_time)
        events = session.exec(stmt).all()
        logger.debug(f"Service: list_events found {len(events)} events")
        return to_response_list(events, EventResponse)

    def create_event(self, session: Session, user_id: UUID, data: EventCreateInput) -> EventResponse:
        """Create an event for a user.

        Args:
            session: Database session
            user_id: Owner of the event
            data: Event fields, optionally tagged with a source notification

        Returns:
            The created event with its generated id

        Raises:
            ValidationError: Missing fields, bad date/time or malformed attachments
            NotFoundError: Unknown user, professional or notification
            ConflictError: The professional is already booked in that range
        """
        logger.debug(f"Service: create_event for user {user_id}: {data.title} on {data.date}, notification={data.notification_id}")
        self._check_required(data, REQUIRED_FIELDS)
        event_date = self._check_times(data)
        files = latest_per_slot(parse_attachments(data.files, self.config.file_slots))

        if session.get(User, user_id) is None:
            raise NotFoundError("User", user_id)
        if session.get(Professional, data.professional_id) is None:
            raise NotFoundError("Professional", data.professional_id)

        description = data.description
        if data.notification_id and _is_blank(description):
            description = data.observation if not _is_blank(data.observation) else self.config.default_promoted_description

        with atomic(session, "create event"):
            ensure_no_overlap(session, data.professional_id, event_date, data.start_time, data.end_time)
            event = HealthEvent(
                title=data.title,
                description=description,
                observation=data.observation,
                date=event_date,
                start_time=data.start_time,
                end_time=data.end_time,
                type=data.type.value,
                user_id=user_id,
                professional_id=data.professional_id,
                files=[attachment.to_storage() for attachment in files.values()],
            )
            session.add(event)
            if data.notification_id:
                self._archive_notification(session, data.notification_id)

        session.refresh(event)
        if data.notification_id:
            logger.info(f"Service: event created and notification archived: {event.id}")
        else:
            logger.info(f"Service: event created: {event.id}")
        return to_response_model(event, EventResponse)

    def update_event(self, session: Session, data: EventUpdateInput, overwrite: bool = False) -> EventResponse | FileSlotConflict:
        """Update an event.

        Without a notification id the attachment list is replaced as given.
        With one, incoming attachments are merged slot by slot and the
        notification is archived in the same transaction; an occupied result
        slot without ``overwrite`` returns a FileSlotConflict and nothing is
        written.

        Raises:
            ValidationError: Missing fields, bad date/time or malformed attachments
            NotFoundError: Unknown event, professional or notification
        """
        logger.debug(f"Service: update_event {data.id}, notification={data.notification_id}, overwrite={overwrite}")
        self._check_required(data, ("id", *REQUIRED_FIELDS))
        event_date = self._check_times(data)
        event = self._get_event_model(session, data.id)
        if session.get(Professional, data.professional_id) is None:
            raise NotFoundError("Professional", data.professional_id)
        previous = list(event.files or [])

        if data.notification_id:
            outcome = reconcile_files(
                event.files,
                data.files or [],
                overwrite=overwrite,
                allowed_slots=self.config.file_slots,
                protected_slots=self.config.protected_slots,
            )
            if outcome.conflict is not None:
                logger.info(f"Service: update_event {event.id} refused, slot '{outcome.conflict.slot}' already filled")
                session.rollback()
                return outcome.conflict
            files = outcome.files
        else:
            files = list(latest_per_slot(parse_attachments(data.files, self.config.file_slots)).values())

        with atomic(session, "update event"):
            event.title = data.title
            event.description = data.description
            if data.observation is not None:
                event.observation = data.observation
            event.date = event_date
            event.start_time = data.start_time
            event.end_time = data.end_time
            event.type = data.type.value
            event.professional_id = data.professional_id
            event.files = [attachment.to_storage() for attachment in files]
            event.updated_at = _now()
            session.add(event)
            if data.notification_id:
                self._archive_notification(session, data.notification_id)

        session.refresh(event)
        logger.info(f"Service: event updated: {event.id}")
        if data.notification_id:
            self._delete_stored_files(_replaced_entries(previous, files))
        return to_response_model(event, EventResponse)

    def attach_file(
        self,
        session: Session,
        event_id: UUID,
        attachment: FileAttachment,
        overwrite: bool = False,
        content: bytes | None = None,
    ) -> EventResponse | FileSlotConflict:
        """Put one document into its slot, honoring the protected-slot rule.

        When ``content`` is given it is written to storage only after the merge
        was accepted.

        Raises:
            NotFoundError: If the event does not exist
            ValidationError: If the attachment names an unknown slot
            InternalError: If the document cannot be written
        """
        event = self._get_event_model(session, event_id)
        previous = list(event.files or [])
        outcome = reconcile_files(
            event.files,
            [attachment],
            overwrite=overwrite,
            allowed_slots=self.config.file_slots,
            protected_slots=self.config.protected_slots,
        )
        if outcome.conflict is not None:
            session.rollback()
            return outcome.conflict

        if content is not None:
            try:
                self.storage.save(event_id, attachment.slot, attachment.name, content)
            except OSError as e:
                logger.error(f"Service: storing {attachment.slot} document for event {event_id} failed: {e}")
                raise InternalError(f"Failed to store document: {e}") from e
        response = self._store_files(session, event, outcome.files)
        self._delete_stored_files(_replaced_entries(previous, outcome.files))
        return response

    def update_event_files(self, session: Session, event_id: UUID, files: Sequence[FileAttachment]) -> EventResponse:
        """Replace an event's attachment list, keeping the last document per slot."""
        event = self._get_event_model(session, event_id)
        return self._store_files(session, event, list(latest_per_slot(parse_attachments(files, self.config.file_slots)).values()))

    def remove_file(self, session: Session, event_id: UUID, slot: str, delete_file: bool = True) -> EventResponse:
        """Empty one slot of an event, optionally deleting the stored document.

        Raises:
            NotFoundError: If the event does not exist or the slot is empty
        """
        event = self._get_event_model(session, event_id)
        removed = [entry for entry in event.files if entry.get("slot") == slot]
        if not removed:
            raise NotFoundError("Document slot", f"{event_id}/{slot}")

        if delete_file:
            self._delete_stored_files(removed)
        kept = [FileAttachment.model_validate(entry) for entry in event.files if entry.get("slot") != slot]
        return self._store_files(session, event, kept)

    def _store_files(self, session: Session, event: HealthEvent, files: Sequence[FileAttachment]) -> EventResponse:
        with atomic(session, "update event files"):
            event.files = [attachment.to_storage() for attachment in files]
            event.updated_at = _now()
            session.add(event)
        session.refresh(event)
        logger.debug(f"Service: event {event.id} now holds slots {[attachment.slot for attachment in files]}")
        return to_response_model(event, EventResponse)

    def _delete_stored_files(self, entries: Sequence[dict]) -> None:
        """Best-effort removal of stored documents; failures are logged only."""
        for entry in entries:
            url = entry.get("url") if isinstance(entry, dict) else None
            if not url:
                continue
            try:
                self.storage.delete(url)
            except (OSError, ValueError) as e:
                logger.error(f"Service: failed to delete file {url}: {e}")

    def delete_event(self, session: Session, event_id: UUID, delete_files: bool = False) -> bool:
        """Delete an event, optionally removing its stored documents first.

        A document that is missing or cannot be removed never blocks the
        deletion of the event itself.

        Raises:
            NotFoundError: If the event does not exist
        """
        logger.debug(f"Service: delete_event {event_id}, delete_files={delete_files}")
        event = self._get_event_model(session, event_id)

        if delete_files:
            self._delete_stored_files(list(event.files or []))

        with atomic(session, "delete event"):
            session.delete(event)

        logger.info(f"Service: event deleted: {event_id}")
        return True


@lru_cache
def get_event_service() -> EventService:
    """Get the event service singleton configured from global settings.

    Returns:
        EventService: The singleton event service instance
    """
    return EventService(EventServiceConfig.from_settings(get_settings()), get_storage_service())
