"""Upload API - stores a document for an event without attaching it."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from loguru import logger
from sqlmodel import Session

from health_api.database import get_db_session
from health_api.exceptions import InternalError, ValidationError
from health_api.models.base_model import FileAttachment
from health_api.services.event_service import EventService, get_event_service

router = APIRouter()


@router.post("/upload-file", response_model=FileAttachment, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: UploadFile = File(...),
    slot: str = Form(...),
    event_id: UUID = Form(alias="eventId"),
    event_service: EventService = Depends(get_event_service),
    session: Session = Depends(get_db_session),
) -> FileAttachment:
    """Store a document under ``/uploads/<eventId>/<slot>-<name>``.

    The event's attachment list is not changed; clients follow up with
    ``PUT /events`` to reference the returned attachment.

    Args:
        file: Uploaded document
        slot: Slot the document is meant for
        event_id: Event the document belongs to
        event_service: Event service instance
        session: Database session

    Returns:
        The attachment describing the stored document
    """
    if slot not in event_service.config.file_slots:
        raise ValidationError.from_errors({"slot": f"Unknown document slot '{slot}'."})
    event_service.get_event(session, event_id)

    name = file.filename or slot
    try:
        url = event_service.storage.save(event_id, slot, name, file.file.read())
    except OSError as e:
        logger.error(f"Upload of {name} for event {event_id} failed: {e}")
        raise InternalError(f"Failed to store document: {e}") from e
    return FileAttachment(slot=slot, name=name, url=url, upload_date=date.today().isoformat())
