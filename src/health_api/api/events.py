"""
Events API - calendar health event lifecycle.

This module provides REST endpoints for managing health events:
- CRUD operations: Create, list, read, update and delete events
- Document slots: Attach a document to a slot or empty a slot

All endpoints delegate to EventService for business logic; errors raised by
the service are turned into responses by the global exception handlers.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import JSONResponse
from sqlmodel import Session

from health_api.api.dependencies import overwrite_confirmed
from health_api.constants import NO_STORE_CACHE_CONTROL
from health_api.database import get_db_session
from health_api.exceptions import ValidationError
from health_api.models.api_model import (
    DeleteEventResponse,
    EventCreateInput,
    EventDeleteInput,
    EventResponse,
    EventUpdateInput,
    FileSlotConflictResponse,
)
from health_api.models.base_model import FileAttachment
from health_api.scheduling import FileSlotConflict
from health_api.services.event_service import EventService, get_event_service

router = APIRouter()

CONFLICT_RESPONSES = {status.HTTP_409_CONFLICT: {"model": FileSlotConflictResponse}}


def _conflict_response(conflict: FileSlotConflict) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=FileSlotConflictResponse(warning=conflict.message).model_dump(by_alias=True),
    )


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    data: EventCreateInput,
    user_id: UUID = Query(alias="userId"),
    event_service: EventService = Depends(get_event_service),
    session: Session = Depends(get_db_session),
) -> EventResponse:
    """Create an event for a user.

    Args:
        data: Event fields, optionally with the id of the source notification
        user_id: Owner of the event
        event_service: Event service instance
        session: Database session

    Returns:
        The created EventResponse
    """
    return event_service.create_event(session, user_id, data)


@router.get("/events", response_model=list[EventResponse])
def list_events(
    response: Response,
    user_id: UUID = Query(alias="userId"),
    event_service: EventService = Depends(get_event_service),
    session: Session = Depends(get_db_session),
) -> list[EventResponse]:
    """List a user's events; the response is never cached."""
    response.headers["Cache-Control"] = NO_STORE_CACHE_CONTROL
    return event_service.list_events(session, user_id)


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(
    event_id: UUID,
    event_service: EventService = Depends(get_event_service),
    session: Session = Depends(get_db_session),
) -> EventResponse:
    return event_service.get_event(session, event_id)


@router.put("/events", response_model=EventResponse, responses=CONFLICT_RESPONSES)
def update_event(
    data: EventUpdateInput,
    overwrite: bool = Depends(overwrite_confirmed),
    event_service: EventService = Depends(get_event_service),
    session: Session = Depends(get_db_session),
):
    """Update an event.

    When the request carries a notification id and a result document while the
    event already holds one, the update is refused with 409 and a warning
    unless the ``X-Overwrite-Result: true`` header confirms the overwrite.

    Args:
        data: Event fields including the event id
        overwrite: Overwrite confirmation from the request header
        event_service: Event service instance
        session: Database session

    Returns:
        The updated EventResponse, or a 409 response carrying the warning
    """
    outcome = event_service.update_event(session, data, overwrite=overwrite)
    if isinstance(outcome, FileSlotConflict):
        return _conflict_response(outcome)
    return outcome


@router.delete("/events", response_model=DeleteEventResponse)
def delete_event(
    data: EventDeleteInput,
    event_service: EventService = Depends(get_event_service),
    session: Session = Depends(get_db_session),
) -> DeleteEventResponse:
    """Delete an event, optionally together with its stored documents.

    Args:
        data: Event id and whether to delete the stored documents
        event_service: Event service instance
        session: Database session

    Returns:
        DeleteEventResponse with success set
    """
    if data.id is None:
        raise ValidationError("Missing required fields", {"id": "Event id is required."})
    return DeleteEventResponse(success=event_service.delete_event(session, data.id, data.delete_files))


@router.post(
    "/events/{event_id}/files",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT_RESPONSES,
)
def attach_event_file(
    event_id: UUID,
    file: UploadFile = File(...),
    slot: str = Form(...),
    overwrite: bool = Depends(overwrite_confirmed),
    event_service: EventService = Depends(get_event_service),
    session: Session = Depends(get_db_session),
):
    """Store an uploaded document and put it into one slot of the event."""
    name = file.filename or slot
    attachment = FileAttachment(
        slot=slot,
        name=name,
        url=event_service.storage.url_for(event_id, slot, name),
        upload_date=date.today().isoformat(),
    )
    outcome = event_service.attach_file(session, event_id, attachment, overwrite=overwrite, content=file.file.read())
    if isinstance(outcome, FileSlotConflict):
        return _conflict_response(outcome)
    return outcome


@router.delete("/events/{event_id}/files/{slot}", response_model=EventResponse)
def remove_event_file(
    event_id: UUID,
    slot: str,
    delete_file: bool = Query(default=True, alias="deleteFile"),
    event_service: EventService = Depends(get_event_service),
    session: Session = Depends(get_db_session),
) -> EventResponse:
    """Empty one slot of the event, deleting the stored document unless told otherwise."""
    return event_service.remove_file(session, event_id, slot, delete_file)
