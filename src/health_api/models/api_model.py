"""API models for the health API server."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import EmailStr, Field

from health_api.constants import PROMOTED_EVENT_END_TIME, PROMOTED_EVENT_START_TIME
from health_api.models.base_model import (
    CamelModel,
    EventType,
    FileAttachment,
    NotificationPayload,
    NotificationStatus,
    ReportStatus,
    UserRole,
)


# Events


class EventCreateInput(CamelModel):
    """Fields accepted when creating an event.

    Required fields are checked by ``EventService`` so missing values surface
    as a single validation error listing every missing field. ``files`` is kept
    raw and validated by the file-slot reconciler.
    """

    title: str | None = None
    description: str | None = None
    observation: str | None = None
    date: str | None = None
    type: EventType | None = None
    start_time: str | None = None
    end_time: str | None = None
    professional_id: UUID | None = None
    files: list[dict[str, Any]] | None = None
    notification_id: UUID | None = None


class EventUpdateInput(EventCreateInput):
    id: UUID | None = None


class EventDeleteInput(CamelModel):
    id: UUID | None = None
    delete_files: bool = False


class EventResponse(CamelModel):
    id: UUID
    title: str
    description: str | None = None
    observation: str | None = None
    date: str
    start_time: str
    end_time: str
    type: EventType
    user_id: UUID
    professional_id: UUID
    files: list[FileAttachment] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FileSlotConflictResponse(CamelModel):
    """Body of the 409 returned when an occupied result slot needs confirmation."""

    warning: str


class DeleteEventResponse(CamelModel):
    success: bool


# Professionals


class ProfessionalInput(CamelModel):
    name: str = Field(min_length=1)
    specialty: str | None = None


class ProfessionalResponse(CamelModel):
    id: UUID
    name: str
    specialty: str | None = None
    user_id: UUID


# Notifications and reports


class NotificationResponse(CamelModel):
    id: UUID
    user_id: UUID
    status: NotificationStatus
    payload: NotificationPayload
    created_at: datetime | None = None


class NotificationStatusUpdate(CamelModel):
    status: NotificationStatus


class ReportStatusUpdate(CamelModel):
    status: ReportStatus


class ReportResponse(CamelModel):
    id: UUID
    title: str
    protocol: str
    status: ReportStatus
    viewed_at: datetime | None = None


class PromotionInput(CamelModel):
    """Overrides for the event created from a notification.

    Unset values fall back to what the notification payload carries.
    """

    title: str | None = None
    date: str | None = None
    start_time: str = PROMOTED_EVENT_START_TIME
    end_time: str = PROMOTED_EVENT_END_TIME
    professional_id: UUID | None = None


class PromotionResponse(CamelModel):
    event: EventResponse
    professional: ProfessionalResponse
    attachment: FileAttachment | None = None


# Authentication


class LoginInput(CamelModel):
    email: EmailStr | None = None
    password: str | None = None


class UserResponse(CamelModel):
    id: UUID
    email: str
    name: str | None = None
    role: UserRole


class LoginResponse(CamelModel):
    user: UserResponse


class SessionResponse(CamelModel):
    user_id: UUID
    role: UserRole


# Repository view


class RepositoryEvent(CamelModel):
    id: UUID
    title: str
    date: str
    start_time: str
    end_time: str
    type: EventType
    professional_name: str
    files: list[FileAttachment] = Field(default_factory=list)


class RepositoryDateGroup(CamelModel):
    date: str
    events: list[RepositoryEvent]


class FileSummary(CamelModel):
    total: int = 0
    counts: dict[str, int] = Field(default_factory=dict)
    display: str = ""


class RepositoryView(CamelModel):
    groups: list[RepositoryDateGroup] = Field(default_factory=list)
    summary: FileSummary = Field(default_factory=FileSummary)
    total_events: int = 0
    filtered_events: int = 0
