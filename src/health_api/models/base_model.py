"""Shared enums and base models.

Wire payloads use camelCase (``startTime``, ``professionalId``) while Python
code uses snake_case; ``CamelModel`` accepts both on input and the API layer
serializes by alias.
"""

from enum import Enum
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel


class EventType(str, Enum):
    """Kind of health event on the calendar."""

    CONSULTATION = "CONSULTATION"
    EXAM = "EXAM"
    PROCEDURE = "PROCEDURE"
    MEDICATION = "MEDICATION"


class NotificationStatus(str, Enum):
    UNREAD = "UNREAD"
    READ = "READ"
    ARCHIVED = "ARCHIVED"
    VIEWED = "VIEWED"


class ReportStatus(str, Enum):
    SENT = "SENT"
    RECEIVED = "RECEIVED"
    VIEWED = "VIEWED"


class UserRole(str, Enum):
    """Roles allowed to authenticate."""

    RECEPTOR = "RECEPTOR"
    ISSUER = "ISSUER"


class CamelModel(BaseModel):
    """Base for API-facing models with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class FileAttachment(CamelModel):
    """A document stored in one slot of an event."""

    slot: str = Field(min_length=1)
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    upload_date: str | None = None
    expiry_date: str | None = None

    def to_storage(self) -> dict:
        """Return the JSON shape persisted in the event's ``files`` column."""
        return self.model_dump(by_alias=True, exclude_none=True)


class LabReportFile(CamelModel):
    file_name: str
    file_content: str = Field(description="Base64 encoded file content")


class LabReportPayload(CamelModel):
    """Notification sent by a laboratory with the report file embedded."""

    kind: Literal["lab_report"] = "lab_report"
    doctor_name: str
    exam_date: str
    report: LabReportFile


class ReportReferencePayload(CamelModel):
    """Notification pointing at a report issued inside the platform."""

    kind: Literal["report_reference"] = "report_reference"
    report_id: UUID
    title: str
    protocol: str


NotificationPayload = Annotated[LabReportPayload | ReportReferencePayload, Field(discriminator="kind")]

notification_payload_adapter: TypeAdapter[LabReportPayload | ReportReferencePayload] = TypeAdapter(NotificationPayload)


class ProfessionalBase(SQLModel):
    """Base model for a health professional."""

    id: UUID | None = None
    name: str | None = None
    specialty: str | None = None
    user_id: UUID | None = None


class HealthEventBase(SQLModel):
    """Base model for a calendar health event."""

    id: UUID | None = None
    title: str | None = None
    description: str | None = None
    observation: str | None = None
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    type: str | None = None
    user_id: UUID | None = None
    professional_id: UUID | None = None
