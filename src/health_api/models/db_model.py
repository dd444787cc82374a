from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import JSON, Index, String
from sqlmodel import Field, SQLModel

from health_api.models.base_model import HealthEventBase, NotificationStatus, ProfessionalBase, ReportStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """User model."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(sa_type=String(255), unique=True, index=True)
    name: str | None = None
    password_hash: str
    role: str = Field(sa_type=String(20))
    created_at: datetime = Field(default_factory=_utcnow)


class Professional(ProfessionalBase, table=True):
    """Professional model."""

    __tablename__ = "professionals"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    user_id: UUID = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=_utcnow)


class HealthEvent(HealthEventBase, table=True):
    """Health event model.

    ``files`` holds the attachment list as JSON in camelCase, one entry per slot.
    """

    __tablename__ = "health_events"
    __table_args__ = (Index("idx_health_events_professional_date", "professional_id", "date"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str
    date: str = Field(sa_type=String(10))
    start_time: str = Field(sa_type=String(5))
    end_time: str = Field(sa_type=String(5))
    type: str = Field(sa_type=String(20))
    user_id: UUID = Field(foreign_key="users.id", index=True)
    professional_id: UUID = Field(foreign_key="professionals.id")
    files: list[dict] = Field(default_factory=list, sa_type=JSON)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Notification(SQLModel, table=True):
    """Inbound notification model, payload stored as tagged JSON."""

    __tablename__ = "notifications"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    status: str = Field(default=NotificationStatus.UNREAD.value, sa_type=String(20))
    payload: dict = Field(default_factory=dict, sa_type=JSON)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Report(SQLModel, table=True):
    """Report issued on the platform and referenced by notifications."""

    __tablename__ = "reports"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str
    protocol: str = Field(sa_type=String(50))
    status: str = Field(default=ReportStatus.SENT.value, sa_type=String(20))
    viewed_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utcnow)
