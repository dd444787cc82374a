"""Shared fixtures: in-memory database, temporary upload directory and API client."""

import os

# Settings are cached process-wide; configure them before the package is imported
os.environ.setdefault("HEALTH_API_ENVIRONMENT", "test")
os.environ.setdefault("HEALTH_API_DATABASE_URL", "sqlite://")
os.environ.setdefault("HEALTH_API_SESSION_SECRET", "test-secret")
os.environ.setdefault("HEALTH_API_CORS_ORIGINS", "http://localhost:3000")

from collections.abc import Generator  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from health_api.database import get_db_session, set_engine  # noqa: E402
from health_api.models.base_model import UserRole  # noqa: E402
from health_api.models.db_model import Notification, Professional, Report, User  # noqa: E402
from health_api.security import SessionSigner, hash_password  # noqa: E402
from health_api.services.auth_service import AuthService, get_auth_service  # noqa: E402
from health_api.services.event_service import EventService, EventServiceConfig, get_event_service  # noqa: E402
from health_api.services.notification_service import NotificationService  # noqa: E402
from health_api.services.professional_service import ProfessionalService  # noqa: E402
from health_api.services.promotion_service import PromotionService, get_promotion_service  # noqa: E402
from health_api.services.storage_service import StorageService  # noqa: E402
from health_api.settings import Settings  # noqa: E402

USER_PASSWORD = "s3cret-pass"


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    set_engine(engine)
    yield engine
    set_engine(None)
    engine.dispose()


@pytest.fixture
def session(engine) -> Generator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database_url="sqlite://",
        upload_dir=str(tmp_path / "uploads"),
        session_secret="test-secret",
        storage_retry_attempts=1,
    )


@pytest.fixture
def storage(settings) -> StorageService:
    return StorageService(settings)


@pytest.fixture
def event_service(settings, storage) -> EventService:
    return EventService(EventServiceConfig.from_settings(settings), storage)


@pytest.fixture
def promotion_service(event_service) -> PromotionService:
    return PromotionService(event_service, ProfessionalService(), NotificationService())


@pytest.fixture
def auth_service(settings) -> AuthService:
    return AuthService(SessionSigner(settings))


@pytest.fixture
def user(session) -> User:
    user = User(email="ana@omnisaude.com.br", name="Ana", password_hash=hash_password(USER_PASSWORD), role=UserRole.RECEPTOR.value)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def professional(session, user) -> Professional:
    professional = Professional(name="Dra. Helena Costa", specialty="Cardiology", user_id=user.id)
    session.add(professional)
    session.commit()
    session.refresh(professional)
    return professional


@pytest.fixture
def make_notification(session, user):
    """Factory creating notifications for the default user."""

    def _make(payload: dict, status: str = "UNREAD") -> Notification:
        notification = Notification(user_id=user.id, status=status, payload=payload)
        session.add(notification)
        session.commit()
        session.refresh(notification)
        return notification

    return _make


@pytest.fixture
def report(session) -> Report:
    report = Report(title="Hemograma completo", protocol="PRT-2025-0042")
    session.add(report)
    session.commit()
    session.refresh(report)
    return report


@pytest.fixture
def event_input(professional):
    """Factory for create payloads in wire (camelCase) form."""

    def _make(**overrides) -> dict:
        data = {
            "title": "Consulta",
            "date": "2025-03-10",
            "type": "CONSULTATION",
            "startTime": "09:00",
            "endTime": "09:30",
            "professionalId": str(professional.id),
            "files": [],
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def client(engine, event_service, promotion_service, auth_service) -> Generator[TestClient]:
    from health_api.app import app

    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = _session_override
    app.dependency_overrides[get_event_service] = lambda: event_service
    app.dependency_overrides[get_promotion_service] = lambda: promotion_service
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unknown_id() -> str:
    return str(uuid4())
