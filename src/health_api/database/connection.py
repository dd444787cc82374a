"""Database configuration and connection setup.

The SQLModel engine is created lazily after application settings have been
loaded, possibly overridden by CLI flags, so importing this module never fails
when ``HEALTH_API_DATABASE_URL`` is not set yet.
"""

import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, create_engine, text
from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from health_api.settings import get_settings

_engine: Engine | None = None


def _build_engine() -> Engine:
    """Create and return a new engine from current settings.

    Raises:
        ValueError: if database URL not configured.
    """
    settings = get_settings()
    database_url = settings.database_url
    if not database_url:
        raise ValueError("Database URL missing: provide HEALTH_API_DATABASE_URL env or --database-url CLI argument")

    if make_url(database_url).get_backend_name() == "sqlite":
        engine_local = create_engine(database_url, echo=settings.sql_log, connect_args={"check_same_thread": False})
    else:
        engine_local = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_pool_size * 2,
            pool_timeout=30,
            echo=settings.sql_log,
            connect_args={"connect_timeout": settings.database_connect_timeout},
        )
    logger.info("SQL echo is {}", "enabled" if settings.sql_log else "disabled")
    return engine_local


def get_engine() -> Engine:
    """Return a singleton engine instance, creating it lazily."""
    global _engine
    if _engine is None:
        _engine = _build_engine()
    return _engine


def set_engine(engine: Engine | None) -> None:
    """Replace the engine, e.g. with an in-memory database in tests or scripts."""
    global _engine
    _engine = engine


def dispose_db() -> None:
    """Dispose of the database engine if it was created."""
    global _engine
    if _engine is not None:
        logger.info("Closing database connections")
        _engine.dispose()
        _engine = None


def _discard_engine() -> None:
    global _engine
    if _engine is not None:
        logger.warning("Database connection failed, discarding engine before retrying")
        _engine.dispose()
        _engine = None


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
    retry=retry_if_exception_type(OperationalError),
    before_sleep=before_sleep_log(logger, "DEBUG"),
)
def _create_session() -> Session:
    """Open a session on a verified connection.

    Only connection-level failures (``OperationalError``) are retried, each
    time on a fresh engine. Configuration errors fail at once.
    """
    session = Session(get_engine())
    try:
        session.exec(text("SELECT 1"))
    except OperationalError as e:
        session.close()
        _discard_engine()
        logger.error("Failed to open database session: {}", e)
        raise
    return session


@contextmanager
def borrow_db_session() -> Generator[Session]:
    """Session for health checks, CLI commands and scripts.

    Route handlers depend on ``get_db_session`` instead. Uncommitted work is
    rolled back when the block raises.
    """
    session = _create_session()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db_session() -> Generator[Session]:
    """FastAPI dependency: one session per request."""
    with borrow_db_session() as session:
        yield session


def ping_database(session: Session) -> dict[str, Any]:
    """Round-trip a trivial query and report the dialect and latency.

    Raises:
        SQLAlchemyError: If the query fails
    """
    started = time.perf_counter()
    session.exec(text("SELECT 1")).one()
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    return {"dialect": session.get_bind().dialect.name, "latency_ms": elapsed_ms}
