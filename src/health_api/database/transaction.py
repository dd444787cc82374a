"""Transaction scope for service operations.

Everything written inside ``atomic`` is committed once at the end or rolled
back as a whole, so an event write and the matching notification status
change never commit separately.
"""

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from health_api.exceptions import HealthApiError, InternalError


@contextmanager
def atomic(session: Session, operation: str) -> Generator[Session]:
    """Commit the work done in the block, or roll all of it back.

    Application errors are re-raised unchanged; database errors become
    ``InternalError``.

    Args:
        session: Session the block writes through
        operation: Short description used in logs and error messages
    """
    try:
        yield session
        session.commit()
    except HealthApiError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Service: {operation} - database error, transaction rolled back: {e}")
        raise InternalError(f"Failed to {operation}: {e}") from e
