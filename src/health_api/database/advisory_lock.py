"""PostgreSQL advisory locks.

Two scopes are used:

- session-level locks held on a dedicated session for a whole critical
  section, e.g. running migrations from several instances at once;
- transaction-level locks taken inside the caller's session and released on
  commit or rollback. Event creation takes one per professional and day so
  the overlap check and the insert cannot interleave with another booking.

Other databases have no advisory locks; there both scopes are no-ops.
"""

import hashlib
from collections.abc import Generator
from contextlib import contextmanager
from enum import Enum
from uuid import UUID

from loguru import logger
from sqlalchemy import text
from sqlmodel import Session

from .connection import borrow_db_session


class AdvisoryLock(Enum):
    """Application-wide session locks as ``(key, name)`` pairs."""

    MIGRATION = (7239847234, "migration")

    @property
    def key(self) -> int:
        return self.value[0]

    @property
    def lock_name(self) -> str:
        return self.value[1]


def _supports_advisory_locks(session: Session) -> bool:
    bind = session.get_bind()
    return bind is not None and bind.dialect.name == "postgresql"


def derive_lock_key(*parts: object) -> int:
    """Derive a stable signed 64-bit lock key from arbitrary parts."""
    digest = hashlib.blake2b(":".join(str(part) for part in parts).encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


@contextmanager
def advisory_lock(lock: AdvisoryLock) -> Generator[Session]:
    """Hold a session-level advisory lock for the duration of the block.

    The lock is released when the block exits, also on error.

    Raises:
        SQLAlchemyError: If the lock cannot be acquired or released
    """
    with borrow_db_session() as session:
        if not _supports_advisory_locks(session):
            logger.debug(f"No advisory locks on this database, running '{lock.lock_name}' unlocked")
            yield session
            return

        logger.debug(f"Waiting for advisory lock '{lock.lock_name}'")
        session.exec(text("SELECT pg_advisory_lock(:key)").bindparams(key=lock.key))
        logger.debug(f"Holding advisory lock '{lock.lock_name}'")
        try:
            yield session
        finally:
            session.exec(text("SELECT pg_advisory_unlock(:key)").bindparams(key=lock.key))
            logger.debug(f"Released advisory lock '{lock.lock_name}'")


def lock_professional_day(session: Session, professional_id: UUID, event_date: str) -> None:
    """Take a transaction-scoped lock on one professional's calendar day.

    Args:
        session: Session whose current transaction holds the lock
        professional_id: Professional being booked
        event_date: Normalized ``YYYY-MM-DD`` date
    """
    if not _supports_advisory_locks(session):
        return
    key = derive_lock_key("schedule", professional_id, event_date)
    logger.trace(f"Acquiring scheduling lock for {professional_id} on {event_date} (key={key})")
    session.exec(text("SELECT pg_advisory_xact_lock(:key)").bindparams(key=key))
