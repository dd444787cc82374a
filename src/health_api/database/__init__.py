"""Engine and session handling, transactions, advisory locks and migrations."""

from .alembic_utils import AlembicManager
from .connection import borrow_db_session, dispose_db, get_db_session, get_engine, ping_database, set_engine
from .transaction import atomic

__all__ = [
    "AlembicManager",
    "atomic",
    "borrow_db_session",
    "dispose_db",
    "get_db_session",
    "get_engine",
    "ping_database",
    "set_engine",
]
