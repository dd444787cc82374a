"""Alembic helpers for schema management.

Used by the ``db`` CLI commands to report the schema revision and upgrade it.
"""

import os
from pathlib import Path
from typing import Any

import alembic.command
import alembic.config
from alembic.script import ScriptDirectory
from loguru import logger
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from .connection import borrow_db_session

# database/ -> health_api/ -> src/ -> project root
PROJECT_ROOT = Path(__file__).resolve().parents[3]


class AlembicManager:
    """Reads and upgrades the database schema revision."""

    def __init__(self):
        self.alembic_cfg = self._load_config()

    @staticmethod
    def _load_config() -> alembic.config.Config | None:
        """Load alembic.ini from the working directory, falling back to the project root.

        ``script_location`` is rewritten to an absolute path so commands work
        from any directory.
        """
        for root in (Path(os.getcwd()), PROJECT_ROOT):
            ini_path = root / "alembic.ini"
            if ini_path.exists():
                break
        else:
            logger.error("Alembic configuration file not found in cwd or project root")
            return None

        logger.trace(f"Loading alembic configuration from: {ini_path}")
        cfg = alembic.config.Config(str(ini_path))
        migrations_path = root / "migrations"
        if migrations_path.exists():
            cfg.set_main_option("script_location", str(migrations_path))
        # Logging is already set up by the running process
        cfg.attributes["configure_logging"] = False
        return cfg

    def get_current_revision(self) -> str | None:
        """Get current alembic revision stored in the database."""
        with borrow_db_session() as session:
            try:
                return session.exec(text("SELECT version_num FROM alembic_version LIMIT 1")).scalar_one_or_none()
            except SQLAlchemyError as e:
                logger.error(f"Failed to get current revision: {e}")
                return None

    def get_head_revision(self) -> str:
        """Get head revision from the migration scripts."""
        if not self.alembic_cfg:
            logger.error("Alembic configuration not initialized")
            return ""
        head_rev = ScriptDirectory.from_config(self.alembic_cfg).get_current_head()
        logger.trace(f"Head revision from scripts: {head_rev}")
        return head_rev or ""

    def perform_migration(self, target: str = "head") -> bool:
        """Upgrade the database to ``target``.

        Returns:
            True if migration successful, False otherwise
        """
        if not self.alembic_cfg:
            logger.error("Alembic configuration not initialized")
            return False

        try:
            logger.info(f"Starting database migration to '{target}'")
            alembic.command.upgrade(self.alembic_cfg, target)
            logger.info(f"Database migration to '{target}' completed successfully")
            return True
        except (OSError, ValueError, RuntimeError, SQLAlchemyError) as e:
            logger.error(f"Migration failed: {e}")
            return False

    def validate_schema_state(self) -> tuple[str, dict[str, Any], bool]:
        """Compare the database revision with the scripts' head.

        Returns:
            Tuple of (message, details, is_success)
        """
        if not self.alembic_cfg:
            return ("Alembic configuration not available", {"error": "alembic_cfg is None"}, False)

        with borrow_db_session() as session:
            if "alembic_version" not in inspect(session.get_bind()).get_table_names():
                return ("Alembic version table not found", {"has_alembic_table": False}, False)

        current_rev = self.get_current_revision()
        head_rev = self.get_head_revision()
        details = {"has_alembic_table": True, "current_revision": current_rev, "head_revision": head_rev}

        if not current_rev:
            return ("No alembic version record found", details, False)
        if current_rev != head_rev:
            return (f"Database schema is out of date. Current: {current_rev}, Head: {head_rev}", details, False)
        return ("Database schema is at latest version", details, True)
