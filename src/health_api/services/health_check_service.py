"""Health check service module."""

from functools import lru_cache
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from health_api.database import borrow_db_session, ping_database
from health_api.database.alembic_utils import AlembicManager
from health_api.utils.version import get_version


class CheckResult(BaseModel):
    """Outcome of a single readiness check."""

    check: str
    success: bool
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class HealthCheckResult(BaseModel):
    """Pydantic model representing the full health check response."""

    status: str
    version_info: dict[str, Any] = Field(default_factory=dict)
    checks: list[CheckResult] = Field(default_factory=list)


class HealthCheckService:
    """Service for performing health checks on the application."""

    def check_database_connection(self) -> CheckResult:
        try:
            with borrow_db_session() as session:
                details = ping_database(session)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(f"Database connection check failed: {e}")
            return CheckResult(check="database_connection", success=False, message="Database is unreachable", details={"error": str(e)})
        return CheckResult(check="database_connection", success=True, message="Database connection is healthy", details=details)

    def check_database_schema(self) -> CheckResult:
        try:
            message, details, success = AlembicManager().validate_schema_state()
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Database schema check failed: {e}")
            return CheckResult(check="database_schema", success=False, message="Schema state unavailable", details={"error": str(e)})
        return CheckResult(check="database_schema", success=success, message=message, details=details)

    def perform_health_check(self, include_schema: bool = False) -> HealthCheckResult:
        """Perform a complete health check.

        Args:
            include_schema: Also compare the schema revision with the migration head

        Returns:
            HealthCheckResult with status "ok" only when every check succeeded
        """
        logger.debug("Running health checks")
        checks = [self.check_database_connection()]
        if include_schema:
            checks.append(self.check_database_schema())

        status = "ok" if all(check.success for check in checks) else "error"
        return HealthCheckResult(status=status, version_info=get_version().model_dump(), checks=checks)


@lru_cache
def get_health_check_service() -> HealthCheckService:
    """Return cached process-wide ``HealthCheckService`` (singleton)."""
    return HealthCheckService()
