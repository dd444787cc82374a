"""Application configuration using Pydantic Settings.

This module centralizes runtime configuration for the health API server.
Values can be provided via environment variables (preferred) or fall back to
the defaults below. A ``Settings`` instance is intended to be retrieved via
``get_settings`` which caches the object for reuse across the process.

Environment variable prefix: ``HEALTH_API_`` (e.g. ``HEALTH_API_HOST``).
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from health_api.constants import DEFAULT_FILE_SLOTS, PROTECTED_FILE_SLOTS


class Settings(BaseSettings):
    """Runtime application settings.

    Attributes map directly to environment variables using the ``HEALTH_API_``
    prefix (case-insensitive). For example, ``host`` <- ``HEALTH_API_HOST``.
    """

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host interface to bind the server",
    )  # fmt: skip
    port: int = Field(
        default=8080,
        description="Server port",
    )  # fmt: skip
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Application log level",
    )
    reload: bool = Field(
        default=False,
        description="Enable auto-reload in development",
    )  # fmt: skip
    log_json: bool = Field(
        default=False,
        description="Emit logs as JSON lines instead of the colored console format",
    )  # fmt: skip
    environment: Literal["development", "production", "test"] = Field(
        default="production",
        description="Deployment environment; error details are only exposed in development",
    )  # fmt: skip

    # Database settings
    sql_log: bool = Field(
        default=False,
        description="Enable SQL query logging",
    )  # fmt: skip
    database_url: str | None = Field(
        default=None,
        description="Database connection string",
    )  # fmt: skip
    database_pool_size: int = Field(
        default=5,
        description="Persistent connections kept per process (ignored for SQLite)",
    )  # fmt: skip
    database_connect_timeout: int = Field(
        default=10,
        description="Seconds to wait for a new database connection",
    )  # fmt: skip

    # Storage settings
    upload_dir: str = Field(
        default="public/uploads",
        description="Directory where uploaded event documents are stored",
    )  # fmt: skip
    uploads_url_prefix: str = Field(
        default="/uploads",
        description="URL prefix under which stored documents are served",
    )  # fmt: skip
    storage_retry_attempts: int = Field(
        default=3,
        description="Attempts for a storage operation before giving up",
    )  # fmt: skip

    # Session settings
    session_secret: str = Field(
        default="change-me",
        description="Secret used to sign session cookies",
    )  # fmt: skip
    session_cookie_name: str = Field(
        default="omni_health_session",
        description="Name of the session cookie",
    )  # fmt: skip
    session_max_age: int = Field(
        default=60 * 60 * 24 * 7,
        description="Session lifetime in seconds",
    )  # fmt: skip
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Browser origins allowed to call the API with the session cookie",
    )  # fmt: skip

    # Scheduling settings
    file_slots: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_FILE_SLOTS),
        description="Document slots that can be attached to an event",
    )  # fmt: skip
    protected_file_slots: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(PROTECTED_FILE_SLOTS),
        description="Slots whose existing document requires explicit overwrite confirmation",
    )  # fmt: skip
    enforce_time_order: bool = Field(
        default=False,
        description="Reject events whose end time is earlier than their start time",
    )  # fmt: skip

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str:
        """Normalize and validate log level."""
        if v is None:
            return "INFO"

        v_upper = str(v).upper()

        allowed = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR"}
        if v_upper not in allowed:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(sorted(allowed))}")

        return v_upper

    @field_validator("file_slots", "protected_file_slots", mode="before")
    @classmethod
    def split_slot_list(cls, v: str | list[str]) -> list[str]:
        """Accept comma-separated slot lists from the environment."""
        if isinstance(v, str):
            return [slot.strip().lower() for slot in v.split(",") if slot.strip()]
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip().rstrip("/") for origin in v.split(",") if origin.strip()]
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    model_config = SettingsConfigDict(
        env_prefix="HEALTH_API_",
        case_sensitive=False,
        extra="ignore",  # Ignore unexpected env vars
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached ``Settings`` instance.

    The first invocation reads environment variables / .env file; subsequent
    calls reuse the same object to ensure consistent config.
    """

    return Settings()


__all__ = ["Settings", "get_settings"]
