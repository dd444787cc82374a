"""Tests for health_api.settings.Settings behavior."""

from typing import Any

import pytest

from health_api.settings import Settings, get_settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch):
    """Defaults should be stable even if external env or .env sets values.

    Variables set by the test session are removed and .env loading is
    bypassed with `_env_file=None`.
    """
    for var in [
        "HEALTH_API_HOST",
        "HEALTH_API_PORT",
        "HEALTH_API_LOG_LEVEL",
        "HEALTH_API_SQL_LOG",
        "HEALTH_API_RELOAD",
        "HEALTH_API_ENVIRONMENT",
        "HEALTH_API_DATABASE_URL",
        "HEALTH_API_SESSION_SECRET",
        "HEALTH_API_CORS_ORIGINS",
        "health_api_host",
    ]:
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)
    assert s.host == "0.0.0.0"
    assert s.port == 8080
    assert s.log_level == "INFO"
    assert s.sql_log is False
    assert s.reload is False
    assert s.environment == "production"
    assert s.upload_dir == "public/uploads"
    assert s.file_slots == ["request", "authorization", "certificate", "result", "prescription", "invoice"]
    assert s.protected_file_slots == ["result"]
    assert s.enforce_time_order is False
    assert s.database_pool_size == 5
    assert s.cors_origins == ["http://localhost:3000"]


def test_env_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HEALTH_API_HOST", "127.0.0.1")
    monkeypatch.setenv("HEALTH_API_PORT", "9090")
    monkeypatch.setenv("HEALTH_API_SQL_LOG", "true")
    monkeypatch.setenv("HEALTH_API_ENFORCE_TIME_ORDER", "true")
    s = Settings(_env_file=None)
    assert s.host == "127.0.0.1"
    assert s.port == 9090
    assert s.sql_log is True
    assert s.enforce_time_order is True


def test_case_insensitive_env_name(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("health_api_host", "10.10.10.10")  # type: ignore[arg-type]
    s = Settings(_env_file=None)
    assert s.host == "10.10.10.10"


def test_slot_lists_from_comma_separated_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HEALTH_API_FILE_SLOTS", "request, Result ,invoice")
    monkeypatch.setenv("HEALTH_API_PROTECTED_FILE_SLOTS", "result,invoice")
    s = Settings(_env_file=None)
    assert s.file_slots == ["request", "result", "invoice"]
    assert s.protected_file_slots == ["result", "invoice"]


@pytest.mark.parametrize("value,expected", [("debug", "DEBUG"), ("Warning", "WARNING"), (None, "INFO")])
def test_log_level_normalized(value, expected):
    assert Settings(_env_file=None, log_level=value).log_level == expected


def test_invalid_log_level_rejected():
    with pytest.raises(ValueError):
        Settings(_env_file=None, log_level="LOUD")


def test_is_development():
    assert Settings(_env_file=None, environment="development").is_development
    assert not Settings(_env_file=None, environment="production").is_development


def test_get_settings_singleton():
    assert get_settings() is get_settings()


def test_get_settings_cache_not_affected_by_new_env(monkeypatch: pytest.MonkeyPatch):
    first = get_settings()
    original_host = first.host
    monkeypatch.setenv("HEALTH_API_HOST", "203.0.113.5")
    second = get_settings()
    assert second is first
    assert second.host == original_host


@pytest.mark.parametrize(
    "override,expected",
    [
        ({"host": "1.1.1.1"}, "1.1.1.1"),
        ({"port": 1234}, 1234),
        ({"storage_retry_attempts": 5}, 5),
    ],
)
def test_direct_instantiation_with_overrides(override: dict[str, Any], expected: Any):
    s = Settings(_env_file=None, **override)
    key = next(iter(override.keys()))
    assert getattr(s, key) == expected


def test_database_url_override(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HEALTH_API_DATABASE_URL", "postgresql+psycopg://u:p@h/db")
    s = Settings(_env_file=None)
    assert s.database_url == "postgresql+psycopg://u:p@h/db"


def test_cors_origins_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HEALTH_API_CORS_ORIGINS", "https://app.omnisaude.com.br/, http://localhost:3000")
    s = Settings(_env_file=None)
    assert s.cors_origins == ["https://app.omnisaude.com.br", "http://localhost:3000"]
