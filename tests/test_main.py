"""Tests for command-line overrides of the server settings."""

import pytest

from health_api.main import apply_overrides
from health_api.settings import get_settings


@pytest.fixture
def restore_settings():
    settings = get_settings()
    saved = settings.model_dump()
    yield settings
    for name, value in saved.items():
        setattr(settings, name, value)


def test_only_given_values_override(restore_settings):
    before_host = restore_settings.host

    settings = apply_overrides(host=None, port=9100, log_level="debug", upload_dir="/tmp/docs")

    assert settings is get_settings()
    assert settings.host == before_host
    assert settings.port == 9100
    assert settings.log_level == "DEBUG"
    assert settings.upload_dir == "/tmp/docs"


def test_invalid_override_rejected(restore_settings):
    with pytest.raises(ValueError):
        apply_overrides(environment="staging")
    assert restore_settings.environment == "test"
