"""Tests for log message redaction and standard logging interception."""

import logging

import pytest
from loguru import logger

from health_api.logging import InterceptHandler, redact, setup_logging


@pytest.mark.parametrize(
    "message,expected",
    [
        ("login payload {'email': 'ana@x.com', 'password': 'hunter2'}", "login payload {'email': 'ana@x.com', 'password': '***'}"),
        ("password=hunter2 retry", "password=*** retry"),
        ("cookie omni_health_session=abc.def.ghi set", "cookie omni_health_session=*** set"),
        ("event created: 42", "event created: 42"),
    ],
)
def test_redact(message, expected):
    assert redact(message) == expected


def test_standard_logging_is_redacted_through_loguru():
    setup_logging("DEBUG")
    captured = []
    sink_id = logger.add(captured.append, level="DEBUG", format="{message}")
    try:
        logging.getLogger("uvicorn.error").warning("bad login password=hunter2")
    finally:
        logger.remove(sink_id)

    assert any("password=***" in str(message) for message in captured)
    assert not any("hunter2" in str(message) for message in captured)
    assert isinstance(logging.getLogger("uvicorn.error").handlers[0], InterceptHandler)
