"""Logging configuration for the health API server.

Everything goes through loguru: standard-library loggers (uvicorn,
SQLAlchemy, alembic) are intercepted and re-emitted. Credentials never reach
the log output; the patcher masks password fields and session tokens.
"""

import inspect
import logging
import re
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)

THIRD_PARTY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "httpcore", "multipart", "alembic")
SQLALCHEMY_LOGGERS = ("sqlalchemy", "sqlalchemy.engine", "sqlalchemy.pool", "sqlalchemy.dialects")

_SECRET_RE = re.compile(r"""(?i)(["']?(?:password|password_hash|session_secret|omni_health_session)["']?\s*[:=]\s*["']?)[^\s,'"}]+""")


def redact(message: str) -> str:
    """Mask values that follow password or session keys in a log message."""
    return _SECRET_RE.sub(r"\1***", message)


def _patch_record(record) -> None:
    record["message"] = redact(record["message"])


class InterceptHandler(logging.Handler):
    """Send standard logging records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _intercept(names) -> None:
    for name in names:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False


def setup_logging(log_level: str, serialize: bool = False) -> None:
    """Configure loguru for the server.

    Args:
        log_level: Minimum level, already validated by the settings
        serialize: Emit one JSON object per line instead of the colored console format
    """
    log_level = log_level.upper()

    logger.remove()
    logger.configure(patcher=_patch_record)
    if serialize:
        logger.add(sys.stderr, level=log_level, serialize=True)
    else:
        logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT, colorize=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    _intercept(THIRD_PARTY_LOGGERS)
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(log_level)

    logger.info(f"Log level set to: {log_level}")


def setup_sqlalchemy_logging() -> None:
    """Route SQLAlchemy's engine and pool loggers (``echo`` output) through loguru."""
    _intercept(SQLALCHEMY_LOGGERS)
