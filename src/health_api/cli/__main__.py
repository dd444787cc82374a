"""Entry point of the administrative CLI.

Usage:
    python -m health_api.cli db check
    health-api-cli db upgrade --yes
    health-api-cli users create ana@omnisaude.com.br --role RECEPTOR
"""

import sys

from loguru import logger

from health_api.cli.app import app
from health_api.logging import redact
from health_api.settings import get_settings


def _configure_cli_logging() -> None:
    # Level and message only; rich renders the command output itself
    logger.remove()
    logger.configure(patcher=lambda record: record.update(message=redact(record["message"])))
    logger.add(sys.stderr, format="<level>{level: <8}</level> | {message}", level=get_settings().log_level, colorize=True)


def main() -> None:
    _configure_cli_logging()
    app()


if __name__ == "__main__":
    main()
