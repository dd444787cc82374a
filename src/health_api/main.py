"""Server entry point: ``health-api run`` and ``health-api check``.

Command-line options override the ``HEALTH_API_*`` environment. Overrides are
written into the cached settings object before the application module is
imported, so every component sees the same values.
"""

import asyncio
from typing import Any

import typer
import uvicorn
from loguru import logger

from health_api.logging import setup_logging
from health_api.settings import Settings, get_settings

app = typer.Typer(help="Health events API server")


HOST_OPTION = typer.Option(None, help="Interface to bind (HEALTH_API_HOST)", metavar="<host>")
PORT_OPTION = typer.Option(None, help="Port to bind (HEALTH_API_PORT)", metavar="<port>")
RELOAD_OPTION = typer.Option(None, help="Auto-reload on code changes (HEALTH_API_RELOAD)")
LOG_LEVEL_OPTION = typer.Option(None, help="Log level (HEALTH_API_LOG_LEVEL)", metavar="<level>", case_sensitive=False)
SQL_LOG_OPTION = typer.Option(None, help="Log SQL statements (HEALTH_API_SQL_LOG)")
DATABASE_URL_OPTION = typer.Option(None, help="Database URL (HEALTH_API_DATABASE_URL)", metavar="<dsn>")
UPLOAD_DIR_OPTION = typer.Option(None, help="Directory for uploaded documents (HEALTH_API_UPLOAD_DIR)", metavar="<dir>")
ENVIRONMENT_OPTION = typer.Option(None, help="development, production or test (HEALTH_API_ENVIRONMENT)", metavar="<env>")


def apply_overrides(**overrides: Any) -> Settings:
    """Write the non-None overrides into the cached settings and return them.

    Values go through the settings validators, so e.g. a lower-case log level
    is normalized and an unknown environment is rejected.
    """
    settings = get_settings()
    given = {name: value for name, value in overrides.items() if value is not None}
    if given:
        validated = Settings.model_validate({**settings.model_dump(), **given})
        for name in given:
            setattr(settings, name, getattr(validated, name))
        logger.debug(f"Settings overridden from the command line: {sorted(given)}")
    return settings


@app.command()
def run(
    host: str = HOST_OPTION,
    port: int = PORT_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
    reload: bool = RELOAD_OPTION,
    sql_log: bool = SQL_LOG_OPTION,
    database_url: str = DATABASE_URL_OPTION,
    upload_dir: str = UPLOAD_DIR_OPTION,
    environment: str = ENVIRONMENT_OPTION,
) -> None:
    """Run the health API server."""
    settings = apply_overrides(
        host=host,
        port=port,
        log_level=log_level,
        reload=reload,
        sql_log=sql_log,
        database_url=database_url,
        upload_dir=upload_dir,
        environment=environment,
    )
    setup_logging(settings.log_level, serialize=settings.log_json)
    logger.info(f"Starting health API server on {settings.host}:{settings.port} ({settings.environment})")

    if settings.reload:
        # The reloader needs an import string; it re-imports the app in a subprocess
        target: Any = "health_api.app:app"
    else:
        from health_api.app import app as fastapi_app

        target = fastapi_app

    uvicorn.run(target, host=settings.host, port=settings.port, reload=settings.reload, log_level=settings.log_level.lower())


@app.command()
def check(
    log_level: str = LOG_LEVEL_OPTION,
    sql_log: bool = SQL_LOG_OPTION,
    database_url: str = DATABASE_URL_OPTION,
) -> None:
    """Run the startup checks (database connection and schema revision), then exit."""
    settings = apply_overrides(log_level=log_level, sql_log=sql_log, database_url=database_url)

    from health_api.app import perform_startup_checks

    try:
        result = asyncio.run(perform_startup_checks(settings, include_schema=True))
    except (OSError, ValueError, RuntimeError) as e:
        logger.error(f"Startup checks could not run: {e}")
        raise SystemExit(1) from None

    if result.status != "ok":
        raise SystemExit(1)
    logger.info("Startup checks passed")


if __name__ == "__main__":
    app()
