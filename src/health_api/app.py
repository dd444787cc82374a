"""FastAPI application: routers, middleware, startup checks and document serving."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from health_api.api.api_router import router as api_router
from health_api.api.health_check import router as health_router
from health_api.api.system import router as system_router
from health_api.constants import OVERWRITE_RESULT_HEADER
from health_api.database import dispose_db
from health_api.exception_handlers import register_exception_handlers
from health_api.logging import setup_logging, setup_sqlalchemy_logging
from health_api.services.di import register_all_services
from health_api.services.health_check_service import HealthCheckResult, get_health_check_service
from health_api.services.registry import get_service_registry
from health_api.settings import Settings, get_settings
from health_api.utils.version import get_version


async def perform_startup_checks(app_settings: Settings, include_schema: bool = False) -> HealthCheckResult:
    """Configure logging, register services and run the readiness checks.

    Used by the server lifespan and by ``health-api check``. A failed check is
    logged; whether to stop is up to the caller.

    Args:
        app_settings: Application settings
        include_schema: Also compare the schema revision with the migration head
    """
    setup_logging(app_settings.log_level, serialize=app_settings.log_json)
    if app_settings.sql_log:
        setup_sqlalchemy_logging()

    register_all_services(get_service_registry())

    result = get_health_check_service().perform_health_check(include_schema=include_schema)
    for check in result.checks:
        if check.success:
            logger.info(f"Check '{check.check}': {check.message}")
        else:
            logger.error(f"Check '{check.check}' failed: {check.message} {check.details}")
    if result.status != "ok":
        logger.warning("Readiness checks failed, requests touching the database will error")
    return result


def _log_endpoints(settings: Settings) -> None:
    base = f"http://{settings.host}:{settings.port}"
    logger.info(f"Server running at: {base} ({settings.environment})")
    for name, path in (
        ("REST API", "/api"),
        ("Documents", settings.uploads_url_prefix),
        ("Health Check", "/health-check"),
        ("API Docs", "/docs"),
    ):
        logger.info(f"   {name}: {base}{path}")


@asynccontextmanager
async def app_lifespan(_app: FastAPI):
    settings = get_settings()
    await perform_startup_checks(settings)
    _log_endpoints(settings)

    yield

    logger.info("Health API server shutting down")
    dispose_db()


def create_app(settings: Settings) -> FastAPI:
    """Build the application for the given settings."""
    application = FastAPI(
        lifespan=app_lifespan,
        title="Health events API",
        description="Health event calendar, document slots, notifications and document repository",
        version=get_version().version,
    )

    # Credentialed requests need explicit origins, "*" is not allowed with cookies
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", OVERWRITE_RESULT_HEADER],
    )
    register_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(system_router)
    application.include_router(api_router, prefix="/api")

    application.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=Path(settings.upload_dir), check_dir=False),
        name="uploads",
    )
    return application


app = create_app(get_settings())
