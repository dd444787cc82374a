"""Global exception handlers for the FastAPI application.

This module contains custom exception handlers that convert
application exceptions into proper HTTP responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from health_api.exceptions import HealthApiError, InternalError, ValidationError
from health_api.settings import get_settings


def _error_body(message: str, details: str | None = None, errors: dict[str, str] | None = None) -> dict:
    body: dict = {"error": message}
    if errors:
        body["errors"] = errors
    if details is not None and get_settings().is_development:
        body["details"] = details
    return body


def _field_name(loc: tuple) -> str:
    # Drop the "body"/"query" prefix FastAPI puts in front of the field path
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning(f"Validation failed on {request.method} {request.url.path}: {exc.errors or exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, errors=exc.errors))

    @app.exception_handler(InternalError)
    async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
        logger.error(f"Internal error on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error", details=exc.message),
        )

    @app.exception_handler(HealthApiError)
    async def health_api_error_handler(request: Request, exc: HealthApiError) -> JSONResponse:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = {_field_name(tuple(error["loc"])): error["msg"] for error in exc.errors()}
        logger.warning(f"Malformed request on {request.method} {request.url.path}: {errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("Missing or invalid fields", errors=errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error", details=str(exc)),
        )

    logger.debug("Registered exception handlers")
