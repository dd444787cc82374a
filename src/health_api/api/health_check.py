"""Health check API endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from health_api.services.health_check_service import HealthCheckResult, HealthCheckService, get_health_check_service

router = APIRouter(tags=["System"])

# Define the dependencies as module-level variables
health_service_dependency = Depends(get_health_check_service)


@router.get("/health-check", response_model=HealthCheckResult, responses={503: {"model": HealthCheckResult}})
def health_check(health_service: HealthCheckService = health_service_dependency):
    """
    Health check endpoint.

    Returns:
        HealthCheckResult: The health status of the API and database connection,
        with status code 503 when a check failed.
    """
    logger.debug("Health check requested")

    result = health_service.perform_health_check()
    if result.status != "ok":
        return JSONResponse(status_code=503, content=result.model_dump())
    return result
