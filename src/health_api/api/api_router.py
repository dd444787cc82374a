"""API router initialization."""

from fastapi import APIRouter
from loguru import logger

from health_api.api.auth import router as auth_router
from health_api.api.events import router as events_router
from health_api.api.notifications import router as notifications_router
from health_api.api.professionals import router as professionals_router
from health_api.api.repository import router as repository_router
from health_api.api.uploads import router as uploads_router

# Create main API router
router = APIRouter()

# Mount API endpoints
router.include_router(auth_router, tags=["auth"])
router.include_router(events_router, tags=["events"])
router.include_router(uploads_router, tags=["events"])
router.include_router(professionals_router, tags=["professionals"])
router.include_router(notifications_router, tags=["notifications"])
router.include_router(repository_router, tags=["repository"])

logger.debug("API router initialized (auth, events, uploads, professionals, notifications, repository routers mounted)")
