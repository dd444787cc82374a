"""Repository API - a user's documents grouped by event date."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel import Session

from health_api.constants import NO_STORE_CACHE_CONTROL
from health_api.database import get_db_session
from health_api.models.api_model import RepositoryView
from health_api.services.repository_service import RepositoryService, get_repository_service

router = APIRouter()


@router.get("/repository", response_model=RepositoryView)
def get_repository(
    response: Response,
    user_id: UUID = Query(alias="userId"),
    q: str | None = None,
    repository_service: RepositoryService = Depends(get_repository_service),
    session: Session = Depends(get_db_session),
) -> RepositoryView:
    """Get the repository view of a user's events.

    Args:
        response: Response the cache header is set on
        user_id: Owner of the events
        q: Optional search term over titles, professional names and document names
        repository_service: Repository service instance
        session: Database session

    Returns:
        RepositoryView with date groups, newest first, and the document summary
    """
    response.headers["Cache-Control"] = NO_STORE_CACHE_CONTROL
    return repository_service.get_repository(session, user_id, q)
