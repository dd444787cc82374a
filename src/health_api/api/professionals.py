"""Professionals API - the doctors and clinics a user books events with."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from health_api.database import get_db_session
from health_api.models.api_model import ProfessionalInput, ProfessionalResponse
from health_api.services.professional_service import ProfessionalService, get_professional_service

router = APIRouter()


@router.get("/professionals", response_model=list[ProfessionalResponse])
def list_professionals(
    user_id: UUID = Query(alias="userId"),
    professional_service: ProfessionalService = Depends(get_professional_service),
    session: Session = Depends(get_db_session),
) -> list[ProfessionalResponse]:
    return professional_service.list_professionals(session, user_id)


@router.post("/professionals", response_model=ProfessionalResponse, status_code=status.HTTP_201_CREATED)
def create_professional(
    data: ProfessionalInput,
    user_id: UUID = Query(alias="userId"),
    professional_service: ProfessionalService = Depends(get_professional_service),
    session: Session = Depends(get_db_session),
) -> ProfessionalResponse:
    """Create a professional for a user.

    Args:
        data: Name and optional specialty
        user_id: Owner of the professional entry
        professional_service: Professional service instance
        session: Database session

    Returns:
        The created ProfessionalResponse
    """
    return professional_service.create_professional(session, user_id, data)
