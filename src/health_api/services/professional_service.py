"""Service for the health professionals a user keeps on their calendar."""

from functools import lru_cache
from uuid import UUID

from loguru import logger
from sqlmodel import Session, func, select

from health_api.database import atomic
from health_api.exceptions import NotFoundError
from health_api.models.api_model import ProfessionalInput, ProfessionalResponse
from health_api.models.db_model import Professional, User
from health_api.utils.model_converter import to_response_list, to_response_model


class ProfessionalService:
    """Lists, creates and looks up professionals per user."""

    def list_professionals(self, session: Session, user_id: UUID) -> list[ProfessionalResponse]:
        stmt = select(Professional).where(Professional.user_id == user_id).order_by(Professional.name)
        professionals = session.exec(stmt).all()
        logger.debug(f"Service: list_professionals for user {user_id} found {len(professionals)}")
        return to_response_list(professionals, ProfessionalResponse)

    def get_professional(self, session: Session, professional_id: UUID) -> ProfessionalResponse:
        professional = session.get(Professional, professional_id)
        if professional is None:
            raise NotFoundError("Professional", professional_id)
        return to_response_model(professional, ProfessionalResponse)

    def find_by_name(self, session: Session, user_id: UUID, name: str) -> ProfessionalResponse | None:
        """Find one of the user's professionals by name, ignoring case and surrounding spaces."""
        if not name or not name.strip():
            return None
        stmt = select(Professional).where(
            Professional.user_id == user_id,
            func.lower(Professional.name) == name.strip().lower(),
        )
        return to_response_model(session.exec(stmt).first(), ProfessionalResponse)

    def create_professional(self, session: Session, user_id: UUID, data: ProfessionalInput) -> ProfessionalResponse:
        """Create a professional for a user.

        Raises:
            NotFoundError: If the user does not exist
        """
        if session.get(User, user_id) is None:
            raise NotFoundError("User", user_id)

        with atomic(session, "create professional"):
            professional = Professional(name=data.name, specialty=data.specialty, user_id=user_id)
            session.add(professional)
        session.refresh(professional)
        logger.info(f"Service: professional created: {professional.id} ({professional.name})")
        return to_response_model(professional, ProfessionalResponse)


@lru_cache
def get_professional_service() -> ProfessionalService:
    """Get the professional service singleton."""
    return ProfessionalService()
