"""Authentication API - login, session lookup and logout."""

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from health_api.api.dependencies import current_session
from health_api.database import get_db_session
from health_api.models.api_model import LoginInput, LoginResponse, SessionResponse
from health_api.services.auth_service import AuthService, get_auth_service
from health_api.settings import get_settings

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=LoginResponse)
def login(
    data: LoginInput,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    session: Session = Depends(get_db_session),
) -> LoginResponse:
    """Verify credentials and set the signed session cookie.

    Args:
        data: E-mail and password
        response: Response the session cookie is set on
        auth_service: Authentication service instance
        session: Database session

    Returns:
        LoginResponse with the user, without the password hash
    """
    user = auth_service.authenticate(session, data)
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        auth_service.issue_token(user),
        max_age=settings.session_max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=not settings.is_development and settings.environment != "test",
    )
    return LoginResponse(user=user)


@router.get("/session", response_model=SessionResponse)
def get_session(current: SessionResponse = Depends(current_session)) -> SessionResponse:
    """Return the user id and role bound to the session cookie."""
    return current


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name, path="/")
