"""API dependencies for FastAPI endpoints."""

from fastapi import Depends, Header, Request

from health_api.constants import OVERWRITE_RESULT_HEADER
from health_api.models.api_model import SessionResponse
from health_api.services.auth_service import AuthService, get_auth_service
from health_api.settings import get_settings


def overwrite_confirmed(x_overwrite_result: str | None = Header(default=None, alias=OVERWRITE_RESULT_HEADER)) -> bool:
    """Read the overwrite confirmation header; only the literal "true" confirms."""
    return (x_overwrite_result or "").strip().lower() == "true"


def current_session(request: Request, auth_service: AuthService = Depends(get_auth_service)) -> SessionResponse:
    """Resolve the signed session cookie of the request.

    Raises:
        AuthenticationError: If the cookie is missing, tampered with or expired
    """
    return auth_service.read_session(request.cookies.get(get_settings().session_cookie_name))
