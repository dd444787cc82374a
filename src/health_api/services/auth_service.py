"""Service for user authentication and session handling."""

from functools import lru_cache

from loguru import logger
from sqlmodel import Session, func, select

from health_api.database import atomic
from health_api.exceptions import AuthenticationError, ConflictError, ValidationError
from health_api.models.api_model import LoginInput, SessionResponse, UserResponse
from health_api.models.base_model import UserRole
from health_api.models.db_model import User
from health_api.security import SessionSigner, hash_password, is_allowed_role, normalize_email, verify_password
from health_api.utils.model_converter import to_response_model

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Verifies credentials and issues session tokens."""

    def __init__(self, signer: SessionSigner | None = None):
        self.signer = signer or SessionSigner()

    def authenticate(self, session: Session, data: LoginInput) -> UserResponse:
        """Check an e-mail/password pair.

        Args:
            session: Database session
            data: Login fields

        Returns:
            The authenticated user, without the password hash

        Raises:
            ValidationError: If e-mail or password is missing
            AuthenticationError: If the credentials do not match or the role may not sign in
        """
        if not data.email or not data.password:
            raise ValidationError("E-mail and password are required")

        email = normalize_email(data.email)
        user = session.exec(select(User).where(func.lower(User.email) == email)).first()
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info(f"Service: failed login for {email}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not is_allowed_role(user.role):
            logger.warning(f"Service: login refused for {email}, role {user.role} may not sign in")
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info(f"Service: user {user.id} signed in as {user.role}")
        return to_response_model(user, UserResponse)

    def issue_token(self, user: UserResponse) -> str:
        return self.signer.dumps(user.id, user.role.value)

    def read_session(self, token: str | None) -> SessionResponse:
        """Resolve the session behind a cookie value.

        Raises:
            AuthenticationError: If there is no valid session
        """
        data = self.signer.loads(token) if token else None
        if data is None:
            raise AuthenticationError("Not authenticated")
        return SessionResponse(user_id=data["user_id"], role=data["role"])

    def create_user(self, session: Session, email: str, password: str, name: str | None = None, role: UserRole = UserRole.RECEPTOR) -> UserResponse:
        """Create a user with a bcrypt-hashed password.

        Raises:
            ConflictError: If the e-mail is already registered
        """
        email = normalize_email(email)
        if session.exec(select(User).where(func.lower(User.email) == email)).first() is not None:
            raise ConflictError(f"User already exists: {email}")

        with atomic(session, "create user"):
            user = User(email=email, name=name, password_hash=hash_password(password), role=role.value)
            session.add(user)
        session.refresh(user)
        logger.info(f"Service: user created: {user.id} ({user.role})")
        return to_response_model(user, UserResponse)


@lru_cache
def get_auth_service() -> AuthService:
    """Get the authentication service singleton."""
    return AuthService()
