"""Password hashing and signed session tokens.

Passwords are hashed with bcrypt. Sessions are ``itsdangerous`` timed tokens
binding the user id and role, carried in an HTTP-only cookie.
"""

from uuid import UUID

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from loguru import logger

from health_api.models.base_model import UserRole
from health_api.settings import Settings, get_settings

SESSION_SALT = "health-api-session"


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password must not be empty")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a bcrypt hash; malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Password verification error: {e}")
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_allowed_role(role: str | None) -> bool:
    return role in {member.value for member in UserRole}


class SessionSigner:
    """Signs and verifies session tokens."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._serializer = URLSafeTimedSerializer(self.settings.session_secret, salt=SESSION_SALT)

    def dumps(self, user_id: UUID, role: str) -> str:
        return self._serializer.dumps({"user_id": str(user_id), "role": role})

    def loads(self, token: str) -> dict | None:
        """Decode a session token.

        Returns:
            Dictionary with ``user_id`` and ``role``, or None if the token is
            invalid, expired or carries a role that may not sign in
        """
        try:
            data = self._serializer.loads(token, max_age=self.settings.session_max_age)
        except SignatureExpired:
            logger.warning("Session token expired")
            return None
        except BadSignature:
            logger.warning("Invalid session token signature")
            return None

        if not isinstance(data, dict) or not is_allowed_role(data.get("role")):
            logger.warning("Session token carries an unexpected payload")
            return None
        try:
            data["user_id"] = UUID(str(data.get("user_id")))
        except ValueError:
            return None
        return data
