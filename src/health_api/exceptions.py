"""Common exceptions for the server.

Services raise these; ``exception_handlers`` turns them into HTTP responses.
Every exception carries the status code it maps to so the handlers stay
generic.
"""

from uuid import UUID


class HealthApiError(Exception):
    """Base class for all application errors."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(HealthApiError):
    """Raised when required fields are missing or malformed.

    ``errors`` maps field names to human-readable messages so several invalid
    fields can be reported at once.
    """

    status_code = 400

    def __init__(self, message: str, errors: dict[str, str] | None = None):
        self.errors = errors or {}
        super().__init__(message)

    @classmethod
    def from_errors(cls, errors: dict[str, str]) -> "ValidationError":
        """Build a validation error whose message joins all field messages."""
        return cls(" ".join(errors.values()) or "Invalid data", errors)


class ConflictError(HealthApiError):
    """Raised when a write collides with existing state (double booking, occupied slot)."""

    status_code = 409


class ResourceNotFoundError(HealthApiError):
    """Raised when a resource doesn't exist.

    Generic exception for any resource that cannot be found by its identifier.
    """

    status_code = 404

    def __init__(self, resource_type: str, identifier: str | UUID | int):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} not found: {identifier}")


NotFoundError = ResourceNotFoundError


class AuthenticationError(HealthApiError):
    """Raised when credentials or a session cannot be verified."""

    status_code = 401


class InternalError(HealthApiError):
    """Raised when storage or database work fails after validation passed."""

    status_code = 500
