"""Typed errors raised by the stores, the token layer, and the services.

The routing layer is the only place that turns these into HTTP responses;
everything below it raises and lets the error propagate.
"""

from enum import Enum


class ServiceError(Exception):
    """Base class for errors scoped to a single request."""

    code = "SERVICE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Malformed or empty input."""

    code = "VALIDATION_ERROR"


class ConflictError(ServiceError):
    """A uniqueness invariant would be violated."""

    code = "CONFLICT"


class NotFoundError(ServiceError):
    """A referenced entity does not exist."""

    code = "NOT_FOUND"


class InvalidCredentialsError(ServiceError):
    """Login failed. Unknown email and wrong password share this error."""

    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class AuthErrorReason(str, Enum):
    """Why a bearer token was rejected."""

    MISSING_TOKEN = "missing_token"
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"


_AUTH_MESSAGES = {
    AuthErrorReason.MISSING_TOKEN: "Bearer token required",
    AuthErrorReason.MALFORMED: "Malformed token",
    AuthErrorReason.INVALID_SIGNATURE: "Invalid token signature",
    AuthErrorReason.EXPIRED: "Token has expired",
}


class AuthError(ServiceError):
    """A bearer token was missing, malformed, forged, or expired."""

    code = "UNAUTHORIZED"

    def __init__(self, reason: AuthErrorReason, message: str | None = None) -> None:
        super().__init__(message or _AUTH_MESSAGES[reason])
        self.reason = reason
