"""Authorization gate for protected operations.

The gate is the single place where a request's bearer token is checked.
Operations behind it receive an ``AuthContext`` and trust its account id.
"""

import logging
from dataclasses import dataclass

from postgate.auth.tokens import TokenService
from postgate.errors import AuthError, AuthErrorReason

logger = logging.getLogger("postgate.auth")

BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class AuthContext:
    """Identity attached to a request that passed the gate."""

    account_id: str


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` value."""
    if not authorization:
        raise AuthError(AuthErrorReason.MISSING_TOKEN)

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token or " " in token:
        raise AuthError(AuthErrorReason.MISSING_TOKEN)
    return token


class AuthorizationGate:
    """Runs the token checks in order; the first rejection wins."""

    def __init__(self, tokens: TokenService) -> None:
        self.tokens = tokens

    def authorize(self, authorization: str | None) -> AuthContext:
        """Resolve a raw Authorization header to an AuthContext or raise AuthError."""
        try:
            token = extract_bearer_token(authorization)
        except AuthError as exc:
            logger.info("Rejected request: %s", exc.reason.value)
            raise
        return self.authorize_token(token)

    def authorize_token(self, token: str | None) -> AuthContext:
        """Same as authorize, for callers that already hold the bare token."""
        try:
            if not token:
                raise AuthError(AuthErrorReason.MISSING_TOKEN)
            account_id = self.tokens.verify(token)
        except AuthError as exc:
            logger.info("Rejected request: %s", exc.reason.value)
            raise
        return AuthContext(account_id=account_id)
