"""Bearer session tokens.

Tokens are HS256 JWTs carrying the account id (``sub``), issue time
(``iat``) and expiry (``exp``). They are stateless: nothing is stored
server-side, so a token stays valid until it expires.

Expiry is checked against an injected clock rather than the library's own
wall clock so that the boundary can be tested exactly.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from jose import jwt
from jose.exceptions import JWTClaimsError, JWTError

from postgate.errors import AuthError, AuthErrorReason

TOKEN_TYPE = "access"


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    account_id: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issues and verifies signed, time-bounded bearer tokens."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 3600,
        algorithm: str = "HS256",
        clock: Clock | None = None,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self.algorithm = algorithm
        self.clock = clock or SystemClock()

    def issue(self, account_id: str) -> str:
        """Create a token for ``account_id`` valid for ``ttl_seconds``.

        JWT timestamps are whole seconds, so the issue time is truncated
        first and ``exp`` lands exactly ``ttl_seconds`` after ``iat``.
        """
        issued_at = self.clock.now().replace(microsecond=0)
        expires_at = issued_at + timedelta(seconds=self.ttl_seconds)
        payload = {
            "sub": str(account_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "type": TOKEN_TYPE,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify_claims(self, token: str) -> TokenClaims:
        """Decode ``token`` and return its claims, or raise AuthError."""
        # Structure first: anything that is not a decodable JWT is malformed,
        # not a signature failure.
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError:
            raise AuthError(AuthErrorReason.MALFORMED) from None

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTClaimsError:
            raise AuthError(AuthErrorReason.MALFORMED) from None
        except JWTError:
            raise AuthError(AuthErrorReason.INVALID_SIGNATURE) from None

        account_id = payload.get("sub")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if (
            not isinstance(account_id, str)
            or not account_id
            or not _is_timestamp(issued_at)
            or not _is_timestamp(expires_at)
            or payload.get("type") != TOKEN_TYPE
        ):
            raise AuthError(AuthErrorReason.MALFORMED)

        if self.clock.now().timestamp() > expires_at:
            raise AuthError(AuthErrorReason.EXPIRED)

        return TokenClaims(
            account_id=account_id,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )

    def verify(self, token: str) -> str:
        """Return the account id embedded in ``token``, or raise AuthError."""
        return self.verify_claims(token).account_id


def _is_timestamp(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
