"""Registration, login, and profile operations."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from postgate.auth.gate import AuthorizationGate
from postgate.auth.password import CredentialHasher
from postgate.auth.tokens import TokenService
from postgate.errors import InvalidCredentialsError, NotFoundError, ValidationError
from postgate.models.account import Account
from postgate.stores.accounts import AccountStore

logger = logging.getLogger("postgate.accounts")

MAX_USERNAME_LENGTH = 64
MAX_EMAIL_LENGTH = 320
MAX_BIO_LENGTH = 2000


@dataclass(frozen=True)
class RegisteredAccount:
    account_id: str
    token: str


@dataclass(frozen=True)
class IssuedToken:
    token: str


@dataclass(frozen=True)
class AccountProfile:
    """Public view of an account. Carries no password digest."""

    id: str
    username: str
    email: str
    bio: str | None
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountProfile":
        return cls(
            id=str(account.id),
            username=account.username,
            email=account.email,
            bio=account.bio,
            created_at=account.created_at,
        )


def _require_text(value: str | None, field: str, max_length: int) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} cannot be empty")
    if len(value) > max_length:
        raise ValidationError(f"{field} must be {max_length} characters or less")
    return value


def _check_bio(bio: str | None) -> None:
    if bio is not None and len(bio) > MAX_BIO_LENGTH:
        raise ValidationError(f"bio must be {MAX_BIO_LENGTH} characters or less")


class AccountService:
    """Account-facing operations exposed to the routing layer."""

    def __init__(
        self,
        session: AsyncSession,
        hasher: CredentialHasher,
        tokens: TokenService,
        gate: AuthorizationGate | None = None,
        reveal_unknown_email: bool = False,
    ) -> None:
        self.session = session
        self.accounts = AccountStore(session)
        self.hasher = hasher
        self.tokens = tokens
        self.gate = gate or AuthorizationGate(tokens)
        self.reveal_unknown_email = reveal_unknown_email

    async def register_account(
        self,
        username: str,
        email: str,
        password: str,
        bio: str | None = None,
    ) -> RegisteredAccount:
        """Create an account and issue its first token.

        Raises:
            ValidationError: if a field is empty or too long
            ConflictError: if the username or email is taken
        """
        username = _require_text(username, "username", MAX_USERNAME_LENGTH).strip()
        email = _require_text(email, "email", MAX_EMAIL_LENGTH)
        if not password:
            raise ValidationError("password cannot be empty")
        _check_bio(bio)

        # bcrypt is CPU-bound; keep it off the event loop
        digest = await asyncio.to_thread(self.hasher.hash, password)
        account = await self.accounts.create(username, email, digest, bio=bio)
        await self.session.commit()

        account_id = str(account.id)
        logger.info("Registered account %s", account_id)
        return RegisteredAccount(account_id=account_id, token=self.tokens.issue(account_id))

    async def login(self, email: str, password: str) -> IssuedToken:
        """Exchange email and password for a token.

        Raises:
            InvalidCredentialsError: if the email is unknown or the password is wrong
            NotFoundError: instead, for unknown emails, when ``reveal_unknown_email`` is set
        """
        account = await self.accounts.find_by_email(email or "")
        if account is None:
            await asyncio.to_thread(self.hasher.burn, password or "")
            logger.info("Login failed: unknown email")
            if self.reveal_unknown_email:
                raise NotFoundError("No account is registered with that email")
            raise InvalidCredentialsError()

        matches = await asyncio.to_thread(self.hasher.verify, password or "", account.password_digest)
        if not matches:
            logger.info("Login failed: wrong password for account %s", account.id)
            raise InvalidCredentialsError()

        logger.info("Account %s logged in", account.id)
        return IssuedToken(token=self.tokens.issue(str(account.id)))

    async def get_profile(self, token: str) -> AccountProfile:
        """Resolve ``token`` and return the caller's profile.

        Raises:
            AuthError: if the token is missing, malformed, forged, or expired
            NotFoundError: if the token's account no longer exists
        """
        context = self.gate.authorize_token(token)
        return await self.get_profile_by_id(context.account_id)

    async def get_profile_by_id(self, account_id: str) -> AccountProfile:
        account = await self.accounts.find_by_id(account_id)
        if account is None:
            raise NotFoundError("Account not found")
        return AccountProfile.from_account(account)

    async def update_bio(self, account_id: str, bio: str | None) -> AccountProfile:
        _check_bio(bio)
        account = await self.accounts.find_by_id(account_id)
        if account is None:
            raise NotFoundError("Account not found")
        await self.accounts.update_bio(account, bio)
        await self.session.commit()
        return AccountProfile.from_account(account)
