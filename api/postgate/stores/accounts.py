"""Account persistence."""

import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from postgate.errors import ConflictError
from postgate.models.account import Account


def normalize_email(email: str) -> str:
    return email.strip().lower()


def parse_id(value: str | uuid.UUID) -> uuid.UUID | None:
    """Coerce an id to UUID, returning None for anything unparseable."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class AccountStore:
    """CRUD over accounts, enforcing unique username and email."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        username: str,
        email: str,
        password_digest: str,
        bio: str | None = None,
    ) -> Account:
        """Insert a new account.

        Raises:
            ConflictError: if the username or email is already registered
        """
        email = normalize_email(email)
        existing = await self.session.execute(
            select(Account.id).where(or_(Account.username == username, Account.email == email))
        )
        if existing.first() is not None:
            raise ConflictError("Username or email already exists")

        account = Account(
            username=username,
            email=email,
            password_digest=password_digest,
            bio=bio,
        )
        self.session.add(account)
        try:
            await self.session.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration
            await self.session.rollback()
            raise ConflictError("Username or email already exists") from None
        return account

    async def find_by_id(self, account_id: str | uuid.UUID) -> Account | None:
        parsed = parse_id(account_id)
        if parsed is None:
            return None
        return await self.session.get(Account, parsed)

    async def find_by_email(self, email: str) -> Account | None:
        result = await self.session.execute(
            select(Account).where(Account.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> Account | None:
        result = await self.session.execute(select(Account).where(Account.username == username))
        return result.scalar_one_or_none()

    async def update_bio(self, account: Account, bio: str | None) -> Account:
        """Replace the account's bio. Username and email never change."""
        account.bio = bio
        await self.session.flush()
        return account
