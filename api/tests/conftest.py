"""
Shared test fixtures for Postgate tests.

Each test gets its own SQLite database file, migrated to head, and an app
built around it with a controllable clock.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from postgate.auth.password import CredentialHasher
from postgate.auth.tokens import TokenService
from postgate.config import Settings
from postgate.main import create_app
from postgate.migrations import migrate_db
from postgate.services.accounts import AccountService

TEST_JWT_SECRET = "test-jwt-secret-with-enough-entropy-0123456789"
TEST_BCRYPT_ROUNDS = 4
CLOCK_START = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = CLOCK_START) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


# --- Component Fixtures ---


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def hasher() -> CredentialHasher:
    return CredentialHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def jwt_secret() -> str:
    return TEST_JWT_SECRET


@pytest.fixture
def token_service(jwt_secret: str, clock: FakeClock) -> TokenService:
    return TokenService(jwt_secret, ttl_seconds=3600, clock=clock)


# --- Database / App Fixtures ---


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'postgate_test.db'}",
        jwt_secret=TEST_JWT_SECRET,
        access_token_expire_seconds=3600,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        migrate_on_startup=False,
        environment="test",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(test_settings: Settings, clock: FakeClock) -> AsyncGenerator[FastAPI, None]:
    """App wired to a freshly migrated database and the fake clock."""
    await migrate_db(test_settings.database_url)
    application = create_app(test_settings, clock=clock)
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """A session on the app's database, independent of any request."""
    async with app.state.database.sessionmaker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True,
    ) as client:
        yield client


@pytest.fixture
def account_service(app: FastAPI, db_session: AsyncSession) -> AccountService:
    return AccountService(db_session, app.state.hasher, app.state.token_service)


# --- Authentication Helper Fixtures ---


@pytest.fixture
def auth_headers():
    """Factory fixture for creating bearer Authorization headers."""

    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def valid_registration_data() -> dict[str, str]:
    """Valid account registration payload."""
    return {
        "username": "newuser",
        "email": "newuser@example.com",
        "password": "SecurePassword123!",
        "bio": "Writes about databases",
    }


async def _register(
    app: FastAPI,
    username: str,
    email: str,
    password: str,
    bio: str | None = None,
) -> dict[str, Any]:
    """Register an account through the service layer in its own session."""
    async with app.state.database.sessionmaker() as session:
        service = AccountService(session, app.state.hasher, app.state.token_service)
        registered = await service.register_account(username, email, password, bio=bio)

    return {
        "account_id": registered.account_id,
        "token": registered.token,
        "username": username,
        "email": email,
        "password": password,
        "bio": bio,
    }


@pytest_asyncio.fixture
async def test_account(app: FastAPI) -> dict[str, Any]:
    """A registered account with a live token."""
    return await _register(app, "testuser", "test@example.com", "TestPassword123!")


@pytest_asyncio.fixture
async def second_account(app: FastAPI) -> dict[str, Any]:
    """A second account for ownership scenarios."""
    return await _register(app, "seconduser", "second@example.com", "SecondPassword123!")
