"""Authentication and service dependencies for FastAPI endpoints."""

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from postgate.auth.gate import AuthContext, AuthorizationGate
from postgate.auth.password import CredentialHasher
from postgate.auth.tokens import TokenService
from postgate.config import Settings
from postgate.database import get_db
from postgate.services.accounts import AccountService
from postgate.services.posts import PostService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_hasher(request: Request) -> CredentialHasher:
    return request.app.state.hasher


def get_gate(tokens: TokenService = Depends(get_token_service)) -> AuthorizationGate:
    return AuthorizationGate(tokens)


async def get_auth_context(
    authorization: str | None = Header(default=None),
    gate: AuthorizationGate = Depends(get_gate),
) -> AuthContext:
    """
    Validate the bearer token and return the authenticated account.

    This is the only place a request's credentials are checked; endpoints
    depending on it trust the returned account id.

    Raises:
        AuthError: if the header is missing or the token is rejected
    """
    return gate.authorize(authorization)


def get_account_service(
    db: AsyncSession = Depends(get_db),
    hasher: CredentialHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
    gate: AuthorizationGate = Depends(get_gate),
    settings: Settings = Depends(get_app_settings),
) -> AccountService:
    return AccountService(
        db,
        hasher,
        tokens,
        gate=gate,
        reveal_unknown_email=settings.login_reveals_unknown_email,
    )


def get_post_service(
    db: AsyncSession = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
) -> PostService:
    return PostService(db, gate)
