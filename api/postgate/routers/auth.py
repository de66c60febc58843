"""Authentication router for account registration and login."""

from fastapi import APIRouter, Depends, status

from postgate.auth.dependencies import get_account_service
from postgate.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from postgate.services.accounts import AccountService

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    data: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """
    Create a new account and return its first bearer token.

    Returns 409 if the username or email is already registered.
    """
    registered = await service.register_account(
        username=data.username,
        email=data.email,
        password=data.password,
        bio=data.bio,
    )
    return RegisterResponse(
        account_id=registered.account_id,
        token=registered.token,
        expires_in=service.tokens.ttl_seconds,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
)
async def login(
    data: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    """
    Authenticate with email and password.

    Unknown emails and wrong passwords both return the same 401.
    """
    issued = await service.login(data.email, data.password)
    return TokenResponse(token=issued.token, expires_in=service.tokens.ttl_seconds)
