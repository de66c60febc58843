"""Accounts router for the authenticated account's profile and posts."""

from fastapi import APIRouter, Depends, Query, status

from postgate.auth.dependencies import get_account_service, get_auth_context, get_post_service
from postgate.auth.gate import AuthContext
from postgate.models.account import as_utc
from postgate.routers.posts import to_post_response
from postgate.schemas.accounts import ProfileResponse, UpdateProfileRequest
from postgate.schemas.posts import ListPostsResponse
from postgate.services.accounts import AccountProfile, AccountService
from postgate.services.posts import PostService

router = APIRouter(prefix="/api/v1/accounts", tags=["Accounts"])


def to_profile_response(profile: AccountProfile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        username=profile.username,
        email=profile.email,
        bio=profile.bio,
        created_at=as_utc(profile.created_at).isoformat(),
    )


@router.get(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def get_my_profile(
    auth: AuthContext = Depends(get_auth_context),
    service: AccountService = Depends(get_account_service),
) -> ProfileResponse:
    """Get the authenticated account's profile."""
    profile = await service.get_profile_by_id(auth.account_id)
    return to_profile_response(profile)


@router.patch(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
)
async def update_my_profile(
    data: UpdateProfileRequest,
    auth: AuthContext = Depends(get_auth_context),
    service: AccountService = Depends(get_account_service),
) -> ProfileResponse:
    """
    Update the authenticated account's profile.

    Only the bio can change; username and email are fixed at registration.
    """
    profile = await service.update_bio(auth.account_id, data.bio)
    return to_profile_response(profile)


@router.get(
    "/me/posts",
    response_model=ListPostsResponse,
    status_code=status.HTTP_200_OK,
)
async def list_my_posts(
    auth: AuthContext = Depends(get_auth_context),
    service: PostService = Depends(get_post_service),
    limit: int = Query(default=20, ge=1, le=100, description="Items to return"),
) -> ListPostsResponse:
    """List the authenticated account's posts, newest first."""
    posts = await service.list_posts(auth.account_id, limit=limit)
    return ListPostsResponse(items=[to_post_response(post) for post in posts])
