"""Posts router."""

from fastapi import APIRouter, Depends, status

from postgate.auth.dependencies import get_auth_context, get_post_service
from postgate.auth.gate import AuthContext
from postgate.models.account import as_utc
from postgate.models.post import Post
from postgate.schemas.posts import CreatePostRequest, PostResponse
from postgate.services.posts import PostService

router = APIRouter(prefix="/api/v1/posts", tags=["Posts"])


def to_post_response(post: Post) -> PostResponse:
    return PostResponse(
        id=str(post.id),
        content=post.content,
        author_id=str(post.author_id),
        created_at=as_utc(post.created_at).isoformat(),
        updated_at=as_utc(post.updated_at).isoformat(),
    )


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_post(
    data: CreatePostRequest,
    auth: AuthContext = Depends(get_auth_context),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Create a post owned by the authenticated account."""
    post = await service.create_post_for(auth.account_id, data.content)
    return to_post_response(post)


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    status_code=status.HTTP_200_OK,
)
async def get_post(
    post_id: str,
    auth: AuthContext = Depends(get_auth_context),  # noqa: ARG001
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Get a single post by ID."""
    post = await service.get_post(post_id)
    return to_post_response(post)
