"""Pydantic schemas for request/response validation."""

from postgate.schemas.accounts import ProfileResponse, UpdateProfileRequest
from postgate.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from postgate.schemas.posts import CreatePostRequest, ListPostsResponse, PostResponse

__all__ = [
    "RegisterRequest",
    "RegisterResponse",
    "LoginRequest",
    "TokenResponse",
    "ProfileResponse",
    "UpdateProfileRequest",
    "CreatePostRequest",
    "PostResponse",
    "ListPostsResponse",
]
