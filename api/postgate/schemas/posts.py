"""Post-related Pydantic schemas."""

from pydantic import BaseModel, field_validator


class CreatePostRequest(BaseModel):
    """Request to create a post."""

    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Validate content length."""
        if len(v) > 65536:  # 64KB
            raise ValueError("Content must be 64KB or less")
        return v


class PostResponse(BaseModel):
    """Response for a single post."""

    id: str
    content: str
    author_id: str
    created_at: str
    updated_at: str


class ListPostsResponse(BaseModel):
    """Response for listing posts."""

    items: list[PostResponse]
