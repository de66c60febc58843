"""Account-related Pydantic schemas."""

from pydantic import BaseModel, field_validator


class ProfileResponse(BaseModel):
    """The authenticated account's profile. Never includes the password digest."""

    id: str
    username: str
    email: str
    bio: str | None
    created_at: str


class UpdateProfileRequest(BaseModel):
    """Request to update the account's bio."""

    bio: str | None = None

    @field_validator("bio")
    @classmethod
    def validate_bio(cls, v: str | None) -> str | None:
        if v is not None and len(v) > 2000:
            raise ValueError("Bio must be 2000 characters or less")
        return v
