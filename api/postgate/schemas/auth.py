"""Authentication schemas for request/response validation."""

import re

from pydantic import BaseModel, EmailStr, field_validator


class RegisterRequest(BaseModel):
    """Account registration request schema."""

    username: str
    email: EmailStr
    password: str
    bio: str | None = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username format: 3-32 chars, lowercase alphanumeric and underscore only."""
        if not re.match(r"^[a-z0-9_]{3,32}$", v):
            raise ValueError(
                "Username must be 3-32 characters, lowercase letters, numbers, and underscores only"
            )
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Password must be non-empty and fit bcrypt's 72-byte input."""
        if not v:
            raise ValueError("Password cannot be empty")
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return v

    @field_validator("bio")
    @classmethod
    def validate_bio(cls, v: str | None) -> str | None:
        if v is not None and len(v) > 2000:
            raise ValueError("Bio must be 2000 characters or less")
        return v


class RegisterResponse(BaseModel):
    """Account registration response schema."""

    account_id: str
    token: str
    token_type: str = "bearer"
    expires_in: int


class LoginRequest(BaseModel):
    """Login request schema."""

    email: str
    password: str


class TokenResponse(BaseModel):
    """Bearer token issued at login."""

    token: str
    token_type: str = "bearer"
    expires_in: int
