"""Database models for Postgate."""

from postgate.models.account import Account
from postgate.models.post import Post

__all__ = [
    "Account",
    "Post",
]
