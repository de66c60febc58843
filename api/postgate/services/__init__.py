"""Services for Postgate."""

from postgate.services.accounts import AccountProfile, AccountService, IssuedToken, RegisteredAccount
from postgate.services.posts import PostService

__all__ = ["AccountService", "AccountProfile", "IssuedToken", "RegisteredAccount", "PostService"]
