"""Persistence for accounts and posts."""

from postgate.stores.accounts import AccountStore
from postgate.stores.posts import PostStore

__all__ = ["AccountStore", "PostStore"]
