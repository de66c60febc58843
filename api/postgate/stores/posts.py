"""Post persistence."""

import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from postgate.errors import NotFoundError, ValidationError
from postgate.models.account import Account
from postgate.models.post import Post
from postgate.stores.accounts import parse_id

MAX_CONTENT_LENGTH = 65536


class PostStore:
    """CRUD over posts, enforcing that every post has a live author."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, author_id: str | uuid.UUID, content: str) -> Post:
        """Insert a post owned by ``author_id``.

        The author lookup and the insert share the session's transaction;
        the foreign key on ``posts.author_id`` backs up the lookup.

        Raises:
            ValidationError: if ``content`` is empty or too long
            NotFoundError: if no account has id ``author_id``
        """
        if not content or not content.strip():
            raise ValidationError("Post content cannot be empty")
        if len(content) > MAX_CONTENT_LENGTH:
            raise ValidationError(f"Post content must be {MAX_CONTENT_LENGTH} characters or less")

        author_uuid = parse_id(author_id)
        if author_uuid is None:
            raise NotFoundError(f"Account '{author_id}' not found")

        result = await self.session.execute(select(Account.id).where(Account.id == author_uuid))
        if result.first() is None:
            raise NotFoundError(f"Account '{author_id}' not found")

        post = Post(author_id=author_uuid, content=content)
        self.session.add(post)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise NotFoundError(f"Account '{author_id}' not found") from None
        return post

    async def find_by_id(self, post_id: str | uuid.UUID) -> Post | None:
        parsed = parse_id(post_id)
        if parsed is None:
            return None
        return await self.session.get(Post, parsed)

    async def list_by_author(self, author_id: str | uuid.UUID, limit: int = 20) -> list[Post]:
        """Newest posts first."""
        parsed = parse_id(author_id)
        if parsed is None:
            return []
        result = await self.session.execute(
            select(Post)
            .where(Post.author_id == parsed)
            .order_by(Post.created_at.desc(), Post.id)
            .limit(limit)
        )
        return list(result.scalars().all())
