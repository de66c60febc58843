"""Post operations."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from postgate.auth.gate import AuthorizationGate
from postgate.errors import NotFoundError
from postgate.models.post import Post
from postgate.stores.posts import PostStore

logger = logging.getLogger("postgate.posts")


class PostService:
    """Post-facing operations exposed to the routing layer."""

    def __init__(self, session: AsyncSession, gate: AuthorizationGate) -> None:
        self.session = session
        self.posts = PostStore(session)
        self.gate = gate

    async def create_post(self, token: str, content: str) -> Post:
        """Create a post on behalf of the token's account.

        Raises:
            AuthError: if the token does not pass the gate
            ValidationError: if ``content`` is empty
            NotFoundError: if the token's account no longer exists
        """
        context = self.gate.authorize_token(token)
        return await self.create_post_for(context.account_id, content)

    async def create_post_for(self, account_id: str, content: str) -> Post:
        post = await self.posts.create(account_id, content)
        await self.session.commit()
        logger.info("Account %s created post %s", account_id, post.id)
        return post

    async def get_post(self, post_id: str) -> Post:
        post = await self.posts.find_by_id(post_id)
        if post is None:
            raise NotFoundError(f"Post '{post_id}' not found")
        return post

    async def list_posts(self, account_id: str, limit: int = 20) -> list[Post]:
        return await self.posts.list_by_author(account_id, limit=limit)
