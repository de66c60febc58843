"""Post model."""

import uuid

from sqlalchemy import TIMESTAMP, Column, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import relationship

from postgate.database import Base
from postgate.models.account import utcnow


class Post(Base):
    """A post authored by an account. Ownership never changes."""

    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    content = Column(Text, nullable=False)
    author_id = Column(Uuid, ForeignKey("accounts.id", name="fk_posts_author_id_accounts"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("idx_posts_author", author_id),)

    author = relationship("Account", back_populates="posts")
