"""Account model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, Column, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from postgate.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive timestamps; they were written as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Account(Base):
    """Registered account. Username and email are each unique."""

    __tablename__ = "accounts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(64), nullable=False)
    email = Column(String(320), nullable=False)
    password_digest = Column(Text, nullable=False)
    bio = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("username", name="uq_accounts_username"),
        UniqueConstraint("email", name="uq_accounts_email"),
    )

    posts = relationship("Post", back_populates="author", order_by="Post.created_at.desc()")

    def __repr__(self) -> str:
        return f"<Account {self.id} {self.username!r}>"
