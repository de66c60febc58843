"""Create posts table referencing accounts."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261019_02_posts"
down_revision = "20261019_01_accounts"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["author_id"],
            ["accounts.id"],
            name="fk_posts_author_id_accounts",
        ),
    )
    op.create_index("idx_posts_author", "posts", ["author_id"])


def downgrade() -> None:
    op.drop_index("idx_posts_author", table_name="posts")
    op.drop_table("posts")
