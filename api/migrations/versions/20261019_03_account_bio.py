"""Add optional bio to accounts."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261019_03_account_bio"
down_revision = "20261019_02_posts"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("accounts") as batch_op:
        batch_op.add_column(sa.Column("bio", sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("accounts") as batch_op:
        batch_op.drop_column("bio")
