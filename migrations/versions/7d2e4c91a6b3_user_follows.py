"""user follows

Revision ID: 7d2e4c91a6b3
Revises: 3c1f8a2b9d40
Create Date: 2026-10-18 14:03:27.904117

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "7d2e4c91a6b3"
down_revision: Union[str, Sequence[str], None] = "3c1f8a2b9d40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_follows",
        sa.Column(
            "follower_id",
            sa.String(36),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "following_id",
            sa.String(36),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("follower_id", "following_id"),
        sa.CheckConstraint("follower_id <> following_id", name="ck_user_follow_not_self"),
    )
    op.create_index("ix_user_follows_following_id", "user_follows", ["following_id"])


def downgrade() -> None:
    op.drop_index("ix_user_follows_following_id", table_name="user_follows")
    op.drop_table("user_follows")
