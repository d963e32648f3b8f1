"""initial schema

Revision ID: 3c1f8a2b9d40
Revises:
Create Date: 2026-10-18 09:12:44.518203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f8a2b9d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _scope_columns(ondelete: str) -> list[sa.Column]:
    return [
        sa.Column("anime_id", sa.String(36), sa.ForeignKey("anime.id", ondelete=ondelete), nullable=True),
        sa.Column(
            "anime_episode_id",
            sa.String(36),
            sa.ForeignKey("anime_episodes.id", ondelete=ondelete),
            nullable=True,
        ),
        sa.Column("manga_id", sa.String(36), sa.ForeignKey("manga.id", ondelete=ondelete), nullable=True),
        sa.Column(
            "manga_chapter_id",
            sa.String(36),
            sa.ForeignKey("manga_chapters.id", ondelete=ondelete),
            nullable=True,
        ),
    ]


def _log_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("review_id", sa.String(36), sa.ForeignKey("reviews.id", ondelete="SET NULL"), nullable=True),
        sa.Column("logged_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("liked", sa.Boolean(), nullable=False),
        sa.Column("is_rewatch", sa.Boolean(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("contains_spoilers", sa.Boolean(), nullable=False),
        sa.Column("visibility", sa.String(16), nullable=False),
        _created_at(),
    ]


LOG_TABLES = ("anime_series_logs", "anime_episode_logs", "manga_series_logs", "manga_chapter_logs")


def upgrade() -> None:
    """Create the catalogue, social and journal tables."""
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("about_md", sa.Text(), nullable=True),
        sa.Column("default_visibility", sa.String(16), nullable=False),
        _created_at(),
    )

    op.create_table(
        "anime",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("title_english", sa.Text(), nullable=True),
        sa.Column("title_native", sa.Text(), nullable=True),
        sa.Column("title_preferred", sa.Text(), nullable=True),
        sa.Column("total_episodes", sa.Integer(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("banner_image_url", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("format", sa.String(32), nullable=True),
        sa.Column("status", sa.String(32), nullable=True),
        sa.Column("season", sa.String(16), nullable=True),
        sa.Column("season_year", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.String(10), nullable=True),
        sa.Column("end_date", sa.String(10), nullable=True),
        sa.Column("average_score", sa.Integer(), nullable=True),
        sa.Column("tmdb_id", sa.Integer(), nullable=True),
        sa.Column("tvdb_id", sa.Integer(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "manga",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("title_english", sa.Text(), nullable=True),
        sa.Column("title_native", sa.Text(), nullable=True),
        sa.Column("title_preferred", sa.Text(), nullable=True),
        sa.Column("total_chapters", sa.Integer(), nullable=True),
        sa.Column("total_volumes", sa.Integer(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("banner_image_url", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("format", sa.String(32), nullable=True),
        sa.Column("status", sa.String(32), nullable=True),
        sa.Column("season_year", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.String(10), nullable=True),
        sa.Column("average_score", sa.Integer(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "anime_episodes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("anime_id", sa.String(36), sa.ForeignKey("anime.id", ondelete="CASCADE"), nullable=False),
        sa.Column("episode_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("synopsis", sa.Text(), nullable=True),
        sa.Column("air_date", sa.String(32), nullable=True),
        _created_at(),
        sa.UniqueConstraint("anime_id", "episode_number", name="uq_anime_episode_number"),
    )
    op.create_index("ix_anime_episodes_anime_id", "anime_episodes", ["anime_id"])

    op.create_table(
        "manga_chapters",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("manga_id", sa.String(36), sa.ForeignKey("manga.id", ondelete="CASCADE"), nullable=False),
        sa.Column("chapter_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("volume", sa.Integer(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("manga_id", "chapter_number", name="uq_manga_chapter_number"),
    )
    op.create_index("ix_manga_chapters_manga_id", "manga_chapters", ["manga_id"])

    op.create_table(
        "anime_artwork",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("anime_id", sa.String(36), sa.ForeignKey("anime.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "anime_episode_id",
            sa.String(36),
            sa.ForeignKey("anime_episodes.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("source", sa.String(32), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
        sa.Column("vote", sa.Float(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
    )
    op.create_index("ix_anime_artwork_anime_id", "anime_artwork", ["anime_id"])

    op.create_table(
        "manga_artwork",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("manga_id", sa.String(36), sa.ForeignKey("manga.id", ondelete="CASCADE"), nullable=False),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
        sa.Column("vote", sa.Float(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
    )
    op.create_index("ix_manga_artwork_manga_id", "manga_artwork", ["manga_id"])

    op.create_table(
        "anime_external_links",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("anime_id", sa.String(36), sa.ForeignKey("anime.id", ondelete="CASCADE"), nullable=False),
        sa.Column("source", sa.String(16), nullable=False),
        sa.Column("external_id", sa.String(64), nullable=False),
        sa.Column("external_type", sa.String(16), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.String(10), nullable=True),
        sa.Column("episodes", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(32), nullable=True),
        sa.Column("confidence", sa.Integer(), nullable=False),
        sa.Column("match_method", sa.String(32), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("anime_id", "source", name="uq_anime_external_link_source"),
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        *_scope_columns("CASCADE"),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("contains_spoilers", sa.Boolean(), nullable=False),
        sa.Column("visibility", sa.String(16), nullable=False),
        sa.Column("author_liked", sa.Boolean(), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("rating IS NULL OR (rating >= 0 AND rating <= 100)", name="ck_review_rating"),
    )
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])

    op.create_table(
        "user_marks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        *_scope_columns("CASCADE"),
        sa.Column("stars", sa.Integer(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "kind IN ('watched', 'liked', 'watchlist', 'rating')",
            name="ck_user_mark_kind",
        ),
        sa.CheckConstraint("stars IS NULL OR (stars >= 0 AND stars <= 10)", name="ck_user_mark_stars"),
    )
    op.create_index("ix_user_marks_user_kind", "user_marks", ["user_id", "kind"])

    op.create_table(
        "anime_series_logs",
        *_log_columns(),
        sa.Column("anime_id", sa.String(36), sa.ForeignKey("anime.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_table(
        "anime_episode_logs",
        *_log_columns(),
        sa.Column("anime_id", sa.String(36), sa.ForeignKey("anime.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "anime_episode_id",
            sa.String(36),
            sa.ForeignKey("anime_episodes.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    op.create_table(
        "manga_series_logs",
        *_log_columns(),
        sa.Column("manga_id", sa.String(36), sa.ForeignKey("manga.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_table(
        "manga_chapter_logs",
        *_log_columns(),
        sa.Column("manga_id", sa.String(36), sa.ForeignKey("manga.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "manga_chapter_id",
            sa.String(36),
            sa.ForeignKey("manga_chapters.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    for table in LOG_TABLES:
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        media_column = "anime_id" if table.startswith("anime") else "manga_id"
        op.create_index(f"ix_{table}_{media_column}", table, [media_column])

    op.create_table(
        "posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_scope_columns("SET NULL"),
        sa.Column("review_id", sa.String(36), sa.ForeignKey("reviews.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_posts_created_at", "posts", ["created_at"])
    op.create_index("ix_posts_user_id", "posts", ["user_id"])

    op.create_table(
        "likes",
        sa.Column("post_id", sa.String(36), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("post_id", "user_id"),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("post_id", sa.String(36), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "parent_comment_id",
            sa.String(36),
            sa.ForeignKey("comments.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_comments_post_id", "comments", ["post_id"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_table("comments")
    op.drop_table("likes")
    op.drop_table("posts")
    for table in reversed(LOG_TABLES):
        op.drop_table(table)
    op.drop_table("user_marks")
    op.drop_table("reviews")
    op.drop_table("anime_external_links")
    op.drop_table("manga_artwork")
    op.drop_table("anime_artwork")
    op.drop_table("manga_chapters")
    op.drop_table("anime_episodes")
    op.drop_table("manga")
    op.drop_table("anime")
    op.drop_table("profiles")
