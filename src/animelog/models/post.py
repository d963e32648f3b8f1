# src/animelog/models/post.py
"""Feed posts, likes and comments."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from animelog.db.session import Base, new_id
from animelog.db.time import utcnow


class Post(Base):
    """A feed post, optionally attached to an anime/manga or one of its units."""

    __tablename__ = "posts"
    __table_args__ = (Index("ix_posts_created_at", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Scope of the post; all null for a plain home-feed post.
    anime_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("anime.id", ondelete="SET NULL"), nullable=True
    )
    anime_episode_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("anime_episodes.id", ondelete="SET NULL"), nullable=True
    )
    manga_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("manga.id", ondelete="SET NULL"), nullable=True
    )
    manga_chapter_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("manga_chapters.id", ondelete="SET NULL"), nullable=True
    )
    review_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("reviews.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class PostLike(Base):
    """Existence of a row means the user likes the post."""

    __tablename__ = "likes"

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Composite primary key prevents duplicate likes from the same user.
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Comment(Base):
    """Reply to a post; nested replies point at their parent comment."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Null for root-level replies, which are the ones counted on the feed.
    parent_comment_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
