# src/animelog/models/mark.py
"""User marks: watched, liked, watchlisted and star ratings."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from animelog.db.session import Base, new_id
from animelog.db.time import utcnow

MARK_WATCHED = "watched"
MARK_LIKED = "liked"
MARK_WATCHLIST = "watchlist"
MARK_RATING = "rating"
MARK_KINDS = (MARK_WATCHED, MARK_LIKED, MARK_WATCHLIST, MARK_RATING)


class UserMark(Base):
    """A single annotation on exactly one anime, episode, manga or chapter.

    The scope is the combination of the four nullable ids: a series mark has
    only `anime_id` (or `manga_id`) set, a unit mark also carries the unit id.
    """

    __tablename__ = "user_marks"
    __table_args__ = (
        CheckConstraint(
            "kind IN ('watched', 'liked', 'watchlist', 'rating')",
            name="ck_user_mark_kind",
        ),
        CheckConstraint("stars IS NULL OR (stars >= 0 AND stars <= 10)", name="ck_user_mark_stars"),
        Index("ix_user_marks_user_kind", "user_id", "kind"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    anime_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("anime.id", ondelete="CASCADE"), nullable=True
    )
    anime_episode_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("anime_episodes.id", ondelete="CASCADE"), nullable=True
    )
    manga_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("manga.id", ondelete="CASCADE"), nullable=True
    )
    manga_chapter_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("manga_chapters.id", ondelete="CASCADE"), nullable=True
    )
    # Half-star value for rating marks (0-10); null for the boolean kinds.
    stars: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
