# src/animelog/models/review.py
"""Long-form rated reviews."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from animelog.db.session import Base, new_id
from animelog.db.time import utcnow
from animelog.models.profile import VISIBILITY_PUBLIC


class Review(Base):
    """Review of a whole series, or of one episode/chapter when the unit id is set."""

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 0 AND rating <= 100)", name="ck_review_rating"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
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

    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    contains_spoilers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    visibility: Mapped[str] = mapped_column(String(16), nullable=False, default=VISIBILITY_PUBLIC)
    # Snapshot of the author's "liked" mark at the time of writing.
    author_liked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
