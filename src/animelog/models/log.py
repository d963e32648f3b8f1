# src/animelog/models/log.py
"""Journal entries recording that a user watched or read something."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from animelog.db.session import Base, new_id
from animelog.db.time import utcnow
from animelog.models.profile import VISIBILITY_PUBLIC


class LogEntryMixin:
    """Columns shared by every log table.

    Rating, liked flag and review id are snapshots taken when the entry is
    written; later edits to the review or marks do not touch old logs.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return mapped_column(
            String(36),
            ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def review_id(cls) -> Mapped[str | None]:
        return mapped_column(
            String(36),
            ForeignKey("reviews.id", ondelete="SET NULL"),
            nullable=True,
        )

    logged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    liked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_rewatch: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    contains_spoilers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    visibility: Mapped[str] = mapped_column(String(16), nullable=False, default=VISIBILITY_PUBLIC)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class AnimeSeriesLog(LogEntryMixin, Base):
    __tablename__ = "anime_series_logs"

    anime_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("anime.id", ondelete="CASCADE"), nullable=False, index=True
    )


class AnimeEpisodeLog(LogEntryMixin, Base):
    __tablename__ = "anime_episode_logs"

    anime_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("anime.id", ondelete="CASCADE"), nullable=False, index=True
    )
    anime_episode_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("anime_episodes.id", ondelete="CASCADE"), nullable=False
    )


class MangaSeriesLog(LogEntryMixin, Base):
    __tablename__ = "manga_series_logs"

    manga_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("manga.id", ondelete="CASCADE"), nullable=False, index=True
    )


class MangaChapterLog(LogEntryMixin, Base):
    __tablename__ = "manga_chapter_logs"

    manga_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("manga.id", ondelete="CASCADE"), nullable=False, index=True
    )
    manga_chapter_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("manga_chapters.id", ondelete="CASCADE"), nullable=False
    )
