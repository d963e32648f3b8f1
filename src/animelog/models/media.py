# src/animelog/models/media.py
"""Catalogue models: anime, manga and their episodes/chapters."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from animelog.db.session import Base, new_id
from animelog.db.time import utcnow


class Anime(Base):
    """An anime series as imported from the metadata providers."""

    __tablename__ = "anime"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_english: Mapped[str | None] = mapped_column(Text, nullable=True)
    title_native: Mapped[str | None] = mapped_column(Text, nullable=True)
    title_preferred: Mapped[str | None] = mapped_column(Text, nullable=True)

    total_episodes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    banner_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    format: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    season: Mapped[str | None] = mapped_column(String(16), nullable=True)
    season_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # ISO dates (YYYY-MM-DD) exactly as the providers return them.
    start_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    end_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    average_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Legacy direct ids; anime_external_links is the source of truth.
    tmdb_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tvdb_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class AnimeEpisode(Base):
    """A single numbered episode of an anime."""

    __tablename__ = "anime_episodes"
    __table_args__ = (
        UniqueConstraint("anime_id", "episode_number", name="uq_anime_episode_number"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    anime_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("anime.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    synopsis: Mapped[str | None] = mapped_column(Text, nullable=True)
    air_date: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Manga(Base):
    """A manga series."""

    __tablename__ = "manga"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_english: Mapped[str | None] = mapped_column(Text, nullable=True)
    title_native: Mapped[str | None] = mapped_column(Text, nullable=True)
    title_preferred: Mapped[str | None] = mapped_column(Text, nullable=True)

    total_chapters: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_volumes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    banner_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    format: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    season_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    average_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class MangaChapter(Base):
    """A single numbered chapter of a manga."""

    __tablename__ = "manga_chapters"
    __table_args__ = (
        UniqueConstraint("manga_id", "chapter_number", name="uq_manga_chapter_number"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    manga_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("manga.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chapter_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    volume: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
