# src/animelog/models/artwork.py
"""Artwork rows and links to external metadata providers."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from animelog.db.session import Base, new_id
from animelog.db.time import utcnow

# "3" is the TVDB artwork type id used by rows imported before kinds were named.
BACKDROP_KINDS = ("backdrop", "3")


class AnimeArtwork(Base):
    """Poster, backdrop or still image attached to an anime or one of its episodes."""

    __tablename__ = "anime_artwork"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    anime_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("anime.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    anime_episode_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("anime_episodes.id", ondelete="CASCADE"),
        nullable=True,
    )
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    vote: Mapped[float | None] = mapped_column(Float, nullable=True)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)


class MangaArtwork(Base):
    """Cover or backdrop image attached to a manga."""

    __tablename__ = "manga_artwork"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    manga_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("manga.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    vote: Mapped[float | None] = mapped_column(Float, nullable=True)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)


class AnimeExternalLink(Base):
    """Best known match of an anime in an external catalogue.

    One row per (anime, source); re-running the matcher overwrites it.
    """

    __tablename__ = "anime_external_links"
    __table_args__ = (
        UniqueConstraint("anime_id", "source", name="uq_anime_external_link_source"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    anime_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("anime.id", ondelete="CASCADE"),
        nullable=False,
    )
    # tmdb | tvdb | anilist | mal
    source: Mapped[str] = mapped_column(String(16), nullable=False)
    external_id: Mapped[str] = mapped_column(String(64), nullable=False)
    external_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    episodes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    match_method: Mapped[str] = mapped_column(String(32), nullable=False, default="auto_search")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
