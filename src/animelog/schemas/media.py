"""Catalogue schemas for anime, manga, episodes and chapters."""
from pydantic import BaseModel, ConfigDict


class AnimeSummary(BaseModel):
    id: str
    slug: str
    title: str
    title_english: str | None = None
    image_url: str | None = None
    total_episodes: int | None = None
    season_year: int | None = None

    model_config = ConfigDict(from_attributes=True)


class AnimeDetail(AnimeSummary):
    """Anime page payload; ``backdrop_url`` is re-rolled on every request."""

    title_native: str | None = None
    title_preferred: str | None = None
    banner_image_url: str | None = None
    description: str | None = None
    format: str | None = None
    status: str | None = None
    season: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    average_score: int | None = None
    tmdb_id: int | None = None
    tvdb_id: int | None = None
    backdrop_url: str | None = None


class EpisodeResponse(BaseModel):
    id: str
    anime_id: str
    episode_number: int
    title: str | None = None
    synopsis: str | None = None
    air_date: str | None = None

    model_config = ConfigDict(from_attributes=True)


class EpisodeDetail(EpisodeResponse):
    anime_slug: str
    anime_title: str
    backdrop_url: str | None = None
    thumbnail_url: str | None = None


class MangaSummary(BaseModel):
    id: str
    slug: str
    title: str
    title_english: str | None = None
    image_url: str | None = None
    total_chapters: int | None = None
    season_year: int | None = None

    model_config = ConfigDict(from_attributes=True)


class MangaDetail(MangaSummary):
    title_native: str | None = None
    title_preferred: str | None = None
    total_volumes: int | None = None
    banner_image_url: str | None = None
    description: str | None = None
    format: str | None = None
    status: str | None = None
    start_date: str | None = None
    average_score: int | None = None
    backdrop_url: str | None = None


class ChapterResponse(BaseModel):
    id: str
    manga_id: str
    chapter_number: int
    title: str | None = None
    volume: int | None = None

    model_config = ConfigDict(from_attributes=True)


class ChapterDetail(ChapterResponse):
    manga_slug: str
    manga_title: str
    backdrop_url: str | None = None
    thumbnail_url: str | None = None
