"""Journal log schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from animelog.schemas.review import Visibility

LogKind = Literal["anime_series", "anime_episode", "manga_series", "manga_chapter"]


class LogCreateBase(BaseModel):
    rating: int | None = Field(None, ge=0, le=100)
    liked: bool = False
    is_rewatch: bool = False
    note: str | None = Field(None, max_length=5000)
    contains_spoilers: bool = False
    # Falls back to the author's profile default when omitted.
    visibility: Visibility | None = None
    logged_at: datetime | None = None
    review_id: str | None = None


class AnimeSeriesLogCreate(LogCreateBase):
    anime_id: str


class AnimeEpisodeLogCreate(LogCreateBase):
    anime_id: str
    anime_episode_id: str


class MangaSeriesLogCreate(LogCreateBase):
    manga_id: str


class MangaChapterLogCreate(LogCreateBase):
    manga_id: str
    manga_chapter_id: str


class LogResponse(BaseModel):
    """One journal row, flattened across the four log tables."""

    id: str
    kind: LogKind
    user_id: str
    anime_id: str | None = None
    anime_episode_id: str | None = None
    manga_id: str | None = None
    manga_chapter_id: str | None = None
    title: str | None = None
    slug: str | None = None
    unit_number: int | None = None
    rating: int | None = None
    liked: bool
    is_rewatch: bool
    note: str | None = None
    contains_spoilers: bool
    visibility: str
    review_id: str | None = None
    logged_at: datetime


class ActivityItemResponse(BaseModel):
    """Timeline row; ``actions`` lists what a log records (watched, liked, rated, reviewed)."""

    id: str
    kind: Literal["log", "review", "mark"]
    type: str
    domain: Literal["anime", "manga"]
    scope: Literal["series", "episode", "chapter"]
    title: str
    logged_at: datetime
    media_id: str | None = None
    slug: str | None = None
    unit_id: str | None = None
    unit_number: int | None = None
    sub_label: str | None = None
    actions: list[str] = Field(default_factory=list)
    rating: int | None = None
    stars: int | None = None
    note: str | None = None
    content: str | None = None
    contains_spoilers: bool = False
    visibility: str | None = None
    review_id: str | None = None
    post_id: str | None = None

    model_config = ConfigDict(from_attributes=True)
