"""Review schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Visibility = Literal["public", "friends", "private"]


class ReviewUpsert(BaseModel):
    """Body for creating or replacing the caller's review of one scope."""

    rating: int | None = Field(None, ge=0, le=100)
    content: str = Field(default="", max_length=20000)
    contains_spoilers: bool = False
    visibility: Visibility | None = None
    author_liked: bool = False


class ReviewResponse(BaseModel):
    id: str
    user_id: str
    anime_id: str | None = None
    anime_episode_id: str | None = None
    manga_id: str | None = None
    manga_chapter_id: str | None = None
    rating: int | None = None
    content: str
    contains_spoilers: bool
    visibility: str
    author_liked: bool
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
