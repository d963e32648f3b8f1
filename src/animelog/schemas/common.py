"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

MediaKind = Literal["anime", "manga"]


class MediaScope(BaseModel):
    """Attachment point of a post, review, log or mark.

    Unit ids (episode/chapter) only make sense together with their parent
    series id.
    """

    anime_id: str | None = None
    anime_episode_id: str | None = None
    manga_id: str | None = None
    manga_chapter_id: str | None = None

    @model_validator(mode="after")
    def _check_scope(self) -> MediaScope:
        if self.anime_id and self.manga_id:
            raise ValueError("A scope cannot reference both an anime and a manga")
        if self.anime_episode_id and not self.anime_id:
            raise ValueError("anime_episode_id requires anime_id")
        if self.manga_chapter_id and not self.manga_id:
            raise ValueError("manga_chapter_id requires manga_id")
        return self

    @property
    def is_empty(self) -> bool:
        return not (self.anime_id or self.anime_episode_id or self.manga_id or self.manga_chapter_id)


class Message(BaseModel):
    """Plain acknowledgement body."""

    status: str = Field(default="ok")
