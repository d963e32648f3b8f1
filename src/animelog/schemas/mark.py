"""Mark schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from animelog.schemas.common import MediaScope


class MarkSet(MediaScope):
    # Half-stars; required for rating marks, ignored otherwise.
    stars: int | None = Field(None, ge=0, le=10)


class MarkResponse(BaseModel):
    id: str
    kind: str
    anime_id: str | None = None
    anime_episode_id: str | None = None
    manga_id: str | None = None
    manga_chapter_id: str | None = None
    stars: int | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MarkState(BaseModel):
    """The caller's marks on one scope, as booleans plus the star value."""

    watched: bool = False
    liked: bool = False
    watchlist: bool = False
    stars: int | None = None
