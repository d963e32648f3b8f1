"""Admin route schemas."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AutoLinkRequest(BaseModel):
    """Accepts the camelCase keys sent by the admin tooling."""

    anime_id: str | None = Field(None, alias="animeId")
    title_override: str | None = Field(None, alias="titleOverride")
    year_override: int | None = Field(None, alias="yearOverride")
    episodes_override: int | None = Field(None, alias="episodesOverride")
    secret: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class AutoLinkQuery(BaseModel):
    title: str
    year: int | None = None
    episodes: int | None = None


class AutoLinkResponse(BaseModel):
    success: bool
    anime_id: str
    query: AutoLinkQuery
    # Per source: the chosen match, null when nothing was found, or {"error": ...}.
    best: dict[str, dict[str, Any] | None]
