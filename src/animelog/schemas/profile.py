"""Profile schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProfileResponse(BaseModel):
    """Public profile information."""

    id: str
    username: str
    avatar_url: str | None = None
    about_md: str | None = None
    default_visibility: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FollowSummary(BaseModel):
    """Follower counts, plus whether the signed-in viewer follows this profile."""

    followers: int
    following: int
    viewer_follows: bool = False


class FollowEntry(BaseModel):
    id: str
    username: str
    avatar_url: str | None = None
    followed_at: datetime


class ShelfItemResponse(BaseModel):
    """Poster card on the library or watchlist tab."""

    kind: str
    id: str
    slug: str | None = None
    title: str
    image_url: str | None = None
    stars: int | None = None
    liked: bool = False
    reviewed: bool = False
    added_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
