"""Weekly trending sidebar schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TrendingReviewResponse(BaseModel):
    review_id: str
    post_id: str | None = None
    author_id: str
    author_username: str
    author_avatar_url: str | None = None
    media_kind: str
    media_id: str
    media_slug: str
    media_title: str
    media_image_url: str | None = None
    content: str
    created_at: datetime
    likes_count: int
    replies_count: int
    score: int

    model_config = ConfigDict(from_attributes=True)


class TrendingUserResponse(BaseModel):
    user_id: str
    username: str
    avatar_url: str | None = None
    reviews_written: int
    responses_received: int
    likes_received: int
    score: int

    model_config = ConfigDict(from_attributes=True)
