"""Post, like and comment schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from animelog.schemas.common import MediaScope


class PostCreate(MediaScope):
    """Schema for creating a new feed post."""

    content: str = Field(..., max_length=5000, description="Post body")

    @field_validator("content")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Post content cannot be empty")
        return value


class PostUpdate(BaseModel):
    content: str = Field(..., max_length=5000)

    @field_validator("content")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Post content cannot be empty")
        return value


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    user_id: str
    content: str
    anime_id: str | None = None
    anime_episode_id: str | None = None
    manga_id: str | None = None
    manga_chapter_id: str | None = None
    review_id: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class FeedPost(PostResponse):
    """A post decorated with its author and engagement counts."""

    username: str | None = None
    avatar_url: str | None = None
    like_count: int = 0
    reply_count: int = 0
    liked_by_me: bool = False


class FeedCursorModel(BaseModel):
    """Last item of a page; send back as ``before`` and ``before_id``."""

    created_at: datetime
    id: str


class FeedPage(BaseModel):
    items: list[FeedPost]
    next_cursor: FeedCursorModel | None = None


class LikeResponse(BaseModel):
    post_id: str
    liked: bool
    like_count: int


class CommentCreate(BaseModel):
    content: str = Field(..., max_length=2000)
    parent_comment_id: str | None = None

    @field_validator("content")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Comment content cannot be empty")
        return value


class CommentResponse(BaseModel):
    id: str
    post_id: str
    user_id: str
    parent_comment_id: str | None = None
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
