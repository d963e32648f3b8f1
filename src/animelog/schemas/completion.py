"""Completion (progress tracking) schemas."""
from datetime import datetime

from pydantic import BaseModel, Field

from animelog.schemas.common import MediaKind
from animelog.utils.completion_sort import CompletionSort


class ProgressResponse(BaseModel):
    current: int
    total: int
    pct: int | None = None


class EngagementResponse(BaseModel):
    reviewed: int
    rated: int


class ProgressBatchItem(BaseModel):
    kind: str
    id: str


class ProgressBatchRequest(BaseModel):
    user_id: str
    items: list[ProgressBatchItem] = Field(default_factory=list, max_length=500)


class ProgressBatchResponse(BaseModel):
    # Keyed by "kind:id".
    by_key: dict[str, ProgressResponse]


class CompletionItem(BaseModel):
    """Per-user progress summary for one anime or manga."""

    kind: MediaKind
    id: str
    title: str
    image_url: str | None = None
    slug: str
    last_logged_at: datetime | None = None
    progress_current: int
    progress_total: int
    progress_pct: int | None = None
    reviewed_count: int = 0
    rated_count: int = 0


class CompletionCursorModel(BaseModel):
    last_logged_at: datetime | None = None
    kind: MediaKind
    id: str
    pct: int | None = None


class CompletionPage(BaseModel):
    items: list[CompletionItem]
    sort: CompletionSort
    next_cursor: CompletionCursorModel | None = None


class BucketCount(BaseModel):
    bucket: str
    anime_count: int
    manga_count: int
    total_count: int
