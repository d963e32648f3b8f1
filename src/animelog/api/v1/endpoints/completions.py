"""Completion progress endpoints used by the profile completions tab."""

import uuid
from datetime import datetime
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, Response, status

from animelog.api.v1.dependencies import EngagementCacheDep, ProgressCacheDep, SessionDep
from animelog.core.settings import settings
from animelog.schemas.completion import (
    BucketCount,
    CompletionCursorModel,
    CompletionItem,
    CompletionPage,
    EngagementResponse,
    ProgressBatchRequest,
    ProgressBatchResponse,
    ProgressResponse,
)
from animelog.services import completions as completion_service
from animelog.services.cache import cache_key
from animelog.utils.completion_sort import CompletionCursor, CompletionSort
from animelog.utils.progress_filters import PROGRESS_FILTERS, pct_from
from animelog.utils.progress_ring import build_ring, render_ring_svg, ring_label

router = APIRouter(prefix="/completions", tags=["completions"])

MediaKind = Literal["anime", "manga"]


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _require_uuids(**values: str) -> None:
    invalid = [name for name, value in values.items() if not _is_uuid(value)]
    if invalid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{', '.join(invalid)} must be UUIDs",
        )


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(
    db: SessionDep,
    cache: ProgressCacheDep,
    id: str,
    kind: MediaKind,
    user_id: str = Query(..., alias="userId"),
) -> ProgressResponse:
    """Distinct logged units over catalogue units for one series."""
    _require_uuids(userId=user_id, id=id)
    key = cache_key(user_id, kind, id)
    cached = cache.get(key)
    if cached is None:
        current, total = completion_service.compute_progress(db, user_id, kind, id)
        cached = {"current": current, "total": total, "pct": pct_from(current, total)}
        cache.set(key, cached)
    return ProgressResponse(**cached)


@router.get("/engagement", response_model=EngagementResponse)
async def get_engagement(
    db: SessionDep,
    cache: EngagementCacheDep,
    id: str,
    kind: MediaKind,
    user_id: str = Query(..., alias="userId"),
) -> EngagementResponse:
    """Episode/chapter reviews and ratings written by the user for one series."""
    _require_uuids(userId=user_id, id=id)
    key = cache_key(user_id, kind, id)
    cached = cache.get(key)
    if cached is None:
        reviewed, rated = completion_service.compute_engagement(db, user_id, kind, id)
        cached = {"reviewed": reviewed, "rated": rated}
        cache.set(key, cached)
    return EngagementResponse(**cached)


@router.post("/progress-batch", response_model=ProgressBatchResponse)
async def get_progress_batch(payload: ProgressBatchRequest, db: SessionDep) -> ProgressBatchResponse:
    """Progress for many series at once; malformed items are skipped."""
    _require_uuids(user_id=payload.user_id)
    items = [
        (item.kind, item.id)
        for item in payload.items
        if item.kind in completion_service.MEDIA_KINDS and _is_uuid(item.id)
    ]
    results = completion_service.compute_progress_batch(db, payload.user_id, items)
    return ProgressBatchResponse(
        by_key={key: ProgressResponse(**value) for key, value in results.items()}
    )


def _validate_bucket(bucket: str) -> None:
    if bucket not in PROGRESS_FILTERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown progress filter: {bucket}",
        )


@router.get("", response_model=CompletionPage)
async def list_completions(
    db: SessionDep,
    user_id: str,
    kind: Literal["all", "anime", "manga"] = "all",
    sort: CompletionSort = "last_logged",
    bucket: str = "all",
    min_pct: int | None = Query(None, ge=0, le=100),
    max_pct: int | None = Query(None, ge=0, le=100),
    search: str | None = Query(None, max_length=200),
    limit: int | None = Query(None, ge=1, le=200),
    cursor_last_logged_at: datetime | None = None,
    cursor_kind: MediaKind | None = None,
    cursor_id: str | None = None,
    cursor_pct: int | None = None,
) -> CompletionPage:
    _require_uuids(user_id=user_id)
    _validate_bucket(bucket)

    cursor = None
    if cursor_kind is not None and cursor_id is not None:
        cursor = CompletionCursor(
            last_logged_at=cursor_last_logged_at,
            kind=cursor_kind,
            id=cursor_id,
            pct=cursor_pct,
        )

    result = completion_service.list_completions(
        db,
        user_id,
        limit=limit or settings.completions_page_size,
        cursor=cursor,
        min_pct=min_pct,
        max_pct=max_pct,
        kind=kind,
        sort=sort,
        search=search,
        bucket=bucket,
    )
    next_cursor = None
    if result.next_cursor is not None:
        next_cursor = CompletionCursorModel(
            last_logged_at=result.next_cursor.last_logged_at,
            kind=result.next_cursor.kind,
            id=result.next_cursor.id,
            pct=result.next_cursor.pct,
        )
    return CompletionPage(
        items=[CompletionItem.model_validate(row, from_attributes=True) for row in result.items],
        sort=sort,
        next_cursor=next_cursor,
    )


@router.get("/buckets", response_model=list[BucketCount])
async def get_bucket_counts(
    db: SessionDep,
    user_id: str,
    kind: Literal["all", "anime", "manga"] = "all",
    search: str | None = Query(None, max_length=200),
) -> list[BucketCount]:
    _require_uuids(user_id=user_id)
    counts = completion_service.bucket_counts(db, user_id, kind=kind, search=search)
    return [BucketCount(**row) for row in counts]


@router.get("/ring.svg", response_class=Response)
async def get_progress_ring(
    db: SessionDep,
    current: int | None = Query(None, ge=0),
    total: int | None = Query(None, ge=0),
    user_id: str | None = None,
    id: str | None = None,
    kind: MediaKind | None = None,
    segment_cap: int | None = Query(None, ge=1, le=1000),
    hover: int | None = Query(None, ge=0, description="Index of the hovered segment"),
    size: float = Query(215, gt=0, le=2000),
    stroke: float = Query(32, gt=0, le=1000),
) -> Response:
    """Segmented progress ring as SVG.

    Either pass ``current``/``total`` directly or ``user_id``, ``id`` and
    ``kind`` to compute them.
    """
    if current is None or total is None:
        if not (user_id and id and kind):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Pass current and total, or user_id, id and kind",
            )
        _require_uuids(user_id=user_id, id=id)
        current, total = completion_service.compute_progress(db, user_id, kind, id)

    ring = build_ring(
        current,
        total,
        segment_cap=segment_cap or settings.ring_segment_cap,
        size=size,
        stroke=min(stroke, size / 2),
    )
    label = None
    if hover is not None and hover < len(ring.segments):
        label = ring_label(ring.current, ring.total, ring.segments[hover])
    svg = render_ring_svg(ring, label=label)
    return Response(content=svg, media_type="image/svg+xml")
