"""Per-user completion tracking.

Progress is the number of distinct episodes (chapters) a user has logged
against the number the catalogue knows about. A series without any units in
the catalogue counts as complete once it is logged at all, so it reports
``1/1`` rather than ``0/0``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from sqlalchemy import func
from sqlalchemy.orm import Session

from animelog.db.time import as_utc
from animelog.models import (
    Anime,
    AnimeEpisode,
    AnimeEpisodeLog,
    AnimeSeriesLog,
    Manga,
    MangaChapter,
    MangaChapterLog,
    MangaSeriesLog,
    Review,
    UserMark,
)
from animelog.models.mark import MARK_RATING
from animelog.services.media import display_title
from animelog.utils.completion_sort import (
    CompletionCursor,
    completion_sort_key,
    cursor_for,
    is_after_cursor,
)
from animelog.utils.progress_filters import PERCENT_BUCKETS, matches_progress_filter, pct_from


MediaKind = Literal["anime", "manga"]
KindFilter = Literal["all", "anime", "manga"]
MEDIA_KINDS: tuple[str, ...] = ("anime", "manga")


@dataclass(frozen=True)
class _KindTables:
    media: type
    unit: type
    unit_parent: object
    series_log: type
    unit_log: type
    log_parent: object
    log_unit: object
    series_log_parent: object
    review_parent: object
    review_unit: object
    mark_parent: object
    mark_unit: object


_TABLES: dict[str, _KindTables] = {
    "anime": _KindTables(
        media=Anime,
        unit=AnimeEpisode,
        unit_parent=AnimeEpisode.anime_id,
        series_log=AnimeSeriesLog,
        unit_log=AnimeEpisodeLog,
        log_parent=AnimeEpisodeLog.anime_id,
        log_unit=AnimeEpisodeLog.anime_episode_id,
        series_log_parent=AnimeSeriesLog.anime_id,
        review_parent=Review.anime_id,
        review_unit=Review.anime_episode_id,
        mark_parent=UserMark.anime_id,
        mark_unit=UserMark.anime_episode_id,
    ),
    "manga": _KindTables(
        media=Manga,
        unit=MangaChapter,
        unit_parent=MangaChapter.manga_id,
        series_log=MangaSeriesLog,
        unit_log=MangaChapterLog,
        log_parent=MangaChapterLog.manga_id,
        log_unit=MangaChapterLog.manga_chapter_id,
        series_log_parent=MangaSeriesLog.manga_id,
        review_parent=Review.manga_id,
        review_unit=Review.manga_chapter_id,
        mark_parent=UserMark.manga_id,
        mark_unit=UserMark.manga_chapter_id,
    ),
}


def _tables(kind: str) -> _KindTables:
    try:
        return _TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown media kind: {kind!r}") from None


@dataclass
class CompletionRow:
    """Denormalised per-user summary of one anime or manga."""

    kind: str
    id: str
    title: str
    slug: str
    image_url: str | None
    last_logged_at: datetime | None
    progress_current: int
    progress_total: int
    progress_pct: int | None
    reviewed_count: int = 0
    rated_count: int = 0


@dataclass
class CompletionListResult:
    items: list[CompletionRow]
    next_cursor: CompletionCursor | None = None


def _adjust_for_empty_catalogue(current: int, total: int) -> tuple[int, int]:
    if total == 0:
        return 1, 1
    return current, total


def _grouped_counts(query) -> dict[str, int]:
    return {key: int(count) for key, count in query.all()}


def _logged_unit_counts(db: Session, kind: str, user_id: str, media_ids: list[str]) -> dict[str, int]:
    t = _tables(kind)
    return _grouped_counts(
        db.query(t.log_parent, func.count(func.distinct(t.log_unit)))
        .filter(t.unit_log.user_id == user_id, t.log_parent.in_(media_ids))
        .group_by(t.log_parent)
    )


def _unit_totals(db: Session, kind: str, media_ids: list[str]) -> dict[str, int]:
    t = _tables(kind)
    return _grouped_counts(
        db.query(t.unit_parent, func.count())
        .filter(t.unit_parent.in_(media_ids))
        .group_by(t.unit_parent)
    )


def _unit_review_counts(db: Session, kind: str, user_id: str, media_ids: list[str]) -> dict[str, int]:
    t = _tables(kind)
    return _grouped_counts(
        db.query(t.review_parent, func.count())
        .filter(
            Review.user_id == user_id,
            t.review_parent.in_(media_ids),
            t.review_unit.is_not(None),
        )
        .group_by(t.review_parent)
    )


def _unit_rating_counts(db: Session, kind: str, user_id: str, media_ids: list[str]) -> dict[str, int]:
    t = _tables(kind)
    return _grouped_counts(
        db.query(t.mark_parent, func.count())
        .filter(
            UserMark.user_id == user_id,
            UserMark.kind == MARK_RATING,
            t.mark_parent.in_(media_ids),
            t.mark_unit.is_not(None),
        )
        .group_by(t.mark_parent)
    )


def compute_progress(db: Session, user_id: str, kind: str, media_id: str) -> tuple[int, int]:
    """Return ``(current, total)`` units for one series."""
    current = _logged_unit_counts(db, kind, user_id, [media_id]).get(media_id, 0)
    total = _unit_totals(db, kind, [media_id]).get(media_id, 0)
    return _adjust_for_empty_catalogue(current, total)


def compute_progress_batch(
    db: Session,
    user_id: str,
    items: Iterable[tuple[str, str]],
) -> dict[str, dict[str, int | None]]:
    """Progress for many ``(kind, id)`` pairs keyed as ``"kind:id"``.

    Pairs with an unknown kind are skipped.
    """
    wanted: dict[str, list[str]] = {kind: [] for kind in MEDIA_KINDS}
    for kind, media_id in items:
        if kind in wanted and media_id and media_id not in wanted[kind]:
            wanted[kind].append(media_id)

    results: dict[str, dict[str, int | None]] = {}
    for kind, media_ids in wanted.items():
        if not media_ids:
            continue
        logged = _logged_unit_counts(db, kind, user_id, media_ids)
        totals = _unit_totals(db, kind, media_ids)
        for media_id in media_ids:
            current, total = _adjust_for_empty_catalogue(
                logged.get(media_id, 0), totals.get(media_id, 0)
            )
            results[f"{kind}:{media_id}"] = {
                "current": current,
                "total": total,
                "pct": pct_from(current, total),
            }
    return results


def compute_engagement(db: Session, user_id: str, kind: str, media_id: str) -> tuple[int, int]:
    """Return ``(reviewed, rated)`` counts of unit-scoped reviews and ratings."""
    total = _unit_totals(db, kind, [media_id]).get(media_id, 0)
    if total == 0:
        return 1, 1
    reviewed = _unit_review_counts(db, kind, user_id, [media_id]).get(media_id, 0)
    rated = _unit_rating_counts(db, kind, user_id, [media_id]).get(media_id, 0)
    return reviewed, rated


def _last_logged(db: Session, kind: str, user_id: str) -> dict[str, datetime | None]:
    t = _tables(kind)
    latest: dict[str, datetime | None] = {}
    series = (
        db.query(t.series_log_parent, func.max(t.series_log.logged_at))
        .filter(t.series_log.user_id == user_id)
        .group_by(t.series_log_parent)
        .all()
    )
    units = (
        db.query(t.log_parent, func.max(t.unit_log.logged_at))
        .filter(t.unit_log.user_id == user_id)
        .group_by(t.log_parent)
        .all()
    )
    for media_id, logged_at in [*series, *units]:
        logged_at = as_utc(logged_at)
        current = latest.get(media_id)
        if media_id not in latest or (logged_at is not None and (current is None or logged_at > current)):
            latest[media_id] = logged_at
    return latest


def _rows_for_kind(db: Session, kind: str, user_id: str, search: str | None) -> list[CompletionRow]:
    latest = _last_logged(db, kind, user_id)
    if not latest:
        return []

    t = _tables(kind)
    media_ids = list(latest)
    media = {row.id: row for row in db.query(t.media).filter(t.media.id.in_(media_ids)).all()}
    logged = _logged_unit_counts(db, kind, user_id, media_ids)
    totals = _unit_totals(db, kind, media_ids)
    reviewed = _unit_review_counts(db, kind, user_id, media_ids)
    rated = _unit_rating_counts(db, kind, user_id, media_ids)

    needle = (search or "").strip().lower()
    rows: list[CompletionRow] = []
    for media_id, last_logged_at in latest.items():
        entity = media.get(media_id)
        if entity is None:
            continue
        title = display_title(entity)
        if needle and not any(
            needle in (candidate or "").lower()
            for candidate in (title, entity.title, entity.title_english, entity.title_native)
        ):
            continue

        total_raw = totals.get(media_id, 0)
        current, total = _adjust_for_empty_catalogue(logged.get(media_id, 0), total_raw)
        if total_raw == 0:
            review_count, rated_count = 1, 1
        else:
            review_count, rated_count = reviewed.get(media_id, 0), rated.get(media_id, 0)
        rows.append(
            CompletionRow(
                kind=kind,
                id=media_id,
                title=title,
                slug=entity.slug,
                image_url=entity.image_url,
                last_logged_at=last_logged_at,
                progress_current=current,
                progress_total=total,
                progress_pct=pct_from(current, total),
                reviewed_count=review_count,
                rated_count=rated_count,
            )
        )
    return rows


def completion_rows(
    db: Session,
    user_id: str,
    kind: KindFilter = "all",
    search: str | None = None,
) -> list[CompletionRow]:
    if kind not in ("all", *MEDIA_KINDS):
        raise ValueError(f"Unknown media kind: {kind!r}")
    kinds = MEDIA_KINDS if kind == "all" else (kind,)
    rows: list[CompletionRow] = []
    for each in kinds:
        rows.extend(_rows_for_kind(db, each, user_id, search))
    return rows


def _in_range(pct: int | None, min_pct: int | None, max_pct: int | None) -> bool:
    if min_pct is None and max_pct is None:
        return True
    if pct is None:
        return False
    if min_pct is not None and pct < min_pct:
        return False
    if max_pct is not None and pct > max_pct:
        return False
    return True


def list_completions(
    db: Session,
    user_id: str,
    *,
    limit: int = 60,
    cursor: CompletionCursor | None = None,
    min_pct: int | None = None,
    max_pct: int | None = None,
    kind: KindFilter = "all",
    sort: str = "last_logged",
    search: str | None = None,
    bucket: str = "all",
) -> CompletionListResult:
    """One keyset page of completion rows.

    ``bucket`` is a progress filter option and combines with the explicit
    ``min_pct``/``max_pct`` range. ``next_cursor`` is set only when more rows
    follow the page.
    """
    rows = [
        row
        for row in completion_rows(db, user_id, kind=kind, search=search)
        if _in_range(row.progress_pct, min_pct, max_pct)
        and matches_progress_filter(row.progress_pct, bucket)
    ]
    rows.sort(key=lambda row: completion_sort_key(row, sort))
    remaining = [row for row in rows if is_after_cursor(row, cursor, sort)]
    page = remaining[: max(0, limit)]
    next_cursor = cursor_for(page[-1]) if page and len(remaining) > len(page) else None
    return CompletionListResult(items=page, next_cursor=next_cursor)


def bucket_counts(
    db: Session,
    user_id: str,
    kind: KindFilter = "all",
    search: str | None = None,
) -> list[dict[str, int | str]]:
    """Counts per progress bucket, led by an ``all`` row and ending with ``unknown``."""
    rows = completion_rows(db, user_id, kind=kind, search=search)
    counts: list[dict[str, int | str]] = []
    for bucket in ("all", *PERCENT_BUCKETS, "unknown"):
        matching = [row for row in rows if matches_progress_filter(row.progress_pct, bucket)]
        anime_count = sum(1 for row in matching if row.kind == "anime")
        manga_count = sum(1 for row in matching if row.kind == "manga")
        counts.append(
            {
                "bucket": bucket,
                "anime_count": anime_count,
                "manga_count": manga_count,
                "total_count": anime_count + manga_count,
            }
        )
    return counts
