"""Journal logs for series, episodes and chapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from animelog.db.time import as_utc, utcnow
from animelog.models import (
    Anime,
    AnimeEpisode,
    AnimeEpisodeLog,
    AnimeSeriesLog,
    Manga,
    MangaChapter,
    MangaChapterLog,
    MangaSeriesLog,
    Post,
    Profile,
    Review,
    UserMark,
)
from animelog.models.mark import MARK_LIKED, MARK_RATING, MARK_WATCHED, MARK_WATCHLIST
from animelog.models.profile import VISIBILITY_PUBLIC
from animelog.schemas.common import MediaScope
from animelog.services.media import display_title

logger = logging.getLogger(__name__)

LOG_MODELS: dict[str, type] = {
    "anime_series": AnimeSeriesLog,
    "anime_episode": AnimeEpisodeLog,
    "manga_series": MangaSeriesLog,
    "manga_chapter": MangaChapterLog,
}

_EDITABLE_FIELDS = ("rating", "liked", "review_id", "note", "visibility", "contains_spoilers")


class LogNotFoundError(LookupError):
    """Raised when a log id does not exist for the given kind."""


class NotLogOwnerError(PermissionError):
    """Raised when someone other than the author edits a log."""


@dataclass
class JournalEntry:
    kind: str
    log: Any
    title: str | None = None
    slug: str | None = None
    unit_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        log = self.log
        return {
            "id": log.id,
            "kind": self.kind,
            "user_id": log.user_id,
            "anime_id": getattr(log, "anime_id", None),
            "anime_episode_id": getattr(log, "anime_episode_id", None),
            "manga_id": getattr(log, "manga_id", None),
            "manga_chapter_id": getattr(log, "manga_chapter_id", None),
            "title": self.title,
            "slug": self.slug,
            "unit_number": self.unit_number,
            "rating": log.rating,
            "liked": log.liked,
            "is_rewatch": log.is_rewatch,
            "note": log.note,
            "contains_spoilers": log.contains_spoilers,
            "visibility": log.visibility,
            "review_id": log.review_id,
            "logged_at": as_utc(log.logged_at),
        }


def _log_model(kind: str) -> type:
    try:
        return LOG_MODELS[kind]
    except KeyError:
        raise ValueError(f"Unknown log kind: {kind!r}") from None


def resolve_visibility(user: Profile, requested: str | None) -> str:
    """Explicit choice, else the author's profile default, else public."""
    return requested or user.default_visibility or VISIBILITY_PUBLIC


def create_log(db: Session, kind: str, user: Profile, **fields: Any) -> Any:
    model = _log_model(kind)
    _check_unit_belongs(db, kind, fields)

    visibility = resolve_visibility(user, fields.pop("visibility", None))
    logged_at = fields.pop("logged_at", None) or utcnow()
    entry = model(user_id=user.id, visibility=visibility, logged_at=logged_at, **fields)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("%s log %s written by %s", kind, entry.id, user.id)
    return entry


def _check_unit_belongs(db: Session, kind: str, fields: dict[str, Any]) -> None:
    if kind == "anime_episode":
        episode = db.get(AnimeEpisode, fields.get("anime_episode_id"))
        if episode is None or episode.anime_id != fields.get("anime_id"):
            raise ValueError("Episode does not belong to this anime")
    elif kind == "manga_chapter":
        chapter = db.get(MangaChapter, fields.get("manga_chapter_id"))
        if chapter is None or chapter.manga_id != fields.get("manga_id"):
            raise ValueError("Chapter does not belong to this manga")


def get_owned_log(db: Session, kind: str, log_id: str, user_id: str) -> Any:
    entry = db.get(_log_model(kind), log_id)
    if entry is None:
        raise LogNotFoundError(log_id)
    if entry.user_id != user_id:
        raise NotLogOwnerError(log_id)
    return entry


def update_log(db: Session, kind: str, log_id: str, user_id: str, changes: dict[str, Any]) -> Any:
    """Apply journal edits (rating, liked flag, linked review, note...)."""
    entry = get_owned_log(db, kind, log_id, user_id)
    for name, value in changes.items():
        if name not in _EDITABLE_FIELDS:
            raise ValueError(f"Field {name!r} cannot be edited")
        setattr(entry, name, value)
    db.commit()
    db.refresh(entry)
    return entry


def delete_log(db: Session, kind: str, log_id: str, user_id: str) -> None:
    entry = get_owned_log(db, kind, log_id, user_id)
    db.delete(entry)
    db.commit()


def _describe(db: Session, kind: str, entry: Any) -> JournalEntry:
    if kind.startswith("anime"):
        media = db.get(Anime, entry.anime_id)
        unit = db.get(AnimeEpisode, entry.anime_episode_id) if kind == "anime_episode" else None
        number = unit.episode_number if unit else None
    else:
        media = db.get(Manga, entry.manga_id)
        unit = db.get(MangaChapter, entry.manga_chapter_id) if kind == "manga_chapter" else None
        number = unit.chapter_number if unit else None
    return JournalEntry(
        kind=kind,
        log=entry,
        title=display_title(media) if media else None,
        slug=media.slug if media else None,
        unit_number=number,
    )


def list_journal(
    db: Session,
    user_id: str,
    *,
    viewer_id: str | None = None,
    limit: int = 50,
    before: datetime | None = None,
) -> list[JournalEntry]:
    """All four log tables merged, newest first.

    Someone else's journal only shows public entries.
    """
    entries: list[tuple[str, Any]] = []
    for kind, model in LOG_MODELS.items():
        query = db.query(model).filter(model.user_id == user_id)
        if viewer_id != user_id:
            query = query.filter(model.visibility == VISIBILITY_PUBLIC)
        if before is not None:
            query = query.filter(model.logged_at < before)
        rows = query.order_by(model.logged_at.desc()).limit(limit).all()
        entries.extend((kind, row) for row in rows)

    entries.sort(key=lambda pair: (as_utc(pair[1].logged_at), pair[1].id), reverse=True)
    return [_describe(db, kind, entry) for kind, entry in entries[:limit]]


# A mark written within this window of a log of the same target is the
# side effect of submitting that log and is folded into it.
MARK_FOLD_WINDOW = timedelta(minutes=2)

_SCOPE_COLUMNS = ("anime_id", "anime_episode_id", "manga_id", "manga_chapter_id")


@dataclass
class ActivityItem:
    """One row of an activity timeline: a log, a standalone review or a mark."""

    id: str
    kind: str
    type: str
    domain: str
    scope: str
    title: str
    logged_at: datetime
    media_id: str | None = None
    slug: str | None = None
    unit_id: str | None = None
    unit_number: int | None = None
    sub_label: str | None = None
    actions: list[str] = field(default_factory=list)
    rating: int | None = None
    stars: int | None = None
    note: str | None = None
    content: str | None = None
    contains_spoilers: bool = False
    visibility: str | None = None
    review_id: str | None = None
    post_id: str | None = None


def _target(row: Any) -> tuple[str, str, str | None]:
    """(domain, scope, id of the series or unit) of a log, review or mark."""
    if getattr(row, "anime_episode_id", None):
        return "anime", "episode", row.anime_episode_id
    if getattr(row, "anime_id", None):
        return "anime", "series", row.anime_id
    if getattr(row, "manga_chapter_id", None):
        return "manga", "chapter", row.manga_chapter_id
    return "manga", "series", getattr(row, "manga_id", None)


def _log_kinds_for(scope: MediaScope | None) -> list[str]:
    if scope is None:
        return list(LOG_MODELS)
    if scope.anime_episode_id:
        return ["anime_episode"]
    if scope.anime_id:
        return ["anime_series"]
    if scope.manga_chapter_id:
        return ["manga_chapter"]
    if scope.manga_id:
        return ["manga_series"]
    return []


def _scoped(query: Any, model: type, scope: MediaScope | None) -> Any:
    """Exact scope match: series scopes only match rows without a unit id."""
    if scope is None:
        return query
    for name in _SCOPE_COLUMNS:
        column = getattr(model, name, None)
        if column is None:
            continue
        value = getattr(scope, name)
        query = query.filter(column.is_(None) if value is None else column == value)
    return query


class _Labels:
    """Memoised title/slug/unit lookups for one timeline build."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self._media: dict[tuple[str, str], Any] = {}
        self._units: dict[tuple[str, str], Any] = {}

    def media(self, domain: str, media_id: str | None) -> Any:
        if media_id is None:
            return None
        key = (domain, media_id)
        if key not in self._media:
            self._media[key] = self.db.get(Anime if domain == "anime" else Manga, media_id)
        return self._media[key]

    def unit(self, domain: str, unit_id: str) -> Any:
        key = (domain, unit_id)
        if key not in self._units:
            self._units[key] = self.db.get(AnimeEpisode if domain == "anime" else MangaChapter, unit_id)
        return self._units[key]

    def fill(self, item: ActivityItem, row: Any) -> ActivityItem:
        media_id = getattr(row, f"{item.domain}_id", None)
        media = self.media(item.domain, media_id)
        item.media_id = media_id
        item.title = display_title(media) if media else f"Unknown {item.domain}"
        item.slug = media.slug if media else None
        if item.scope != "series":
            item.unit_id = _target(row)[2]
            unit = self.unit(item.domain, item.unit_id)
            if item.domain == "anime":
                item.unit_number = unit.episode_number if unit else None
                item.sub_label = f"Episode {item.unit_number}" if unit else "Episode"
            else:
                item.unit_number = unit.chapter_number if unit else None
                item.sub_label = f"Chapter {item.unit_number}" if unit else "Chapter"
        return item


def _log_actions(log: Any) -> list[str]:
    actions = [MARK_WATCHED]
    if log.liked:
        actions.append(MARK_LIKED)
    if log.rating is not None:
        actions.append("rated")
    if log.review_id:
        actions.append("reviewed")
    return actions


def _folded(mark: UserMark, logs_by_target: dict[tuple, list[Any]]) -> bool:
    if mark.kind == MARK_WATCHLIST:
        return False
    created = as_utc(mark.created_at)
    for log in logs_by_target.get(_target(mark), ()):
        if abs(created - as_utc(log.logged_at)) > MARK_FOLD_WINDOW:
            continue
        if mark.kind == MARK_WATCHED:
            return True
        if mark.kind == MARK_LIKED and log.liked:
            return True
        if mark.kind == MARK_RATING and log.rating is not None:
            return True
    return False


def list_activity(
    db: Session,
    user_id: str,
    scope: MediaScope | None = None,
    *,
    viewer_id: str | None = None,
    before: datetime | None = None,
    limit: int = 50,
) -> list[ActivityItem]:
    """Logs, standalone reviews and marks of one user, newest first.

    ``scope`` narrows the timeline to one series or unit (matched exactly,
    so a series timeline leaves out episode rows); None means everything.
    Reviews linked from a log are shown through that log, and marks that
    merely echo a log submission are dropped. Strangers only see public
    logs and reviews.
    """
    if scope is not None and scope.is_empty:
        return []
    owner_view = viewer_id == user_id

    logs: list[tuple[str, Any]] = []
    for kind in _log_kinds_for(scope):
        model = LOG_MODELS[kind]
        query = _scoped(db.query(model).filter(model.user_id == user_id), model, scope)
        if not owner_view:
            query = query.filter(model.visibility == VISIBILITY_PUBLIC)
        if before is not None:
            query = query.filter(model.logged_at < before)
        logs.extend((kind, row) for row in query.order_by(model.logged_at.desc()).limit(limit).all())

    review_query = _scoped(db.query(Review).filter(Review.user_id == user_id), Review, scope)
    if not owner_view:
        review_query = review_query.filter(Review.visibility == VISIBILITY_PUBLIC)
    if before is not None:
        review_query = review_query.filter(Review.created_at < before)
    reviews = review_query.order_by(Review.created_at.desc()).limit(limit).all()

    mark_query = _scoped(db.query(UserMark).filter(UserMark.user_id == user_id), UserMark, scope)
    if before is not None:
        mark_query = mark_query.filter(UserMark.created_at < before)
    marks = mark_query.order_by(UserMark.created_at.desc()).limit(limit).all()

    attached = {log.review_id for _, log in logs if log.review_id}
    review_ids = attached | {review.id for review in reviews}
    post_for_review: dict[str, str] = {}
    if review_ids:
        rows = (
            db.query(Post.review_id, Post.id)
            .filter(Post.user_id == user_id, Post.review_id.in_(sorted(review_ids)))
            .all()
        )
        post_for_review = {review_id: post_id for review_id, post_id in rows}

    logs_by_target: dict[tuple, list[Any]] = {}
    for _, log in logs:
        logs_by_target.setdefault(_target(log), []).append(log)

    labels = _Labels(db)
    items: list[ActivityItem] = []
    for kind, log in logs:
        domain, unit_scope, _ = _target(log)
        item = ActivityItem(
            id=log.id,
            kind="log",
            type=kind,
            domain=domain,
            scope=unit_scope,
            title="",
            logged_at=as_utc(log.logged_at),
            actions=_log_actions(log),
            rating=log.rating,
            note=log.note,
            contains_spoilers=log.contains_spoilers,
            visibility=log.visibility,
            review_id=log.review_id,
            post_id=post_for_review.get(log.review_id) if log.review_id else None,
        )
        items.append(labels.fill(item, log))

    for review in reviews:
        if review.id in attached:
            continue
        domain, unit_scope, _ = _target(review)
        item = ActivityItem(
            id=review.id,
            kind="review",
            type=f"{domain}_{unit_scope}_review",
            domain=domain,
            scope=unit_scope,
            title="",
            logged_at=as_utc(review.created_at),
            rating=review.rating,
            content=review.content,
            contains_spoilers=review.contains_spoilers,
            visibility=review.visibility,
            review_id=review.id,
            post_id=post_for_review.get(review.id),
        )
        items.append(labels.fill(item, review))

    for mark in marks:
        if _folded(mark, logs_by_target):
            continue
        domain, unit_scope, _ = _target(mark)
        item = ActivityItem(
            id=mark.id,
            kind="mark",
            type=mark.kind,
            domain=domain,
            scope=unit_scope,
            title="",
            logged_at=as_utc(mark.created_at),
            stars=mark.stars if mark.kind == MARK_RATING else None,
        )
        items.append(labels.fill(item, mark))

    items.sort(key=lambda item: (item.logged_at, item.id), reverse=True)
    return items[:limit]
