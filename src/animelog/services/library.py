"""Profile shelves: the library of finished series and the watchlist."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from animelog.db.time import as_utc
from animelog.models import Anime, Manga, Review, UserMark
from animelog.models.mark import MARK_LIKED, MARK_RATING, MARK_WATCHED, MARK_WATCHLIST


@dataclass
class ShelfItem:
    kind: str
    id: str
    slug: str | None
    title: str
    image_url: str | None = None
    stars: int | None = None
    liked: bool = False
    reviewed: bool = False
    added_at: datetime | None = None


def _shelf_title(media: Anime | Manga) -> str:
    return (media.title_english or media.title or "").strip() or "Untitled"


def _series_marks(db: Session, user_id: str, kinds: tuple[str, ...]) -> list[UserMark]:
    """Marks on whole series only; episode and chapter marks never reach a shelf."""
    return (
        db.query(UserMark)
        .filter(
            UserMark.user_id == user_id,
            UserMark.kind.in_(kinds),
            UserMark.anime_episode_id.is_(None),
            UserMark.manga_chapter_id.is_(None),
        )
        .all()
    )


def _shelf(db: Session, user_id: str, shelf_kind: str) -> list[ShelfItem]:
    marks = _series_marks(db, user_id, (shelf_kind, MARK_LIKED, MARK_RATING))

    added: dict[tuple[str, str], datetime] = {}
    liked: set[tuple[str, str]] = set()
    stars: dict[tuple[str, str], int] = {}
    for mark in marks:
        key = ("anime", mark.anime_id) if mark.anime_id else ("manga", mark.manga_id)
        if mark.kind == shelf_kind:
            added[key] = as_utc(mark.created_at)
        elif mark.kind == MARK_LIKED:
            liked.add(key)
        elif mark.stars is not None:
            stars[key] = mark.stars

    anime_ids = [media_id for kind, media_id in added if kind == "anime"]
    manga_ids = [media_id for kind, media_id in added if kind == "manga"]
    media: dict[tuple[str, str], Anime | Manga] = {}
    if anime_ids:
        media.update((("anime", row.id), row) for row in db.query(Anime).filter(Anime.id.in_(anime_ids)))
    if manga_ids:
        media.update((("manga", row.id), row) for row in db.query(Manga).filter(Manga.id.in_(manga_ids)))

    reviewed: set[tuple[str, str]] = set()
    for anime_id, manga_id in db.query(Review.anime_id, Review.manga_id).filter(Review.user_id == user_id):
        reviewed.add(("anime", anime_id) if anime_id else ("manga", manga_id))

    items = []
    for key, added_at in added.items():
        row = media.get(key)
        if row is None:
            continue
        items.append(
            ShelfItem(
                kind=key[0],
                id=row.id,
                slug=row.slug,
                title=_shelf_title(row),
                image_url=row.image_url,
                stars=stars.get(key),
                liked=key in liked,
                reviewed=key in reviewed,
                added_at=added_at,
            )
        )
    return items


def library(db: Session, user_id: str) -> list[ShelfItem]:
    """Watched anime and manga, highest rated first, then by title."""
    items = _shelf(db, user_id, MARK_WATCHED)
    items.sort(key=lambda item: (-(item.stars if item.stars is not None else -1), item.title.casefold()))
    return items


def watchlist(db: Session, user_id: str) -> list[ShelfItem]:
    """Watchlisted series, most recently added first."""
    items = _shelf(db, user_id, MARK_WATCHLIST)
    items.sort(key=lambda item: item.title.casefold())
    items.sort(key=lambda item: item.added_at, reverse=True)
    return items
