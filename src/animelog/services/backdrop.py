"""Backdrop selection for detail pages.

Every render picks a random image among the best-ranked backdrops so repeat
visits do not always show the same artwork.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import Any, Literal

from sqlalchemy.orm import Session

from animelog.core.settings import settings
from animelog.models import AnimeArtwork, MangaArtwork
from animelog.models.artwork import BACKDROP_KINDS
from animelog.utils.artwork import (
    artwork_rank_key,
    normalize_backdrop_url,
    normalize_thumb_url,
    usable_url,
)

logger = logging.getLogger(__name__)


def pick_backdrop(
    rows: Sequence[Any],
    pool_size: int | None = None,
    rng: random.Random | None = None,
) -> str | None:
    """Choose uniformly among the top ``pool_size`` ranked rows."""
    pool_size = pool_size or settings.backdrop_pool_size
    candidates = sorted((row for row in rows if usable_url(row)), key=artwork_rank_key)
    pool = candidates[: max(1, pool_size)]
    if not pool:
        return None
    chosen = (rng or random).choice(pool)
    return normalize_backdrop_url(usable_url(chosen))


def best_thumbnail(rows: Sequence[Any]) -> str | None:
    """Deterministic pick of the top-ranked image, sized as a thumbnail."""
    candidates = sorted((row for row in rows if usable_url(row)), key=artwork_rank_key)
    if not candidates:
        return None
    return normalize_thumb_url(usable_url(candidates[0]))


def backdrop_rows(
    db: Session,
    kind: Literal["anime", "manga"],
    entity_id: str,
    limit: int | None = None,
) -> list[AnimeArtwork] | list[MangaArtwork]:
    limit = limit or settings.backdrop_candidate_limit
    if kind == "anime":
        return (
            db.query(AnimeArtwork)
            .filter(AnimeArtwork.anime_id == entity_id, AnimeArtwork.kind.in_(BACKDROP_KINDS))
            .order_by(AnimeArtwork.is_primary.desc(), AnimeArtwork.vote.desc(), AnimeArtwork.width.desc())
            .limit(limit)
            .all()
        )
    if kind == "manga":
        return (
            db.query(MangaArtwork)
            .filter(MangaArtwork.manga_id == entity_id, MangaArtwork.kind.in_(BACKDROP_KINDS))
            .order_by(MangaArtwork.is_primary.desc(), MangaArtwork.vote.desc(), MangaArtwork.width.desc())
            .limit(limit)
            .all()
        )
    raise ValueError(f"Unknown media kind: {kind!r}")


def random_backdrop_for(
    db: Session,
    kind: Literal["anime", "manga"],
    entity_id: str,
    rng: random.Random | None = None,
) -> str | None:
    rows = backdrop_rows(db, kind, entity_id)
    url = pick_backdrop(rows, rng=rng)
    if url is None:
        logger.debug("no usable backdrop for %s %s", kind, entity_id)
    return url


def episode_thumbnail(db: Session, anime_id: str, anime_episode_id: str) -> str | None:
    rows = (
        db.query(AnimeArtwork)
        .filter(
            AnimeArtwork.anime_id == anime_id,
            AnimeArtwork.anime_episode_id == anime_episode_id,
        )
        .limit(settings.backdrop_candidate_limit)
        .all()
    )
    return best_thumbnail(rows)


def chapter_thumbnail(db: Session, manga_id: str) -> str | None:
    """Manga artwork has no per-chapter rows; chapters share the best cover."""
    rows = (
        db.query(MangaArtwork)
        .filter(MangaArtwork.manga_id == manga_id, MangaArtwork.kind.notin_(BACKDROP_KINDS))
        .limit(settings.backdrop_candidate_limit)
        .all()
    )
    return best_thumbnail(rows)
