"""Match catalogue anime against TMDB and TheTVDB.

Candidates are scored by title similarity plus year and episode-count
proximity. The best candidate per source is stored in
``anime_external_links``; confident matches also fill the legacy id columns
on ``anime`` when those are still empty.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from animelog.core.settings import settings
from animelog.models import Anime, AnimeExternalLink
from animelog.services.metadata import (
    MetadataDisabledError,
    MetadataError,
    MetadataHit,
    TmdbClient,
    TvdbClient,
    parse_year,
)

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r"[()\[\]:!?,.\-]")
_WHITESPACE_RE = re.compile(r"\s+")

MATCH_METHOD = "auto_search"
EXTERNAL_TYPE_TV = "tv"


class AnimeNotFoundError(LookupError):
    """Raised when the anime to link does not exist."""


class MissingTitleError(ValueError):
    """Raised when neither the row nor the override yields a search title."""


@dataclass(frozen=True)
class LinkQuery:
    title: str
    year: int | None
    episodes: int | None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "year": self.year, "episodes": self.episodes}


@dataclass(frozen=True)
class AutoLinkResult:
    anime_id: str
    query: LinkQuery
    best: dict[str, dict[str, Any] | None]


def normalize_title(title: str) -> str:
    lowered = _PUNCTUATION_RE.sub(" ", title.lower())
    return _WHITESPACE_RE.sub(" ", lowered).strip()


def score_candidate(
    query_title: str,
    query_year: int | None,
    query_episodes: int | None,
    cand_title: str,
    cand_year: int | None,
    cand_episodes: int | None = None,
) -> int:
    """Score a candidate between 0 and 100."""
    qt = normalize_title(query_title)
    ct = normalize_title(cand_title)

    score = 0
    if ct == qt:
        score += 60
    elif ct in qt or qt in ct:
        score += 45
    else:
        overlap = len(set(qt.split(" ")) & set(ct.split(" ")))
        score += min(35, overlap * 6)

    if query_year and cand_year:
        dy = abs(query_year - cand_year)
        if dy == 0:
            score += 25
        elif dy == 1:
            score += 18
        elif dy == 2:
            score += 10
        elif dy <= 5:
            score += 4
        else:
            score -= 10

    if query_episodes and cand_episodes:
        de = abs(query_episodes - cand_episodes)
        if de == 0:
            score += 15
        elif de <= 2:
            score += 10
        elif de <= 5:
            score += 5
        else:
            score -= 10

    return max(0, min(100, score))


def score_to_confidence(score: int) -> int:
    """Map a raw score onto the operational confidence bands.

    90 and above is safe to auto-accept; 75-89 needs a human look.
    """
    if score >= 92:
        return 100
    if score >= 85:
        return 90
    if score >= 75:
        return 80
    if score >= 65:
        return 70
    return 50


def build_query(
    anime: Anime,
    *,
    title_override: str | None = None,
    year_override: int | None = None,
    episodes_override: int | None = None,
) -> LinkQuery:
    title = (
        (title_override or "").strip()
        or anime.title_english
        or anime.title
        or anime.title_native
        or ""
    )
    if not title:
        raise MissingTitleError("Anime has no title to search with")

    if year_override is not None:
        year = year_override
    elif anime.season_year is not None:
        year = anime.season_year
    else:
        year = parse_year(anime.start_date)

    episodes = episodes_override if episodes_override is not None else anime.total_episodes
    return LinkQuery(title=title, year=year, episodes=episodes)


def rank_hits(query: LinkQuery, hits: list[MetadataHit]) -> list[tuple[int, MetadataHit]]:
    """Score hits and order them best first; ties keep provider order."""
    scored = [
        (score_candidate(query.title, query.year, query.episodes, hit.title, hit.year), hit)
        for hit in hits
    ]
    return sorted(scored, key=lambda pair: pair[0], reverse=True)


def upsert_external_link(
    db: Session,
    *,
    anime_id: str,
    source: str,
    hit: MetadataHit,
    score: int,
    confidence: int,
) -> AnimeExternalLink:
    link = (
        db.query(AnimeExternalLink)
        .filter(AnimeExternalLink.anime_id == anime_id, AnimeExternalLink.source == source)
        .first()
    )
    if link is None:
        link = AnimeExternalLink(anime_id=anime_id, source=source)
        db.add(link)

    link.external_id = hit.id
    link.external_type = EXTERNAL_TYPE_TV
    link.title = hit.title
    link.year = hit.year
    link.start_date = hit.first_air_date[:10] if hit.first_air_date and len(hit.first_air_date) >= 10 else None
    link.episodes = None
    link.status = None
    link.confidence = confidence
    link.match_method = MATCH_METHOD
    link.notes = f"score={score}"
    return link


def _legacy_id(external_id: str) -> int | None:
    return int(external_id) if external_id.isdigit() else None


async def _link_source(
    db: Session,
    anime: Anime,
    source: str,
    search: Callable[[str], Awaitable[list[MetadataHit]]],
    query: LinkQuery,
) -> dict[str, Any] | None:
    hits = await search(query.title)
    ranked = rank_hits(query, hits)
    if not ranked:
        return None

    score, best = ranked[0]
    confidence = score_to_confidence(score)
    upsert_external_link(
        db,
        anime_id=anime.id,
        source=source,
        hit=best,
        score=score,
        confidence=confidence,
    )

    legacy_attr = f"{source}_id"
    if getattr(anime, legacy_attr) is None and confidence >= settings.auto_link_backfill_confidence:
        legacy = _legacy_id(best.id)
        if legacy is not None:
            setattr(anime, legacy_attr, legacy)

    db.commit()
    return {
        legacy_attr: best.id,
        "title": best.title,
        "year": best.year,
        "score": score,
        "confidence": confidence,
    }


async def auto_link_anime(
    db: Session,
    anime_id: str,
    *,
    tmdb: TmdbClient,
    tvdb: TvdbClient,
    title_override: str | None = None,
    year_override: int | None = None,
    episodes_override: int | None = None,
) -> AutoLinkResult:
    """Search both providers and persist the best match for each.

    A failing provider is reported as ``{"error": message}`` in its slot of
    ``best``; the other provider is still linked.

    Raises:
        AnimeNotFoundError: If ``anime_id`` does not exist.
        MissingTitleError: If no search title can be derived.
    """
    anime = db.get(Anime, anime_id)
    if anime is None:
        raise AnimeNotFoundError(anime_id)

    query = build_query(
        anime,
        title_override=title_override,
        year_override=year_override,
        episodes_override=episodes_override,
    )

    sources: list[tuple[str, Callable[[str], Awaitable[list[MetadataHit]]]]] = [
        ("tmdb", tmdb.search_tv),
        ("tvdb", tvdb.search_series),
    ]
    best: dict[str, dict[str, Any] | None] = {}
    for source, search in sources:
        try:
            best[source] = await _link_source(db, anime, source, search, query)
        except MetadataDisabledError as exc:
            logger.info("auto-link %s skipped for %s: %s", source, anime_id, exc)
            best[source] = {"error": str(exc)}
        except MetadataError as exc:
            logger.warning("auto-link %s error for %s: %s", source, anime_id, exc)
            best[source] = {"error": str(exc) or f"{source.upper()} search failed"}
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("auto-link %s upsert failed for %s", source, anime_id, exc_info=True)
            best[source] = {"error": f"Failed to store {source} link: {exc.__class__.__name__}"}

    return AutoLinkResult(anime_id=anime.id, query=query, best=best)
