"""Catalogue lookups for anime and manga pages."""

from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.orm import Session

from animelog.models import Anime, AnimeEpisode, Manga, MangaChapter


def _search_filter(model: type[Anime] | type[Manga], search: str):
    pattern = f"%{search.strip()}%"
    return or_(
        model.title.ilike(pattern),
        model.title_english.ilike(pattern),
        model.title_native.ilike(pattern),
        model.slug.ilike(pattern),
    )


def get_anime_by_slug(db: Session, slug: str) -> Anime | None:
    return db.query(Anime).filter(Anime.slug == slug.strip().lower()).first()


def get_manga_by_slug(db: Session, slug: str) -> Manga | None:
    return db.query(Manga).filter(Manga.slug == slug.strip().lower()).first()


def list_anime(db: Session, search: str | None = None, limit: int = 50, offset: int = 0) -> list[Anime]:
    query = db.query(Anime)
    if search and search.strip():
        query = query.filter(_search_filter(Anime, search))
    return query.order_by(Anime.title.asc(), Anime.id.asc()).offset(offset).limit(limit).all()


def list_manga(db: Session, search: str | None = None, limit: int = 50, offset: int = 0) -> list[Manga]:
    query = db.query(Manga)
    if search and search.strip():
        query = query.filter(_search_filter(Manga, search))
    return query.order_by(Manga.title.asc(), Manga.id.asc()).offset(offset).limit(limit).all()


def list_anime_episodes(db: Session, anime: Anime) -> list[AnimeEpisode]:
    return (
        db.query(AnimeEpisode)
        .filter(AnimeEpisode.anime_id == anime.id)
        .order_by(AnimeEpisode.episode_number.asc())
        .all()
    )


def list_manga_chapters(db: Session, manga: Manga) -> list[MangaChapter]:
    return (
        db.query(MangaChapter)
        .filter(MangaChapter.manga_id == manga.id)
        .order_by(MangaChapter.chapter_number.asc())
        .all()
    )


def get_anime_episode(db: Session, anime: Anime, episode_number: int) -> AnimeEpisode | None:
    return (
        db.query(AnimeEpisode)
        .filter(
            AnimeEpisode.anime_id == anime.id,
            AnimeEpisode.episode_number == episode_number,
        )
        .first()
    )


def get_manga_chapter(db: Session, manga: Manga, chapter_number: int) -> MangaChapter | None:
    return (
        db.query(MangaChapter)
        .filter(
            MangaChapter.manga_id == manga.id,
            MangaChapter.chapter_number == chapter_number,
        )
        .first()
    )


def display_title(media: Anime | Manga) -> str:
    """Preferred title for lists: explicit preference, English, then romaji."""
    return media.title_preferred or media.title_english or media.title
