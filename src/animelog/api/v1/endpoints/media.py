"""Catalogue endpoints for anime and manga pages."""

from fastapi import APIRouter, HTTPException, Query, status

from animelog.api.v1.dependencies import SessionDep
from animelog.models import Anime, Manga
from animelog.schemas.media import (
    AnimeDetail,
    AnimeSummary,
    ChapterDetail,
    ChapterResponse,
    EpisodeDetail,
    EpisodeResponse,
    MangaDetail,
    MangaSummary,
)
from animelog.services import media as media_service
from animelog.services.backdrop import (
    chapter_thumbnail,
    episode_thumbnail,
    random_backdrop_for,
)

router = APIRouter(tags=["media"])


def _anime_or_404(db: SessionDep, slug: str) -> Anime:
    anime = media_service.get_anime_by_slug(db, slug)
    if anime is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Anime not found")
    return anime


def _manga_or_404(db: SessionDep, slug: str) -> Manga:
    manga = media_service.get_manga_by_slug(db, slug)
    if manga is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Manga not found")
    return manga


@router.get("/anime", response_model=list[AnimeSummary])
async def list_anime(
    db: SessionDep,
    search: str | None = Query(None, max_length=200),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[AnimeSummary]:
    rows = media_service.list_anime(db, search=search, limit=limit, offset=offset)
    return [AnimeSummary.model_validate(row) for row in rows]


@router.get("/anime/{slug}", response_model=AnimeDetail)
async def get_anime(slug: str, db: SessionDep) -> AnimeDetail:
    """Anime page data with a freshly picked backdrop."""
    anime = _anime_or_404(db, slug)
    detail = AnimeDetail.model_validate(anime)
    detail.backdrop_url = random_backdrop_for(db, "anime", anime.id) or anime.banner_image_url
    return detail


@router.get("/anime/{slug}/episodes", response_model=list[EpisodeResponse])
async def list_anime_episodes(slug: str, db: SessionDep) -> list[EpisodeResponse]:
    anime = _anime_or_404(db, slug)
    return [
        EpisodeResponse.model_validate(row)
        for row in media_service.list_anime_episodes(db, anime)
    ]


@router.get("/anime/{slug}/episodes/{episode_number}", response_model=EpisodeDetail)
async def get_anime_episode(slug: str, episode_number: int, db: SessionDep) -> EpisodeDetail:
    anime = _anime_or_404(db, slug)
    episode = media_service.get_anime_episode(db, anime, episode_number)
    if episode is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Episode not found")
    return EpisodeDetail(
        **EpisodeResponse.model_validate(episode).model_dump(),
        anime_slug=anime.slug,
        anime_title=media_service.display_title(anime),
        backdrop_url=random_backdrop_for(db, "anime", anime.id) or anime.banner_image_url,
        thumbnail_url=episode_thumbnail(db, anime.id, episode.id) or anime.image_url,
    )


@router.get("/manga", response_model=list[MangaSummary])
async def list_manga(
    db: SessionDep,
    search: str | None = Query(None, max_length=200),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[MangaSummary]:
    rows = media_service.list_manga(db, search=search, limit=limit, offset=offset)
    return [MangaSummary.model_validate(row) for row in rows]


@router.get("/manga/{slug}", response_model=MangaDetail)
async def get_manga(slug: str, db: SessionDep) -> MangaDetail:
    manga = _manga_or_404(db, slug)
    detail = MangaDetail.model_validate(manga)
    detail.backdrop_url = random_backdrop_for(db, "manga", manga.id) or manga.banner_image_url
    return detail


@router.get("/manga/{slug}/chapters", response_model=list[ChapterResponse])
async def list_manga_chapters(slug: str, db: SessionDep) -> list[ChapterResponse]:
    manga = _manga_or_404(db, slug)
    return [
        ChapterResponse.model_validate(row)
        for row in media_service.list_manga_chapters(db, manga)
    ]


@router.get("/manga/{slug}/chapters/{chapter_number}", response_model=ChapterDetail)
async def get_manga_chapter(slug: str, chapter_number: int, db: SessionDep) -> ChapterDetail:
    manga = _manga_or_404(db, slug)
    chapter = media_service.get_manga_chapter(db, manga, chapter_number)
    if chapter is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found")
    return ChapterDetail(
        **ChapterResponse.model_validate(chapter).model_dump(),
        manga_slug=manga.slug,
        manga_title=media_service.display_title(manga),
        backdrop_url=random_backdrop_for(db, "manga", manga.id) or manga.banner_image_url,
        thumbnail_url=chapter_thumbnail(db, manga.id) or manga.image_url,
    )
