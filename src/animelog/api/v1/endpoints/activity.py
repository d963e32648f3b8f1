"""Activity timelines for media pages and profiles."""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, status

from animelog.api.v1.dependencies import OptionalUserDep, SessionDep
from animelog.models import Anime, Manga, Profile
from animelog.schemas.common import MediaScope
from animelog.schemas.log import ActivityItemResponse
from animelog.services import logs as log_service
from animelog.services import media as media_service
from animelog.utils.slug import canonical_username

router = APIRouter(tags=["activity"])


def _profile_or_404(db: SessionDep, username: str) -> Profile:
    profile = db.query(Profile).filter(Profile.username == canonical_username(username)).first()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


def _subject(db: SessionDep, viewer: Profile | None, username: str | None) -> Profile:
    """Whose timeline: ``username`` when given, else the signed-in viewer."""
    if username:
        return _profile_or_404(db, username)
    if viewer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in to see your activity",
        )
    return viewer


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


def _timeline(
    db: SessionDep,
    subject: Profile,
    viewer: Profile | None,
    scope: MediaScope | None,
    before: datetime | None,
    limit: int,
) -> list[ActivityItemResponse]:
    items = log_service.list_activity(
        db,
        subject.id,
        scope,
        viewer_id=viewer.id if viewer else None,
        before=before,
        limit=limit,
    )
    return [ActivityItemResponse.model_validate(item) for item in items]


@router.get("/anime/{slug}/activity", response_model=list[ActivityItemResponse])
async def anime_activity(
    slug: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    username: str | None = None,
    before: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[ActivityItemResponse]:
    """Series-level logs, reviews and marks on one anime."""
    anime = _anime_or_404(db, slug)
    subject = _subject(db, viewer, username)
    return _timeline(db, subject, viewer, MediaScope(anime_id=anime.id), before, limit)


@router.get(
    "/anime/{slug}/episodes/{episode_number}/activity",
    response_model=list[ActivityItemResponse],
)
async def anime_episode_activity(
    slug: str,
    episode_number: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    username: str | None = None,
    before: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[ActivityItemResponse]:
    anime = _anime_or_404(db, slug)
    episode = media_service.get_anime_episode(db, anime, episode_number)
    if episode is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Episode not found")
    subject = _subject(db, viewer, username)
    scope = MediaScope(anime_id=anime.id, anime_episode_id=episode.id)
    return _timeline(db, subject, viewer, scope, before, limit)


@router.get("/manga/{slug}/activity", response_model=list[ActivityItemResponse])
async def manga_activity(
    slug: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    username: str | None = None,
    before: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[ActivityItemResponse]:
    manga = _manga_or_404(db, slug)
    subject = _subject(db, viewer, username)
    return _timeline(db, subject, viewer, MediaScope(manga_id=manga.id), before, limit)


@router.get(
    "/manga/{slug}/chapters/{chapter_number}/activity",
    response_model=list[ActivityItemResponse],
)
async def manga_chapter_activity(
    slug: str,
    chapter_number: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    username: str | None = None,
    before: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[ActivityItemResponse]:
    manga = _manga_or_404(db, slug)
    chapter = media_service.get_manga_chapter(db, manga, chapter_number)
    if chapter is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found")
    subject = _subject(db, viewer, username)
    scope = MediaScope(manga_id=manga.id, manga_chapter_id=chapter.id)
    return _timeline(db, subject, viewer, scope, before, limit)


@router.get("/profiles/{username}/activity", response_model=list[ActivityItemResponse])
async def profile_activity(
    username: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    before: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[ActivityItemResponse]:
    """Everything a user logged, reviewed or marked, newest first."""
    subject = _profile_or_404(db, username)
    return _timeline(db, subject, viewer, None, before, limit)
