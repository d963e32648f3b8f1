"""Review endpoints: one upsertable review per user and scope."""

from fastapi import APIRouter, HTTPException, Query, status

from animelog.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    SessionDep,
    invalidate_user_caches,
)
from animelog.models import Anime, AnimeEpisode, Manga, MangaChapter, Profile
from animelog.schemas.common import MediaScope
from animelog.schemas.review import ReviewResponse, ReviewUpsert
from animelog.services import reviews as review_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


def _save(db: SessionDep, user: Profile, scope: MediaScope, payload: ReviewUpsert) -> ReviewResponse:
    review = review_service.upsert_review(db, user, scope, payload)
    invalidate_user_caches(user.id)
    return ReviewResponse.model_validate(review)


def _require(db: SessionDep, model: type, entity_id: str, label: str) -> None:
    if db.get(model, entity_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")


@router.put("/anime/{anime_id}", response_model=ReviewResponse)
async def upsert_anime_review(
    anime_id: str,
    payload: ReviewUpsert,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReviewResponse:
    """Create or replace the caller's series review of an anime."""
    _require(db, Anime, anime_id, "Anime")
    return _save(db, current_user, MediaScope(anime_id=anime_id), payload)


@router.put("/anime/{anime_id}/episodes/{anime_episode_id}", response_model=ReviewResponse)
async def upsert_anime_episode_review(
    anime_id: str,
    anime_episode_id: str,
    payload: ReviewUpsert,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReviewResponse:
    episode = db.get(AnimeEpisode, anime_episode_id)
    if episode is None or episode.anime_id != anime_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Episode not found")
    scope = MediaScope(anime_id=anime_id, anime_episode_id=anime_episode_id)
    return _save(db, current_user, scope, payload)


@router.put("/manga/{manga_id}", response_model=ReviewResponse)
async def upsert_manga_review(
    manga_id: str,
    payload: ReviewUpsert,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReviewResponse:
    _require(db, Manga, manga_id, "Manga")
    return _save(db, current_user, MediaScope(manga_id=manga_id), payload)


@router.put("/manga/{manga_id}/chapters/{manga_chapter_id}", response_model=ReviewResponse)
async def upsert_manga_chapter_review(
    manga_id: str,
    manga_chapter_id: str,
    payload: ReviewUpsert,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReviewResponse:
    chapter = db.get(MangaChapter, manga_chapter_id)
    if chapter is None or chapter.manga_id != manga_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found")
    scope = MediaScope(manga_id=manga_id, manga_chapter_id=manga_chapter_id)
    return _save(db, current_user, scope, payload)


@router.get("", response_model=list[ReviewResponse])
async def list_reviews(
    db: SessionDep,
    viewer: OptionalUserDep,
    anime_id: str | None = None,
    anime_episode_id: str | None = None,
    manga_id: str | None = None,
    manga_chapter_id: str | None = None,
    user_id: str | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[ReviewResponse]:
    reviews = review_service.list_reviews(
        db,
        anime_id=anime_id,
        anime_episode_id=anime_episode_id,
        manga_id=manga_id,
        manga_chapter_id=manga_chapter_id,
        user_id=user_id,
        viewer_id=viewer.id if viewer else None,
        limit=limit,
    )
    return [ReviewResponse.model_validate(review) for review in reviews]
