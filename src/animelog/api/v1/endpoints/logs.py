"""Journal log endpoints."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from animelog.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    SessionDep,
    invalidate_user_caches,
)
from animelog.models import Anime, Manga, Profile
from animelog.schemas.log import (
    AnimeEpisodeLogCreate,
    AnimeSeriesLogCreate,
    LogKind,
    LogResponse,
    MangaChapterLogCreate,
    MangaSeriesLogCreate,
)
from animelog.schemas.review import Visibility
from animelog.services import logs as log_service
from animelog.services.logs import JournalEntry, LogNotFoundError, NotLogOwnerError
from animelog.utils.slug import canonical_username

router = APIRouter(prefix="/logs", tags=["logs"])


class LogUpdate(BaseModel):
    """Partial journal edit; only the fields sent are changed."""

    rating: int | None = Field(None, ge=0, le=100)
    liked: bool | None = None
    review_id: str | None = None
    note: str | None = Field(None, max_length=5000)
    visibility: Visibility | None = None
    contains_spoilers: bool | None = None


def _write(db: SessionDep, kind: str, user: Profile, fields: dict[str, Any]) -> LogResponse:
    try:
        entry = log_service.create_log(db, kind, user, **fields)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    invalidate_user_caches(user.id)
    return LogResponse(**JournalEntry(kind=kind, log=entry).to_dict())


def _require(db: SessionDep, model: type, entity_id: str, label: str) -> None:
    if db.get(model, entity_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")


@router.post("/anime/series", response_model=LogResponse, status_code=status.HTTP_201_CREATED)
async def log_anime_series(
    payload: AnimeSeriesLogCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LogResponse:
    _require(db, Anime, payload.anime_id, "Anime")
    return _write(db, "anime_series", current_user, payload.model_dump())


@router.post("/anime/episode", response_model=LogResponse, status_code=status.HTTP_201_CREATED)
async def log_anime_episode(
    payload: AnimeEpisodeLogCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LogResponse:
    _require(db, Anime, payload.anime_id, "Anime")
    return _write(db, "anime_episode", current_user, payload.model_dump())


@router.post("/manga/series", response_model=LogResponse, status_code=status.HTTP_201_CREATED)
async def log_manga_series(
    payload: MangaSeriesLogCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LogResponse:
    _require(db, Manga, payload.manga_id, "Manga")
    return _write(db, "manga_series", current_user, payload.model_dump())


@router.post("/manga/chapter", response_model=LogResponse, status_code=status.HTTP_201_CREATED)
async def log_manga_chapter(
    payload: MangaChapterLogCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LogResponse:
    _require(db, Manga, payload.manga_id, "Manga")
    return _write(db, "manga_chapter", current_user, payload.model_dump())


@router.patch("/{kind}/{log_id}", response_model=LogResponse)
async def update_log(
    kind: LogKind,
    log_id: str,
    payload: LogUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LogResponse:
    changes = payload.model_dump(exclude_unset=True)
    try:
        entry = log_service.update_log(db, kind, log_id, current_user.id, changes)
    except LogNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Log not found") from err
    except NotLogOwnerError as err:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can change this log",
        ) from err
    invalidate_user_caches(current_user.id)
    return LogResponse(**JournalEntry(kind=kind, log=entry).to_dict())


@router.delete("/{kind}/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_log(
    kind: LogKind,
    log_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Response:
    try:
        log_service.delete_log(db, kind, log_id, current_user.id)
    except LogNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Log not found") from err
    except NotLogOwnerError as err:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can delete this log",
        ) from err
    invalidate_user_caches(current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/journal/{username}", response_model=list[LogResponse])
async def get_journal(
    username: str,
    db: SessionDep,
    viewer: OptionalUserDep,
    before: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[LogResponse]:
    """A user's journal, newest first; strangers only see public entries."""
    profile = db.query(Profile).filter(Profile.username == canonical_username(username)).first()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    entries = log_service.list_journal(
        db,
        profile.id,
        viewer_id=viewer.id if viewer else None,
        limit=limit,
        before=before,
    )
    return [LogResponse(**entry.to_dict()) for entry in entries]
