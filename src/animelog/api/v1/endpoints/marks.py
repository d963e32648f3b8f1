"""Mark endpoints: watched, liked, watchlist and star ratings."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, status

from animelog.api.v1.dependencies import CurrentUserDep, SessionDep, invalidate_user_caches
from animelog.models.mark import MARK_RATING
from animelog.schemas.common import MediaScope
from animelog.schemas.mark import MarkResponse, MarkSet, MarkState
from animelog.services import marks as mark_service

router = APIRouter(prefix="/marks", tags=["marks"])

MarkKind = Literal["watched", "liked", "watchlist", "rating"]


def _scope_from_query(
    anime_id: str | None = None,
    anime_episode_id: str | None = None,
    manga_id: str | None = None,
    manga_chapter_id: str | None = None,
) -> MediaScope:
    try:
        scope = MediaScope(
            anime_id=anime_id,
            anime_episode_id=anime_episode_id,
            manga_id=manga_id,
            manga_chapter_id=manga_chapter_id,
        )
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    if scope.is_empty:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="anime_id or manga_id is required",
        )
    return scope


ScopeDep = Annotated[MediaScope, Depends(_scope_from_query)]


@router.get("", response_model=MarkState)
async def get_marks(scope: ScopeDep, current_user: CurrentUserDep, db: SessionDep) -> MarkState:
    """The caller's marks on exactly this scope."""
    state = MarkState()
    for mark in mark_service.list_marks(db, current_user.id, scope):
        if mark.kind == MARK_RATING:
            state.stars = mark.stars
        else:
            setattr(state, mark.kind, True)
    return state


@router.put("/{kind}", response_model=MarkResponse | None)
async def set_mark(
    kind: MarkKind,
    payload: MarkSet,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MarkResponse | None:
    scope = MediaScope(**payload.model_dump(exclude={"stars"}))
    if scope.is_empty:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="anime_id or manga_id is required",
        )
    if kind == MARK_RATING and payload.stars is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="stars is required for rating marks",
        )

    mark = mark_service.set_mark(db, current_user.id, kind, scope, stars=payload.stars)
    invalidate_user_caches(current_user.id)
    return MarkResponse.model_validate(mark) if mark is not None else None


@router.delete("/{kind}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_mark(
    kind: MarkKind,
    scope: ScopeDep,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> None:
    """Idempotent: clearing an absent mark still returns 204."""
    mark_service.clear_mark(db, current_user.id, kind, scope)
    invalidate_user_caches(current_user.id)
