"""Profile endpoints: profile pages, follows and the library/watchlist tabs."""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, Response, status

from animelog.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from animelog.models import Profile
from animelog.schemas.profile import (
    FollowEntry,
    FollowSummary,
    ProfileResponse,
    ShelfItemResponse,
)
from animelog.services import follows as follow_service
from animelog.services import library as library_service
from animelog.services.follows import CannotFollowSelfError
from animelog.utils.slug import canonical_username

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _profile_or_404(db: SessionDep, username: str) -> Profile:
    profile = db.query(Profile).filter(Profile.username == canonical_username(username)).first()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(current_user: CurrentUserDep) -> ProfileResponse:
    return ProfileResponse.model_validate(current_user)


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile(username: str, db: SessionDep) -> ProfileResponse:
    """Look a profile up by username, case-insensitively."""
    return ProfileResponse.model_validate(_profile_or_404(db, username))


@router.get("/{username}/follows", response_model=FollowSummary)
async def get_follow_summary(username: str, db: SessionDep, viewer: OptionalUserDep) -> FollowSummary:
    profile = _profile_or_404(db, username)
    followers, following = follow_service.follow_counts(db, profile.id)
    return FollowSummary(
        followers=followers,
        following=following,
        viewer_follows=bool(viewer) and follow_service.is_following(db, viewer.id, profile.id),
    )


@router.put("/{username}/follow", response_model=FollowSummary)
async def follow_profile(username: str, current_user: CurrentUserDep, db: SessionDep) -> FollowSummary:
    profile = _profile_or_404(db, username)
    try:
        follow_service.follow(db, current_user.id, profile.id)
    except CannotFollowSelfError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    followers, following = follow_service.follow_counts(db, profile.id)
    return FollowSummary(followers=followers, following=following, viewer_follows=True)


@router.delete("/{username}/follow", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_profile(username: str, current_user: CurrentUserDep, db: SessionDep) -> Response:
    profile = _profile_or_404(db, username)
    follow_service.unfollow(db, current_user.id, profile.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _entries(rows: list[tuple[Profile, datetime]]) -> list[FollowEntry]:
    return [
        FollowEntry(id=profile.id, username=profile.username, avatar_url=profile.avatar_url, followed_at=at)
        for profile, at in rows
    ]


@router.get("/{username}/followers", response_model=list[FollowEntry])
async def list_followers(
    username: str,
    db: SessionDep,
    before: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[FollowEntry]:
    profile = _profile_or_404(db, username)
    return _entries(follow_service.list_followers(db, profile.id, before=before, limit=limit))


@router.get("/{username}/following", response_model=list[FollowEntry])
async def list_following(
    username: str,
    db: SessionDep,
    before: datetime | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> list[FollowEntry]:
    profile = _profile_or_404(db, username)
    return _entries(follow_service.list_following(db, profile.id, before=before, limit=limit))


@router.get("/{username}/library", response_model=list[ShelfItemResponse])
async def get_library(username: str, db: SessionDep) -> list[ShelfItemResponse]:
    """Series the user marked watched, best rated first."""
    profile = _profile_or_404(db, username)
    return [ShelfItemResponse.model_validate(item) for item in library_service.library(db, profile.id)]


@router.get("/{username}/watchlist", response_model=list[ShelfItemResponse])
async def get_watchlist(username: str, db: SessionDep) -> list[ShelfItemResponse]:
    profile = _profile_or_404(db, username)
    return [ShelfItemResponse.model_validate(item) for item in library_service.watchlist(db, profile.id)]
