"""Following other profiles."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from animelog.db.time import as_utc
from animelog.models import Profile, UserFollow

logger = logging.getLogger(__name__)


class CannotFollowSelfError(ValueError):
    """Raised when a profile tries to follow itself."""


def is_following(db: Session, follower_id: str, following_id: str) -> bool:
    return db.get(UserFollow, (follower_id, following_id)) is not None


def follow(db: Session, follower_id: str, following_id: str) -> UserFollow:
    """Follow ``following_id``; following twice keeps the original row."""
    if follower_id == following_id:
        raise CannotFollowSelfError("You cannot follow yourself")
    existing = db.get(UserFollow, (follower_id, following_id))
    if existing is not None:
        return existing
    row = UserFollow(follower_id=follower_id, following_id=following_id)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("%s now follows %s", follower_id, following_id)
    return row


def unfollow(db: Session, follower_id: str, following_id: str) -> bool:
    row = db.get(UserFollow, (follower_id, following_id))
    if row is None:
        return False
    db.delete(row)
    db.commit()
    return True


def follow_counts(db: Session, user_id: str) -> tuple[int, int]:
    """(followers, following) of one profile."""
    counted = db.query(func.count()).select_from(UserFollow)
    followers = counted.filter(UserFollow.following_id == user_id).scalar()
    following = counted.filter(UserFollow.follower_id == user_id).scalar()
    return int(followers or 0), int(following or 0)


def _page(
    db: Session,
    user_id: str,
    *,
    followers: bool,
    before: datetime | None,
    limit: int,
) -> list[tuple[Profile, datetime]]:
    own_column = UserFollow.following_id if followers else UserFollow.follower_id
    other_column = UserFollow.follower_id if followers else UserFollow.following_id
    query = (
        db.query(Profile, UserFollow.created_at)
        .join(UserFollow, other_column == Profile.id)
        .filter(own_column == user_id)
    )
    if before is not None:
        query = query.filter(UserFollow.created_at < before)
    rows = query.order_by(UserFollow.created_at.desc(), other_column.desc()).limit(limit).all()
    return [(profile, as_utc(created_at)) for profile, created_at in rows]


def list_followers(
    db: Session, user_id: str, *, before: datetime | None = None, limit: int = 50
) -> list[tuple[Profile, datetime]]:
    """Profiles following ``user_id`` with when they followed, newest first."""
    return _page(db, user_id, followers=True, before=before, limit=limit)


def list_following(
    db: Session, user_id: str, *, before: datetime | None = None, limit: int = 50
) -> list[tuple[Profile, datetime]]:
    return _page(db, user_id, followers=False, before=before, limit=limit)
