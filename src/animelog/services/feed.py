"""Feed assembly and post mutations.

A feed page is read in three groups: the posts themselves, like counts and
root-level reply counts. The counts are decoration; if one of those reads
fails the page is still served with zeroes for that group.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeVar

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from animelog.core.settings import settings
from animelog.db.time import utcnow
from animelog.models import Comment, Post, PostLike, Profile

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PostNotFoundError(LookupError):
    """Raised when a post id does not exist."""


class NotPostOwnerError(PermissionError):
    """Raised when someone other than the author edits or deletes a post."""


@dataclass(frozen=True)
class FeedScope:
    """Narrows the feed to one media entity, one unit or one author."""

    anime_id: str | None = None
    anime_episode_id: str | None = None
    manga_id: str | None = None
    manga_chapter_id: str | None = None
    user_id: str | None = None


@dataclass
class FeedEntry:
    post: Post
    username: str | None = None
    avatar_url: str | None = None
    like_count: int = 0
    reply_count: int = 0
    liked_by_me: bool = False


@dataclass(frozen=True)
class FeedCursor:
    """Position of the last post shown; the next page starts strictly after it.

    Posts are ordered by ``(created_at, id)`` descending, so posts sharing a
    timestamp are told apart by id. Without an id only the timestamp is used.
    """

    created_at: datetime
    id: str | None = None


@dataclass
class FeedPageResult:
    entries: list[FeedEntry] = field(default_factory=list)
    next_cursor: FeedCursor | None = None


def _scoped(query, scope: FeedScope | None):
    if scope is None:
        return query
    if scope.anime_id:
        query = query.filter(Post.anime_id == scope.anime_id)
    if scope.anime_episode_id:
        query = query.filter(Post.anime_episode_id == scope.anime_episode_id)
    if scope.manga_id:
        query = query.filter(Post.manga_id == scope.manga_id)
    if scope.manga_chapter_id:
        query = query.filter(Post.manga_chapter_id == scope.manga_chapter_id)
    if scope.user_id:
        query = query.filter(Post.user_id == scope.user_id)
    return query


def list_feed(
    db: Session,
    scope: FeedScope | None = None,
    limit: int | None = None,
    before: FeedCursor | None = None,
) -> list[tuple[Post, Profile | None]]:
    """Return posts newest first, each paired with its author's profile."""
    limit = limit or settings.feed_page_size
    query = db.query(Post, Profile).outerjoin(Profile, Profile.id == Post.user_id)
    query = _scoped(query, scope)
    if before is not None:
        if before.id is None:
            query = query.filter(Post.created_at < before.created_at)
        else:
            query = query.filter(
                or_(
                    Post.created_at < before.created_at,
                    and_(Post.created_at == before.created_at, Post.id < before.id),
                )
            )
    rows = query.order_by(Post.created_at.desc(), Post.id.desc()).limit(limit).all()
    return [(post, profile) for post, profile in rows]


def like_counts(db: Session, post_ids: list[str]) -> dict[str, int]:
    if not post_ids:
        return {}
    rows = (
        db.query(PostLike.post_id, func.count())
        .filter(PostLike.post_id.in_(post_ids))
        .group_by(PostLike.post_id)
        .all()
    )
    return {post_id: count for post_id, count in rows}


def reply_counts(db: Session, post_ids: list[str]) -> dict[str, int]:
    """Count root-level replies only; nested replies live under their parent."""
    if not post_ids:
        return {}
    rows = (
        db.query(Comment.post_id, func.count())
        .filter(Comment.post_id.in_(post_ids), Comment.parent_comment_id.is_(None))
        .group_by(Comment.post_id)
        .all()
    )
    return {post_id: count for post_id, count in rows}


def liked_post_ids(db: Session, post_ids: list[str], viewer_id: str | None) -> set[str]:
    if not post_ids or not viewer_id:
        return set()
    rows = (
        db.query(PostLike.post_id)
        .filter(PostLike.post_id.in_(post_ids), PostLike.user_id == viewer_id)
        .all()
    )
    return {post_id for (post_id,) in rows}


def _degrade(db: Session, label: str, read: Callable[[], T], fallback: T) -> T:
    try:
        return read()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("feed %s lookup failed; serving page without it", label, exc_info=True)
        return fallback


def feed_page(
    db: Session,
    scope: FeedScope | None = None,
    limit: int | None = None,
    before: FeedCursor | None = None,
    viewer_id: str | None = None,
) -> FeedPageResult:
    rows = list_feed(db, scope=scope, limit=limit, before=before)
    if not rows:
        return FeedPageResult()

    post_ids = [post.id for post, _ in rows]
    likes = _degrade(db, "like count", lambda: like_counts(db, post_ids), {})
    replies = _degrade(db, "reply count", lambda: reply_counts(db, post_ids), {})
    mine = _degrade(db, "liked-by-me", lambda: liked_post_ids(db, post_ids, viewer_id), set())

    entries = [
        FeedEntry(
            post=post,
            username=profile.username if profile else None,
            avatar_url=profile.avatar_url if profile else None,
            like_count=likes.get(post.id, 0),
            reply_count=replies.get(post.id, 0),
            liked_by_me=post.id in mine,
        )
        for post, profile in rows
    ]
    last = rows[-1][0]
    return FeedPageResult(entries=entries, next_cursor=FeedCursor(last.created_at, last.id))


def get_post(db: Session, post_id: str) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise PostNotFoundError(post_id)
    return post


def create_post(
    db: Session,
    user_id: str,
    content: str,
    *,
    anime_id: str | None = None,
    anime_episode_id: str | None = None,
    manga_id: str | None = None,
    manga_chapter_id: str | None = None,
    review_id: str | None = None,
) -> Post:
    """Persist a new post.

    Raises:
        ValueError: If ``content`` is empty or whitespace only.
    """
    if not content or not content.strip():
        raise ValueError("Post content cannot be empty")

    post = Post(
        user_id=user_id,
        content=content.strip(),
        anime_id=anime_id,
        anime_episode_id=anime_episode_id,
        manga_id=manga_id,
        manga_chapter_id=manga_chapter_id,
        review_id=review_id,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("post %s created by %s", post.id, user_id)
    return post


def _owned_post(db: Session, post_id: str, user_id: str) -> Post:
    post = get_post(db, post_id)
    if post.user_id != user_id:
        raise NotPostOwnerError(post_id)
    return post


def edit_post(db: Session, post_id: str, user_id: str, content: str) -> Post:
    if not content or not content.strip():
        raise ValueError("Post content cannot be empty")
    post = _owned_post(db, post_id, user_id)
    post.content = content.strip()
    post.updated_at = utcnow()
    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, post_id: str, user_id: str) -> None:
    post = _owned_post(db, post_id, user_id)
    db.delete(post)
    db.commit()
    logger.info("post %s deleted by %s", post_id, user_id)


def count_likes(db: Session, post_id: str) -> int:
    return db.query(func.count()).select_from(PostLike).filter(PostLike.post_id == post_id).scalar() or 0


def like_post(db: Session, post_id: str, user_id: str) -> int:
    """Like a post (no-op if already liked) and return the new like count."""
    get_post(db, post_id)
    existing = db.get(PostLike, (post_id, user_id))
    if existing is None:
        db.add(PostLike(post_id=post_id, user_id=user_id))
        try:
            db.commit()
        except IntegrityError:
            # Concurrent like from the same user already landed.
            db.rollback()
    return count_likes(db, post_id)


def unlike_post(db: Session, post_id: str, user_id: str) -> int:
    get_post(db, post_id)
    db.query(PostLike).filter(PostLike.post_id == post_id, PostLike.user_id == user_id).delete(
        synchronize_session=False
    )
    db.commit()
    return count_likes(db, post_id)


def add_comment(
    db: Session,
    post_id: str,
    user_id: str,
    content: str,
    parent_comment_id: str | None = None,
) -> Comment:
    if not content or not content.strip():
        raise ValueError("Comment content cannot be empty")
    get_post(db, post_id)

    if parent_comment_id is not None:
        parent = db.get(Comment, parent_comment_id)
        if parent is None or parent.post_id != post_id:
            raise ValueError("Parent comment does not belong to this post")

    comment = Comment(
        post_id=post_id,
        user_id=user_id,
        parent_comment_id=parent_comment_id,
        content=content.strip(),
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def list_comments(db: Session, post_id: str) -> list[Comment]:
    get_post(db, post_id)
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
