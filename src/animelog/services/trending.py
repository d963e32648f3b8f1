"""Weekly sidebar picks: the most engaged-with review and the most active user.

Scores over the trailing window (``settings.trending_window_days``):

* review: likes on its feed post + 2 x root replies to that post
* user: 3 x public reviews written + 2 x replies received from others
  + likes received from others
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from animelog.core.settings import settings
from animelog.db.time import as_utc, utcnow
from animelog.models import Anime, Comment, Manga, Post, PostLike, Profile, Review
from animelog.models.profile import VISIBILITY_PUBLIC
from animelog.services.media import display_title

logger = logging.getLogger(__name__)


@dataclass
class TrendingReview:
    review_id: str
    post_id: str | None
    author_id: str
    author_username: str
    author_avatar_url: str | None
    media_kind: str
    media_id: str
    media_slug: str
    media_title: str
    media_image_url: str | None
    content: str
    created_at: datetime
    likes_count: int
    replies_count: int
    score: int


@dataclass
class TrendingUser:
    user_id: str
    username: str
    avatar_url: str | None
    reviews_written: int
    responses_received: int
    likes_received: int
    score: int


def window_start(now: datetime | None = None) -> datetime:
    return (now or utcnow()) - timedelta(days=settings.trending_window_days)


def _counts(rows) -> dict[str, int]:
    return {key: int(count) for key, count in rows}


def top_reviews(db: Session, *, now: datetime | None = None, limit: int = 1) -> list[TrendingReview]:
    """Public reviews written inside the window, ranked by engagement on their post."""
    since = window_start(now)
    rows = (
        db.query(Review, Post.id)
        .outerjoin(Post, Post.review_id == Review.id)
        .filter(Review.created_at >= since, Review.visibility == VISIBILITY_PUBLIC)
        .all()
    )
    if not rows:
        return []

    post_ids = [post_id for _, post_id in rows if post_id]
    likes: dict[str, int] = {}
    replies: dict[str, int] = {}
    if post_ids:
        likes = _counts(
            db.query(PostLike.post_id, func.count())
            .filter(PostLike.post_id.in_(post_ids))
            .group_by(PostLike.post_id)
        )
        replies = _counts(
            db.query(Comment.post_id, func.count())
            .filter(Comment.post_id.in_(post_ids), Comment.parent_comment_id.is_(None))
            .group_by(Comment.post_id)
        )

    picks: list[TrendingReview] = []
    seen: set[str] = set()
    for review, post_id in rows:
        if review.id in seen:
            continue
        seen.add(review.id)
        author = db.get(Profile, review.user_id)
        media = db.get(Anime, review.anime_id) if review.anime_id else db.get(Manga, review.manga_id)
        if author is None or media is None:
            continue
        like_count = likes.get(post_id, 0) if post_id else 0
        reply_count = replies.get(post_id, 0) if post_id else 0
        picks.append(
            TrendingReview(
                review_id=review.id,
                post_id=post_id,
                author_id=author.id,
                author_username=author.username,
                author_avatar_url=author.avatar_url,
                media_kind="anime" if review.anime_id else "manga",
                media_id=media.id,
                media_slug=media.slug,
                media_title=display_title(media),
                media_image_url=media.image_url,
                content=review.content,
                created_at=as_utc(review.created_at),
                likes_count=like_count,
                replies_count=reply_count,
                score=like_count + 2 * reply_count,
            )
        )

    picks.sort(key=lambda pick: (pick.score, pick.created_at, pick.review_id), reverse=True)
    return picks[:limit]


def top_users(db: Session, *, now: datetime | None = None, limit: int = 1) -> list[TrendingUser]:
    """Users ranked by reviews written and responses received inside the window."""
    since = window_start(now)

    reviews = _counts(
        db.query(Review.user_id, func.count())
        .filter(Review.created_at >= since, Review.visibility == VISIBILITY_PUBLIC)
        .group_by(Review.user_id)
    )
    responses = _counts(
        db.query(Post.user_id, func.count(Comment.id))
        .join(Comment, Comment.post_id == Post.id)
        .filter(Comment.created_at >= since, Comment.user_id != Post.user_id)
        .group_by(Post.user_id)
    )
    likes = _counts(
        db.query(Post.user_id, func.count())
        .select_from(PostLike)
        .join(Post, PostLike.post_id == Post.id)
        .filter(PostLike.created_at >= since, PostLike.user_id != Post.user_id)
        .group_by(Post.user_id)
    )

    picks: list[TrendingUser] = []
    for user_id in set(reviews) | set(responses) | set(likes):
        profile = db.get(Profile, user_id)
        if profile is None:
            continue
        written = reviews.get(user_id, 0)
        received = responses.get(user_id, 0)
        liked = likes.get(user_id, 0)
        picks.append(
            TrendingUser(
                user_id=user_id,
                username=profile.username,
                avatar_url=profile.avatar_url,
                reviews_written=written,
                responses_received=received,
                likes_received=liked,
                score=3 * written + 2 * received + liked,
            )
        )

    picks.sort(key=lambda pick: (-pick.score, pick.username))
    logger.debug("trending users since %s: %d candidates", since.isoformat(), len(picks))
    return picks[:limit]
