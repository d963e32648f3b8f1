"""Review upserts: one review per user and scope."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from animelog.db.time import utcnow
from animelog.models import Profile, Review
from animelog.schemas.common import MediaScope
from animelog.schemas.review import ReviewUpsert

logger = logging.getLogger(__name__)


def find_review(db: Session, user_id: str, scope: MediaScope) -> Review | None:
    """Exact-scope lookup; a series review has null unit ids."""
    query = db.query(Review).filter(Review.user_id == user_id)
    for column, value in (
        (Review.anime_id, scope.anime_id),
        (Review.anime_episode_id, scope.anime_episode_id),
        (Review.manga_id, scope.manga_id),
        (Review.manga_chapter_id, scope.manga_chapter_id),
    ):
        query = query.filter(column.is_(None) if value is None else column == value)
    return query.first()


def upsert_review(db: Session, user: Profile, scope: MediaScope, payload: ReviewUpsert) -> Review:
    if scope.is_empty:
        raise ValueError("A review needs an anime or manga scope")

    review = find_review(db, user.id, scope)
    if review is None:
        review = Review(user_id=user.id, **scope.model_dump())
        review.visibility = payload.visibility or user.default_visibility
        db.add(review)
    else:
        review.updated_at = utcnow()
        if payload.visibility is not None:
            review.visibility = payload.visibility

    review.rating = payload.rating
    review.content = payload.content
    review.contains_spoilers = payload.contains_spoilers
    review.author_liked = payload.author_liked
    db.commit()
    db.refresh(review)
    logger.info("review %s saved by %s", review.id, user.id)
    return review


def list_reviews(
    db: Session,
    *,
    anime_id: str | None = None,
    anime_episode_id: str | None = None,
    manga_id: str | None = None,
    manga_chapter_id: str | None = None,
    user_id: str | None = None,
    viewer_id: str | None = None,
    limit: int = 50,
) -> list[Review]:
    """Newest reviews first; private reviews are only shown to their author."""
    query = db.query(Review)
    if anime_id:
        query = query.filter(Review.anime_id == anime_id)
    if anime_episode_id:
        query = query.filter(Review.anime_episode_id == anime_episode_id)
    if manga_id:
        query = query.filter(Review.manga_id == manga_id)
    if manga_chapter_id:
        query = query.filter(Review.manga_chapter_id == manga_chapter_id)
    if user_id:
        query = query.filter(Review.user_id == user_id)
    if viewer_id:
        query = query.filter((Review.visibility != "private") | (Review.user_id == viewer_id))
    else:
        query = query.filter(Review.visibility != "private")
    return query.order_by(Review.created_at.desc(), Review.id.desc()).limit(limit).all()
