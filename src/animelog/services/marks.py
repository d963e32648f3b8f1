"""User marks on anime, manga, episodes and chapters.

A mark's scope is matched exactly: a series mark only matches rows whose
unit ids are null, so unit marks never leak into series lookups.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from animelog.models import UserMark
from animelog.models.mark import MARK_KINDS, MARK_RATING
from animelog.schemas.common import MediaScope


def _validate(kind: str, scope: MediaScope) -> None:
    if kind not in MARK_KINDS:
        raise ValueError(f"Unknown mark kind: {kind!r}")
    if scope.is_empty:
        raise ValueError("A mark needs an anime or manga scope")


def _scope_query(db: Session, user_id: str, kind: str, scope: MediaScope) -> Query:
    query = db.query(UserMark).filter(UserMark.user_id == user_id, UserMark.kind == kind)
    for column, value in (
        (UserMark.anime_id, scope.anime_id),
        (UserMark.anime_episode_id, scope.anime_episode_id),
        (UserMark.manga_id, scope.manga_id),
        (UserMark.manga_chapter_id, scope.manga_chapter_id),
    ):
        query = query.filter(column.is_(None) if value is None else column == value)
    return query


def list_marks(db: Session, user_id: str, scope: MediaScope) -> list[UserMark]:
    if scope.is_empty:
        raise ValueError("A mark needs an anime or manga scope")
    marks: list[UserMark] = []
    for kind in MARK_KINDS:
        marks.extend(_scope_query(db, user_id, kind, scope).all())
    return marks


def get_mark(db: Session, user_id: str, kind: str, scope: MediaScope) -> UserMark | None:
    _validate(kind, scope)
    return _scope_query(db, user_id, kind, scope).first()


def set_mark(
    db: Session,
    user_id: str,
    kind: str,
    scope: MediaScope,
    stars: int | None = None,
) -> UserMark | None:
    """Set a mark; setting an existing boolean mark is a no-op.

    Rating marks replace any previous rating. ``stars=None`` on a rating
    clears it and returns None.
    """
    _validate(kind, scope)

    if kind == MARK_RATING:
        _scope_query(db, user_id, kind, scope).delete(synchronize_session=False)
        if stars is None:
            db.commit()
            return None
        mark = UserMark(user_id=user_id, kind=kind, stars=max(1, min(10, int(stars))), **scope.model_dump())
        db.add(mark)
        db.commit()
        db.refresh(mark)
        return mark

    existing = _scope_query(db, user_id, kind, scope).first()
    if existing is not None:
        return existing
    mark = UserMark(user_id=user_id, kind=kind, **scope.model_dump())
    db.add(mark)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return _scope_query(db, user_id, kind, scope).first()
    db.refresh(mark)
    return mark


def clear_mark(db: Session, user_id: str, kind: str, scope: MediaScope) -> int:
    """Delete the mark for exactly this scope; clearing nothing is fine."""
    _validate(kind, scope)
    removed = _scope_query(db, user_id, kind, scope).delete(synchronize_session=False)
    db.commit()
    return removed
