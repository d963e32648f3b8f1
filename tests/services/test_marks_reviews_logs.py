"""Tests for marks, review upserts and the journal."""

from datetime import datetime, timedelta, timezone

import pytest

from animelog.models import UserMark
from animelog.schemas.common import MediaScope
from animelog.schemas.review import ReviewUpsert
from animelog.services import logs as log_service
from animelog.services import marks as mark_service
from animelog.services import reviews as review_service
from animelog.services.logs import LogNotFoundError, NotLogOwnerError

T0 = datetime(2025, 4, 1, 20, 0, tzinfo=timezone.utc)


def test_boolean_marks_are_idempotent(db_session, test_user, anime) -> None:
    scope = MediaScope(anime_id=anime.id)
    first = mark_service.set_mark(db_session, test_user.id, "watched", scope)
    second = mark_service.set_mark(db_session, test_user.id, "watched", scope)

    assert first.id == second.id
    assert db_session.query(UserMark).count() == 1


def test_series_and_episode_marks_do_not_mix(db_session, test_user, anime, episodes) -> None:
    series = MediaScope(anime_id=anime.id)
    episode = MediaScope(anime_id=anime.id, anime_episode_id=episodes[0].id)
    mark_service.set_mark(db_session, test_user.id, "liked", episode)

    assert mark_service.get_mark(db_session, test_user.id, "liked", series) is None
    assert mark_service.get_mark(db_session, test_user.id, "liked", episode) is not None
    assert mark_service.clear_mark(db_session, test_user.id, "liked", series) == 0


def test_rating_replaces_and_clamps(db_session, test_user, anime) -> None:
    scope = MediaScope(anime_id=anime.id)
    mark_service.set_mark(db_session, test_user.id, "rating", scope, stars=4)
    mark = mark_service.set_mark(db_session, test_user.id, "rating", scope, stars=0)

    assert mark.stars == 1
    assert len(mark_service.list_marks(db_session, test_user.id, scope)) == 1

    assert mark_service.set_mark(db_session, test_user.id, "rating", scope, stars=None) is None
    assert mark_service.list_marks(db_session, test_user.id, scope) == []


def test_unknown_mark_kind(db_session, test_user, anime) -> None:
    with pytest.raises(ValueError):
        mark_service.set_mark(db_session, test_user.id, "dropped", MediaScope(anime_id=anime.id))


def test_review_upsert_keeps_one_row_per_scope(db_session, test_user, anime) -> None:
    scope = MediaScope(anime_id=anime.id)
    created = review_service.upsert_review(db_session, test_user, scope, ReviewUpsert(rating=70, content="good"))
    updated = review_service.upsert_review(
        db_session, test_user, scope, ReviewUpsert(rating=90, content="great", visibility="private")
    )

    assert created.id == updated.id
    assert updated.rating == 90
    assert updated.visibility == "private"
    assert updated.updated_at is not None


def test_private_reviews_hidden_from_others(db_session, test_user, other_user, anime) -> None:
    scope = MediaScope(anime_id=anime.id)
    review_service.upsert_review(db_session, test_user, scope, ReviewUpsert(content="secret", visibility="private"))
    review_service.upsert_review(db_session, other_user, scope, ReviewUpsert(content="open"))

    visible = review_service.list_reviews(db_session, anime_id=anime.id, viewer_id=other_user.id)
    assert [review.content for review in visible] == ["open"]
    own = review_service.list_reviews(db_session, anime_id=anime.id, viewer_id=test_user.id)
    assert len(own) == 2


def test_log_visibility_defaults_to_profile(db_session, test_user, anime) -> None:
    test_user.default_visibility = "friends"
    db_session.flush()

    entry = log_service.create_log(db_session, "anime_series", test_user, anime_id=anime.id)
    assert entry.visibility == "friends"


def test_episode_log_must_match_series(db_session, test_user, anime, manga, manga_chapter) -> None:
    with pytest.raises(ValueError):
        log_service.create_log(
            db_session,
            "anime_episode",
            test_user,
            anime_id=anime.id,
            anime_episode_id="eeeeeeee-ffff-4000-8000-000000000000",
        )
    chapter_log = log_service.create_log(
        db_session,
        "manga_chapter",
        test_user,
        manga_id=manga.id,
        manga_chapter_id=manga_chapter.id,
    )
    assert chapter_log.manga_chapter_id == manga_chapter.id


def test_log_edits_are_owner_only(db_session, test_user, other_user, anime) -> None:
    entry = log_service.create_log(db_session, "anime_series", test_user, anime_id=anime.id)

    with pytest.raises(NotLogOwnerError):
        log_service.update_log(db_session, "anime_series", entry.id, other_user.id, {"liked": True})
    with pytest.raises(ValueError):
        log_service.update_log(db_session, "anime_series", entry.id, test_user.id, {"user_id": other_user.id})

    updated = log_service.update_log(
        db_session, "anime_series", entry.id, test_user.id, {"liked": True, "rating": 80}
    )
    assert updated.liked is True and updated.rating == 80

    log_service.delete_log(db_session, "anime_series", entry.id, test_user.id)
    with pytest.raises(LogNotFoundError):
        log_service.get_owned_log(db_session, "anime_series", entry.id, test_user.id)


def test_journal_merges_tables_newest_first(db_session, test_user, other_user, anime, episodes, manga) -> None:
    log_service.create_log(db_session, "anime_series", test_user, anime_id=anime.id, logged_at=T0)
    log_service.create_log(
        db_session,
        "anime_episode",
        test_user,
        anime_id=anime.id,
        anime_episode_id=episodes[2].id,
        logged_at=T0 + timedelta(hours=2),
    )
    log_service.create_log(
        db_session,
        "manga_series",
        test_user,
        manga_id=manga.id,
        visibility="private",
        logged_at=T0 + timedelta(hours=1),
    )

    own = log_service.list_journal(db_session, test_user.id, viewer_id=test_user.id)
    assert [entry.kind for entry in own] == ["anime_episode", "manga_series", "anime_series"]
    assert own[0].unit_number == 3
    assert own[0].slug == anime.slug

    public = log_service.list_journal(db_session, test_user.id, viewer_id=other_user.id)
    assert [entry.kind for entry in public] == ["anime_episode", "anime_series"]

    older = log_service.list_journal(
        db_session, test_user.id, viewer_id=test_user.id, before=T0 + timedelta(minutes=30)
    )
    assert [entry.kind for entry in older] == ["anime_series"]
