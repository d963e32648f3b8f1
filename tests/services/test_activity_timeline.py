"""Tests for the merged log/review/mark activity timeline."""

from datetime import datetime, timedelta, timezone

from animelog.models import (
    AnimeEpisodeLog,
    AnimeSeriesLog,
    MangaSeriesLog,
    Post,
    Review,
    UserMark,
)
from animelog.schemas.common import MediaScope
from animelog.services import logs as log_service

T0 = datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc)


def _mark(db_session, user, kind, at, stars=None, **scope) -> UserMark:
    mark = UserMark(user_id=user.id, kind=kind, created_at=at, stars=stars, **scope)
    db_session.add(mark)
    db_session.flush()
    return mark


def test_marks_echoing_a_log_are_folded_into_it(db_session, test_user, anime) -> None:
    log = AnimeSeriesLog(user_id=test_user.id, anime_id=anime.id, logged_at=T0, rating=80, liked=True)
    db_session.add(log)
    db_session.flush()
    _mark(db_session, test_user, "watched", T0 + timedelta(seconds=30), anime_id=anime.id)
    _mark(db_session, test_user, "liked", T0 + timedelta(minutes=1), anime_id=anime.id)
    watchlist = _mark(db_session, test_user, "watchlist", T0 + timedelta(minutes=1), anime_id=anime.id)
    late_rating = _mark(db_session, test_user, "rating", T0 + timedelta(minutes=10), stars=8, anime_id=anime.id)

    items = log_service.list_activity(
        db_session, test_user.id, MediaScope(anime_id=anime.id), viewer_id=test_user.id
    )

    assert [item.id for item in items] == [late_rating.id, watchlist.id, log.id]
    snapshot = items[-1]
    assert snapshot.kind == "log"
    assert snapshot.actions == ["watched", "liked", "rated"]
    assert snapshot.title == "Frieren: Beyond Journey's End"
    assert items[0].stars == 8


def test_review_linked_from_a_log_is_not_repeated(db_session, test_user, anime) -> None:
    linked = Review(user_id=test_user.id, anime_id=anime.id, rating=90, content="A quiet masterpiece", created_at=T0)
    db_session.add(linked)
    db_session.flush()
    db_session.add(
        AnimeSeriesLog(user_id=test_user.id, anime_id=anime.id, logged_at=T0, review_id=linked.id)
    )
    post = Post(user_id=test_user.id, content="A quiet masterpiece", anime_id=anime.id, review_id=linked.id)
    db_session.add(post)
    db_session.flush()

    items = log_service.list_activity(
        db_session, test_user.id, MediaScope(anime_id=anime.id), viewer_id=test_user.id
    )

    assert [item.kind for item in items] == ["log"]
    assert items[0].actions == ["watched", "reviewed"]
    assert items[0].post_id == post.id


def test_series_and_episode_timelines_stay_apart(db_session, test_user, anime, episodes) -> None:
    db_session.add(AnimeSeriesLog(user_id=test_user.id, anime_id=anime.id, logged_at=T0))
    db_session.add(
        AnimeEpisodeLog(
            user_id=test_user.id,
            anime_id=anime.id,
            anime_episode_id=episodes[1].id,
            logged_at=T0 + timedelta(hours=1),
        )
    )
    db_session.add(
        Review(
            user_id=test_user.id,
            anime_id=anime.id,
            anime_episode_id=episodes[1].id,
            content="That ending",
            created_at=T0 + timedelta(hours=2),
        )
    )
    db_session.flush()

    series = log_service.list_activity(db_session, test_user.id, MediaScope(anime_id=anime.id))
    assert [(item.kind, item.scope) for item in series] == [("log", "series")]

    episode_scope = MediaScope(anime_id=anime.id, anime_episode_id=episodes[1].id)
    episode = log_service.list_activity(db_session, test_user.id, episode_scope)
    assert [item.kind for item in episode] == ["review", "log"]
    assert episode[0].type == "anime_episode_review"
    assert episode[1].sub_label == "Episode 2"
    assert episode[1].unit_number == 2


def test_strangers_only_see_public_entries(db_session, test_user, other_user, anime) -> None:
    db_session.add_all(
        [
            AnimeSeriesLog(user_id=test_user.id, anime_id=anime.id, logged_at=T0, visibility="private"),
            AnimeSeriesLog(user_id=test_user.id, anime_id=anime.id, logged_at=T0 + timedelta(days=1)),
            Review(
                user_id=test_user.id,
                anime_id=anime.id,
                content="only friends",
                visibility="friends",
                created_at=T0,
            ),
        ]
    )
    db_session.flush()
    scope = MediaScope(anime_id=anime.id)

    assert len(log_service.list_activity(db_session, test_user.id, scope, viewer_id=test_user.id)) == 3
    public = log_service.list_activity(db_session, test_user.id, scope, viewer_id=other_user.id)
    assert [item.visibility for item in public] == ["public"]


def test_profile_timeline_spans_anime_and_manga(db_session, test_user, anime, manga) -> None:
    db_session.add(AnimeSeriesLog(user_id=test_user.id, anime_id=anime.id, logged_at=T0))
    db_session.add(MangaSeriesLog(user_id=test_user.id, manga_id=manga.id, logged_at=T0 + timedelta(hours=1)))
    _mark(db_session, test_user, "watchlist", T0 + timedelta(hours=2), manga_id=manga.id)

    items = log_service.list_activity(db_session, test_user.id, viewer_id=test_user.id)
    assert [(item.kind, item.domain) for item in items] == [("mark", "manga"), ("log", "manga"), ("log", "anime")]
    assert items[0].title == "Delicious in Dungeon"
    assert items[0].slug == "dungeon-meshi"

    older = log_service.list_activity(db_session, test_user.id, before=T0 + timedelta(minutes=30), limit=5)
    assert [item.domain for item in older] == ["anime"]

    assert len(log_service.list_activity(db_session, test_user.id, limit=2)) == 2
