"""Tests for completion progress endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status

from animelog.models import AnimeEpisodeLog, MangaSeriesLog

T0 = datetime(2025, 5, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture()
def logged(db_session, test_user, anime, episodes, manga):
    db_session.add_all([
        AnimeEpisodeLog(
            user_id=test_user.id,
            anime_id=anime.id,
            anime_episode_id=episodes[0].id,
            logged_at=T0,
        ),
        AnimeEpisodeLog(
            user_id=test_user.id,
            anime_id=anime.id,
            anime_episode_id=episodes[1].id,
            logged_at=T0 + timedelta(minutes=30),
        ),
        MangaSeriesLog(user_id=test_user.id, manga_id=manga.id, logged_at=T0 - timedelta(days=1)),
    ])
    db_session.flush()


def test_progress(client, test_user, anime, logged) -> None:
    response = client.get(
        "/api/v1/completions/progress",
        params={"userId": test_user.id, "id": anime.id, "kind": "anime"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"current": 2, "total": 4, "pct": 50}


def test_progress_rejects_non_uuid_ids(client, anime) -> None:
    response = client.get(
        "/api/v1/completions/progress",
        params={"userId": "alice", "id": anime.id, "kind": "anime"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "userId" in response.json()["detail"]


def test_progress_requires_camel_case_user_param(client, test_user, anime) -> None:
    response = client.get(
        "/api/v1/completions/progress",
        params={"user_id": test_user.id, "id": anime.id, "kind": "anime"},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_progress_cache_is_invalidated_by_new_logs(client, test_user, auth_token, anime, episodes, logged) -> None:
    params = {"userId": test_user.id, "id": anime.id, "kind": "anime"}
    assert client.get("/api/v1/completions/progress", params=params).json()["current"] == 2

    created = client.post(
        "/api/v1/logs/anime/episode",
        json={"anime_id": anime.id, "anime_episode_id": episodes[2].id},
        headers=auth_token,
    )
    assert created.status_code == status.HTTP_201_CREATED

    assert client.get("/api/v1/completions/progress", params=params).json()["current"] == 3


def test_engagement_for_chapterless_manga(client, test_user, manga, logged) -> None:
    response = client.get(
        "/api/v1/completions/engagement",
        params={"userId": test_user.id, "id": manga.id, "kind": "manga"},
    )
    assert response.json() == {"reviewed": 1, "rated": 1}


def test_progress_batch(client, test_user, anime, manga, logged) -> None:
    response = client.post(
        "/api/v1/completions/progress-batch",
        json={
            "user_id": test_user.id,
            "items": [
                {"kind": "anime", "id": anime.id},
                {"kind": "manga", "id": manga.id},
                {"kind": "anime", "id": "not-a-uuid"},
            ],
        },
    )
    assert response.status_code == status.HTTP_200_OK
    by_key = response.json()["by_key"]
    assert set(by_key) == {f"anime:{anime.id}", f"manga:{manga.id}"}
    assert by_key[f"manga:{manga.id}"]["pct"] == 100


def test_list_and_page(client, test_user, anime, manga, logged) -> None:
    first = client.get("/api/v1/completions", params={"user_id": test_user.id, "limit": 1}).json()
    assert [item["id"] for item in first["items"]] == [anime.id]
    cursor = first["next_cursor"]
    assert cursor["kind"] == "anime"

    second = client.get(
        "/api/v1/completions",
        params={
            "user_id": test_user.id,
            "limit": 1,
            "cursor_last_logged_at": cursor["last_logged_at"],
            "cursor_kind": cursor["kind"],
            "cursor_id": cursor["id"],
            "cursor_pct": cursor["pct"],
        },
    ).json()
    assert [item["id"] for item in second["items"]] == [manga.id]
    assert second["next_cursor"] is None


def test_list_rejects_unknown_bucket(client, test_user) -> None:
    response = client.get("/api/v1/completions", params={"user_id": test_user.id, "bucket": "95-100"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_bucket_counts(client, test_user, logged) -> None:
    rows = client.get("/api/v1/completions/buckets", params={"user_id": test_user.id}).json()
    assert rows[0] == {"bucket": "all", "anime_count": 1, "manga_count": 1, "total_count": 2}
    assert rows[-1]["bucket"] == "unknown"


def test_ring_svg_direct_values(client) -> None:
    response = client.get("/api/v1/completions/ring.svg", params={"current": 5, "total": 10, "segment_cap": 3})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert response.text.count("<path") == 3
    assert ">5/10</text>" in response.text

    hovered = client.get(
        "/api/v1/completions/ring.svg",
        params={"current": 5, "total": 10, "segment_cap": 3, "hover": 1},
    )
    assert ">5–7</text>" in hovered.text


def test_ring_svg_for_user(client, test_user, anime, logged) -> None:
    response = client.get(
        "/api/v1/completions/ring.svg",
        params={"user_id": test_user.id, "id": anime.id, "kind": "anime"},
    )
    assert ">2/4</text>" in response.text

    missing = client.get("/api/v1/completions/ring.svg")
    assert missing.status_code == status.HTTP_400_BAD_REQUEST
