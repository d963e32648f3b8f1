"""Tests for marks, reviews and journal log endpoints."""

from fastapi import status


def test_marks_round_trip(client, auth_token, anime) -> None:
    scope = {"anime_id": anime.id}
    assert client.put("/api/v1/marks/watched", json=scope, headers=auth_token).status_code == 200
    rated = client.put("/api/v1/marks/rating", json={**scope, "stars": 7}, headers=auth_token)
    assert rated.json()["stars"] == 7

    state = client.get("/api/v1/marks", params=scope, headers=auth_token).json()
    assert state == {"watched": True, "liked": False, "watchlist": False, "stars": 7}

    cleared = client.delete("/api/v1/marks/watched", params=scope, headers=auth_token)
    assert cleared.status_code == status.HTTP_204_NO_CONTENT
    again = client.delete("/api/v1/marks/watched", params=scope, headers=auth_token)
    assert again.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/marks", params=scope, headers=auth_token).json()["watched"] is False


def test_rating_mark_requires_stars(client, auth_token, anime) -> None:
    response = client.put("/api/v1/marks/rating", json={"anime_id": anime.id}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_marks_need_a_scope(client, auth_token) -> None:
    response = client.get("/api/v1/marks", headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    orphan = client.get("/api/v1/marks", params={"anime_episode_id": "x"}, headers=auth_token)
    assert orphan.status_code == status.HTTP_400_BAD_REQUEST


def test_review_upsert_endpoints(client, auth_token, anime, episodes) -> None:
    created = client.put(
        f"/api/v1/reviews/anime/{anime.id}",
        json={"rating": 80, "content": "A quiet masterpiece"},
        headers=auth_token,
    )
    assert created.status_code == status.HTTP_200_OK
    updated = client.put(
        f"/api/v1/reviews/anime/{anime.id}",
        json={"rating": 90, "content": "Even better on rewatch"},
        headers=auth_token,
    )
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["rating"] == 90

    episode = client.put(
        f"/api/v1/reviews/anime/{anime.id}/episodes/{episodes[0].id}",
        json={"content": "Great opener"},
        headers=auth_token,
    )
    assert episode.json()["anime_episode_id"] == episodes[0].id

    listed = client.get("/api/v1/reviews", params={"anime_id": anime.id}).json()
    assert len(listed) == 2


def test_review_for_missing_anime(client, auth_token) -> None:
    response = client.put("/api/v1/reviews/anime/missing", json={"content": "?"}, headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Anime not found"


def test_review_rating_range_validated(client, auth_token, anime) -> None:
    response = client.put(f"/api/v1/reviews/anime/{anime.id}", json={"rating": 101}, headers=auth_token)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_log_lifecycle(client, auth_token, other_auth_token, anime, episodes) -> None:
    created = client.post(
        "/api/v1/logs/anime/episode",
        json={"anime_id": anime.id, "anime_episode_id": episodes[0].id, "rating": 70},
        headers=auth_token,
    )
    assert created.status_code == status.HTTP_201_CREATED
    log = created.json()
    assert log["kind"] == "anime_episode"
    assert log["visibility"] == "public"

    forbidden = client.patch(
        f"/api/v1/logs/anime_episode/{log['id']}", json={"liked": True}, headers=other_auth_token
    )
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    patched = client.patch(
        f"/api/v1/logs/anime_episode/{log['id']}", json={"liked": True}, headers=auth_token
    )
    assert patched.json()["liked"] is True
    assert patched.json()["rating"] == 70

    deleted = client.delete(f"/api/v1/logs/anime_episode/{log['id']}", headers=auth_token)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    missing = client.delete(f"/api/v1/logs/anime_episode/{log['id']}", headers=auth_token)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_episode_log_from_other_series_rejected(client, auth_token, anime, manga, manga_chapter) -> None:
    response = client.post(
        "/api/v1/logs/manga/chapter",
        json={"manga_id": anime.id, "manga_chapter_id": manga_chapter.id},
        headers=auth_token,
    )
    assert response.status_code in (status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND)


def test_journal_hides_private_entries_from_strangers(client, auth_token, other_auth_token, anime, manga) -> None:
    client.post("/api/v1/logs/anime/series", json={"anime_id": anime.id}, headers=auth_token)
    client.post(
        "/api/v1/logs/manga/series",
        json={"manga_id": manga.id, "visibility": "private"},
        headers=auth_token,
    )

    own = client.get("/api/v1/logs/journal/Alice", headers=auth_token).json()
    assert {entry["kind"] for entry in own} == {"anime_series", "manga_series"}

    public = client.get("/api/v1/logs/journal/alice", headers=other_auth_token).json()
    assert [entry["kind"] for entry in public] == ["anime_series"]
    assert public[0]["title"] == "Frieren: Beyond Journey's End"

    assert client.get("/api/v1/logs/journal/nobody").status_code == status.HTTP_404_NOT_FOUND
