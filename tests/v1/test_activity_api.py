"""Tests for activity timeline endpoints."""

from fastapi import status


def _log_series(client, headers, anime_id, **fields):
    response = client.post(
        "/api/v1/logs/anime/series",
        json={"anime_id": anime_id, **fields},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_anime_activity_for_signed_in_user(client, auth_token, anime) -> None:
    logged = _log_series(client, auth_token, anime.id, rating=70, liked=True)

    response = client.get(f"/api/v1/anime/{anime.slug}/activity", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert [row["id"] for row in body] == [logged["id"]]
    assert body[0]["actions"] == ["watched", "liked", "rated"]
    assert body[0]["domain"] == "anime"
    assert body[0]["scope"] == "series"


def test_activity_needs_a_user(client, anime) -> None:
    response = client.get(f"/api/v1/anime/{anime.slug}/activity")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    missing = client.get(f"/api/v1/anime/{anime.slug}/activity", params={"username": "nobody"})
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_other_users_activity_hides_private_logs(client, auth_token, other_auth_token, anime) -> None:
    _log_series(client, auth_token, anime.id, visibility="private")
    public = _log_series(client, auth_token, anime.id, visibility="public")

    body = client.get(
        f"/api/v1/anime/{anime.slug}/activity",
        params={"username": "Alice"},
        headers=other_auth_token,
    ).json()
    assert [row["id"] for row in body] == [public["id"]]


def test_episode_activity(client, auth_token, anime, episodes) -> None:
    response = client.post(
        "/api/v1/logs/anime/episode",
        json={"anime_id": anime.id, "anime_episode_id": episodes[2].id},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED

    body = client.get(f"/api/v1/anime/{anime.slug}/episodes/3/activity", headers=auth_token).json()
    assert [row["sub_label"] for row in body] == ["Episode 3"]

    assert client.get(f"/api/v1/anime/{anime.slug}/activity", headers=auth_token).json() == []
    missing = client.get(f"/api/v1/anime/{anime.slug}/episodes/9/activity", headers=auth_token)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_manga_and_chapter_activity(client, auth_token, manga, manga_chapter) -> None:
    marked = client.put(
        "/api/v1/marks/watchlist",
        json={"manga_id": manga.id},
        headers=auth_token,
    )
    assert marked.status_code == status.HTTP_200_OK

    series = client.get(f"/api/v1/manga/{manga.slug}/activity", headers=auth_token).json()
    assert [(row["kind"], row["type"]) for row in series] == [("mark", "watchlist")]

    response = client.post(
        "/api/v1/logs/manga/chapter",
        json={"manga_id": manga.id, "manga_chapter_id": manga_chapter.id, "note": "hungry now"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    chapter = client.get(f"/api/v1/manga/{manga.slug}/chapters/1/activity", headers=auth_token).json()
    assert [row["note"] for row in chapter] == ["hungry now"]


def test_profile_activity(client, auth_token, anime) -> None:
    _log_series(client, auth_token, anime.id)
    body = client.get("/api/v1/profiles/alice/activity").json()
    assert [row["title"] for row in body] == ["Frieren: Beyond Journey's End"]

    assert client.get("/api/v1/profiles/nobody/activity").status_code == status.HTTP_404_NOT_FOUND
