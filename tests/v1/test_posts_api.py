"""Tests for feed, post, like and comment endpoints."""

from datetime import datetime, timezone

from fastapi import status

from animelog.models import Post


def _create(client, headers, content: str = "Watching Frieren tonight", **scope) -> dict:
    response = client.post("/api/v1/posts", json={"content": content, **scope}, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_create_post_success(client, test_user, auth_token, anime) -> None:
    data = _create(client, auth_token, anime_id=anime.id)
    assert data["user_id"] == test_user.id
    assert data["anime_id"] == anime.id
    assert data["content"] == "Watching Frieren tonight"


def test_create_post_requires_auth(client) -> None:
    response = client.post("/api/v1/posts", json={"content": "hi"})
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_invalid_token_rejected(client, test_user) -> None:
    response = client.post(
        "/api/v1/posts",
        json={"content": "hi"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Could not validate credentials"


def test_blank_post_rejected(client, auth_token) -> None:
    response = client.post("/api/v1/posts", json={"content": "   "}, headers=auth_token)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_post_scope_cannot_mix_anime_and_manga(client, auth_token, anime, manga) -> None:
    response = client.post(
        "/api/v1/posts",
        json={"content": "crossover", "anime_id": anime.id, "manga_id": manga.id},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_feed_lists_posts_with_counts(client, auth_token, other_auth_token) -> None:
    post = _create(client, auth_token)
    client.post(f"/api/v1/posts/{post['id']}/like", headers=other_auth_token)
    client.post(f"/api/v1/posts/{post['id']}/comments", json={"content": "same"}, headers=other_auth_token)

    response = client.get("/api/v1/posts", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK
    [item] = response.json()["items"]
    assert item["username"] == "alice"
    assert item["like_count"] == 1
    assert item["reply_count"] == 1
    assert item["liked_by_me"] is True
    assert response.json()["next_cursor"] is None

    anonymous = client.get("/api/v1/posts").json()["items"][0]
    assert anonymous["liked_by_me"] is False


def test_feed_scoped_to_anime(client, auth_token, anime) -> None:
    _create(client, auth_token, content="general")
    scoped = _create(client, auth_token, content="about frieren", anime_id=anime.id)

    items = client.get("/api/v1/posts", params={"anime_id": anime.id}).json()["items"]
    assert [item["id"] for item in items] == [scoped["id"]]


def test_feed_pagination_cursor(client, auth_token) -> None:
    for index in range(3):
        _create(client, auth_token, content=f"post {index}")

    first = client.get("/api/v1/posts", params={"limit": 2}).json()
    assert len(first["items"]) == 2
    cursor = first["next_cursor"]
    assert cursor["id"] == first["items"][-1]["id"]

    second = client.get(
        "/api/v1/posts",
        params={"limit": 2, "before": cursor["created_at"], "before_id": cursor["id"]},
    ).json()
    assert len(second["items"]) == 1
    assert second["next_cursor"] is None
    assert {item["id"] for item in first["items"] + second["items"]} == {
        item["id"] for item in client.get("/api/v1/posts").json()["items"]
    }


def test_like_and_unlike_counts(client, auth_token, other_auth_token) -> None:
    post = _create(client, auth_token)

    liked = client.post(f"/api/v1/posts/{post['id']}/like", headers=other_auth_token)
    assert liked.json() == {"post_id": post["id"], "liked": True, "like_count": 1}
    again = client.post(f"/api/v1/posts/{post['id']}/like", headers=other_auth_token)
    assert again.json()["like_count"] == 1

    unliked = client.delete(f"/api/v1/posts/{post['id']}/like", headers=other_auth_token)
    assert unliked.json()["like_count"] == 0
    twice = client.delete(f"/api/v1/posts/{post['id']}/like", headers=other_auth_token)
    assert twice.json()["like_count"] == 0


def test_like_missing_post(client, auth_token) -> None:
    response = client.post("/api/v1/posts/missing/like", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Post not found"


def test_only_author_can_edit_or_delete(client, auth_token, other_auth_token) -> None:
    post = _create(client, auth_token)

    edit = client.patch(f"/api/v1/posts/{post['id']}", json={"content": "mine now"}, headers=other_auth_token)
    assert edit.status_code == status.HTTP_403_FORBIDDEN
    delete = client.delete(f"/api/v1/posts/{post['id']}", headers=other_auth_token)
    assert delete.status_code == status.HTTP_403_FORBIDDEN

    edit = client.patch(f"/api/v1/posts/{post['id']}", json={"content": "edited"}, headers=auth_token)
    assert edit.status_code == status.HTTP_200_OK
    assert edit.json()["content"] == "edited"
    assert edit.json()["updated_at"] is not None

    delete = client.delete(f"/api/v1/posts/{post['id']}", headers=auth_token)
    assert delete.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/posts").json()["items"] == []


def test_comment_with_foreign_parent_rejected(client, auth_token) -> None:
    first = _create(client, auth_token, content="one")
    second = _create(client, auth_token, content="two")
    comment = client.post(
        f"/api/v1/posts/{first['id']}/comments", json={"content": "reply"}, headers=auth_token
    ).json()

    response = client.post(
        f"/api/v1/posts/{second['id']}/comments",
        json={"content": "lost", "parent_comment_id": comment["id"]},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    listed = client.get(f"/api/v1/posts/{first['id']}/comments").json()
    assert [c["id"] for c in listed] == [comment["id"]]


def test_feed_paging_keeps_posts_with_identical_timestamps(client, test_user, db_session) -> None:
    stamp = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
    posts = [Post(user_id=test_user.id, content=f"same second {n}", created_at=stamp) for n in range(3)]
    db_session.add_all(posts)
    db_session.flush()

    seen: list[str] = []
    params: dict[str, object] = {"limit": 1}
    for _ in range(5):
        page = client.get("/api/v1/posts", params=params).json()
        seen.extend(item["id"] for item in page["items"])
        if page["next_cursor"] is None:
            break
        params = {
            "limit": 1,
            "before": page["next_cursor"]["created_at"],
            "before_id": page["next_cursor"]["id"],
        }

    assert sorted(seen) == sorted(post.id for post in posts)
