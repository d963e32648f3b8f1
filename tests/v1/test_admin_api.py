"""Tests for the auto-link admin endpoint."""

import httpx
import pytest
from fastapi import status

from animelog.api.v1.dependencies import get_tmdb_client, get_tvdb_client
from animelog.core.settings import settings
from animelog.services.metadata import TmdbClient, TvdbClient

TMDB_RESULTS = {
    "results": [
        {"id": 209867, "name": "Frieren: Beyond Journey's End", "first_air_date": "2023-09-29"},
    ]
}


def _tmdb_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=TMDB_RESULTS)


@pytest.fixture()
def metadata_clients(app):
    async def _tmdb():
        client = TmdbClient(read_token="tmdb-token", transport=httpx.MockTransport(_tmdb_handler))
        try:
            yield client
        finally:
            await client.close()

    async def _tvdb():
        client = TvdbClient(api_key="")
        try:
            yield client
        finally:
            await client.close()

    app.dependency_overrides[get_tmdb_client] = _tmdb
    app.dependency_overrides[get_tvdb_client] = _tvdb
    yield
    app.dependency_overrides.pop(get_tmdb_client, None)
    app.dependency_overrides.pop(get_tvdb_client, None)


@pytest.fixture()
def import_secret(monkeypatch):
    monkeypatch.setattr(settings, "admin_import_secret", "s3cret")
    return "s3cret"


def test_auto_link_success(client, anime, metadata_clients, import_secret) -> None:
    response = client.post(
        "/api/v1/admin/auto-link-anime",
        json={"animeId": anime.id},
        headers={"X-Import-Secret": import_secret},
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert data["anime_id"] == anime.id
    assert data["query"] == {"title": "Frieren: Beyond Journey's End", "year": 2023, "episodes": 4}
    assert data["best"]["tmdb"]["tmdb_id"] == "209867"
    assert data["best"]["tvdb"] == {"error": "TVDB api key is not configured"}


def test_secret_accepted_in_body(client, anime, metadata_clients, import_secret) -> None:
    response = client.post(
        "/api/v1/admin/auto-link-anime",
        json={"animeId": anime.id, "secret": import_secret},
    )
    assert response.status_code == status.HTTP_200_OK


def test_wrong_secret_unauthorized(client, anime, metadata_clients, import_secret) -> None:
    response = client.post(
        "/api/v1/admin/auto-link-anime",
        json={"animeId": anime.id},
        headers={"X-Import-Secret": "nope"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Unauthorized"


def test_missing_anime_id(client, metadata_clients, import_secret) -> None:
    response = client.post(
        "/api/v1/admin/auto-link-anime",
        json={},
        headers={"X-Import-Secret": import_secret},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Missing animeId"


def test_unknown_anime(client, metadata_clients, import_secret) -> None:
    response = client.post(
        "/api/v1/admin/auto-link-anime",
        json={"animeId": "missing"},
        headers={"X-Import-Secret": import_secret},
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Anime not found"
