"""Search clients for the external metadata catalogues (TMDB and TheTVDB).

Both clients normalise search results into ``MetadataHit`` and surface every
transport or HTTP failure as ``MetadataError`` so callers can degrade per
source.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from animelog.core.settings import settings
from animelog.utils.artwork import tmdb_image_url

logger = logging.getLogger(__name__)

HTTP_OK = 200
# TheTVDB tokens last about a month; refresh well before that.
TVDB_TOKEN_TTL_SECONDS = 20 * 24 * 60 * 60


class MetadataError(RuntimeError):
    """Base exception for external metadata lookups."""


class MetadataDisabledError(MetadataError):
    """Raised when a provider is used without credentials configured."""


@dataclass(frozen=True)
class MetadataHit:
    """One normalised search result."""

    id: str
    title: str
    year: int | None = None
    first_air_date: str | None = None
    overview: str | None = None
    poster_url: str | None = None
    backdrop_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "first_air_date": self.first_air_date,
            "overview": self.overview,
            "poster_url": self.poster_url,
            "backdrop_url": self.backdrop_url,
        }


def parse_year(value: Any) -> int | None:
    """Extract a year from an int, ``"2013"`` or ``"2013-04-07"``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and len(value) >= 4 and value[:4].isdigit():
        return int(value[:4])
    return None


class _HttpClient:
    """Lazily created ``httpx.AsyncClient`` shared by one provider."""

    source = "metadata"

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.metadata_http_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=httpx.Timeout(self.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_data: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        client = await self._ensure_client()
        try:
            response = await client.request(
                method,
                path,
                params=params,
                json=json_data,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s request %s %s failed: %s", self.source, method, path, exc)
            raise MetadataError(f"{self.source.upper()} request failed: {exc}") from exc

        if response.status_code != HTTP_OK:
            logger.warning(
                "%s responded %s for %s %s", self.source, response.status_code, method, path
            )
            raise MetadataError(f"{self.source.upper()} HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise MetadataError(f"{self.source.upper()} returned invalid JSON") from exc

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class TmdbClient(_HttpClient):
    """TMDB v3 search, authenticated by v4 read token or v3 api key."""

    source = "tmdb"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        read_token: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url or settings.tmdb_api_base,
            timeout_seconds=timeout_seconds,
            transport=transport,
        )
        self.api_key = api_key if api_key is not None else settings.tmdb_api_key
        self.read_token = read_token if read_token is not None else settings.tmdb_v4_read_token

    @property
    def enabled(self) -> bool:
        return bool(self.read_token or self.api_key)

    def _auth(self) -> tuple[dict[str, str], dict[str, str]]:
        if self.read_token:
            return {"Authorization": f"Bearer {self.read_token}"}, {}
        if self.api_key:
            return {}, {"api_key": self.api_key}
        raise MetadataDisabledError("TMDB credentials are not configured")

    async def search_tv(self, query: str) -> list[MetadataHit]:
        q = query.strip()
        if not q:
            return []

        headers, auth_params = self._auth()
        params = {
            "query": q,
            "include_adult": "false",
            "language": "en-US",
            "page": 1,
            **auth_params,
        }
        data = await self._request("GET", "/search/tv", params=params, headers=headers)

        hits: list[MetadataHit] = []
        for row in (data or {}).get("results") or []:
            if row.get("id") is None:
                continue
            first_air = row.get("first_air_date") or None
            hits.append(
                MetadataHit(
                    id=str(row["id"]),
                    title=row.get("name") or row.get("original_name") or "Untitled",
                    year=parse_year(first_air),
                    first_air_date=first_air,
                    overview=row.get("overview"),
                    poster_url=tmdb_image_url(row.get("poster_path"), "w500"),
                    backdrop_url=tmdb_image_url(row.get("backdrop_path"), "w780"),
                )
            )
        return hits


class TvdbClient(_HttpClient):
    """TheTVDB v4 search; logs in once and reuses the bearer token."""

    source = "tvdb"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        pin: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url or settings.tvdb_api_base,
            timeout_seconds=timeout_seconds,
            transport=transport,
        )
        self.api_key = api_key if api_key is not None else settings.tvdb_api_key
        self.pin = pin if pin is not None else settings.tvdb_pin
        self._token: str | None = None
        self._token_obtained_at = 0.0

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    async def _get_token(self) -> str:
        now = time.monotonic()
        if self._token and now - self._token_obtained_at < TVDB_TOKEN_TTL_SECONDS:
            return self._token
        if not self.enabled:
            raise MetadataDisabledError("TVDB api key is not configured")

        body: dict[str, str] = {"apikey": self.api_key.strip()}  # type: ignore[union-attr]
        if self.pin and self.pin.strip():
            body["pin"] = self.pin.strip()

        data = await self._request("POST", "/login", json_data=body)
        token = ((data or {}).get("data") or {}).get("token")
        if not token:
            raise MetadataError("TVDB login returned no token")

        self._token = token
        self._token_obtained_at = now
        return token

    async def search_series(self, query: str) -> list[MetadataHit]:
        q = query.strip()
        if not q:
            return []

        token = await self._get_token()
        data = await self._request(
            "GET",
            "/search",
            params={"type": "series", "q": q},
            headers={"Authorization": f"Bearer {token}"},
        )

        hits: list[MetadataHit] = []
        for row in (data or {}).get("data") or []:
            external_id = row.get("tvdb_id") or row.get("id")
            if external_id is None:
                continue
            hits.append(
                MetadataHit(
                    id=str(external_id),
                    title=row.get("name") or row.get("title") or "Untitled",
                    year=parse_year(row.get("year")),
                    first_air_date=row.get("first_air_time") or None,
                    overview=row.get("overview"),
                    poster_url=row.get("image_url") or None,
                )
            )
        return hits
