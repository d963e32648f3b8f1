"""Async HTTP client for the animelog API.

Every request can run under a ``CancelToken``; cancelling the token aborts
the in-flight request instead of discarding its result afterwards.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

import httpx

from animelog.services.cancellation import CancelToken

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
HTTP_NO_CONTENT = 204
HTTP_BAD_REQUEST = 400


class ClientError(RuntimeError):
    """Raised for transport failures and non-success responses."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AnimelogClient:
    """Thin wrapper over ``httpx.AsyncClient`` bound to one bearer token."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> AnimelogClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=httpx.Timeout(self.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_data: Any | None = None,
    ) -> Any:
        client = await self._ensure_client()
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            response = await client.request(
                method,
                f"{API_PREFIX}{path}",
                params=clean_params or None,
                json=json_data,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.warning("request %s %s failed: %s", method, path, exc)
            raise ClientError(f"Request failed: {exc}") from exc

        if response.status_code >= HTTP_BAD_REQUEST:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = None
            message = detail if isinstance(detail, str) else f"HTTP {response.status_code}"
            raise ClientError(message, status_code=response.status_code)

        if response.status_code == HTTP_NO_CONTENT or not response.content:
            return None
        return response.json()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_data: Any | None = None,
        cancel: CancelToken | None = None,
    ) -> Any:
        call = self._send(method, path, params=params, json_data=json_data)
        if cancel is None:
            return await call
        return await cancel.run(call)

    async def fetch_feed(
        self,
        *,
        before: datetime | None = None,
        before_id: str | None = None,
        limit: int | None = None,
        cancel: CancelToken | None = None,
        **scope: str | None,
    ) -> dict[str, Any]:
        """One feed page; ``before``/``before_id`` come from the previous ``next_cursor``."""
        params: dict[str, Any] = {**scope, "limit": limit}
        if before is not None:
            params["before"] = before.isoformat()
            params["before_id"] = before_id
        return await self.request("GET", "/posts", params=params, cancel=cancel)

    async def create_post(self, content: str, *, cancel: CancelToken | None = None, **scope: str | None) -> dict[str, Any]:
        body = {"content": content, **{k: v for k, v in scope.items() if v is not None}}
        return await self.request("POST", "/posts", json_data=body, cancel=cancel)

    async def like_post(self, post_id: str, *, cancel: CancelToken | None = None) -> dict[str, Any]:
        return await self.request("POST", f"/posts/{post_id}/like", cancel=cancel)

    async def unlike_post(self, post_id: str, *, cancel: CancelToken | None = None) -> dict[str, Any]:
        return await self.request("DELETE", f"/posts/{post_id}/like", cancel=cancel)

    async def get_progress(
        self,
        user_id: str,
        kind: str,
        media_id: str,
        *,
        cancel: CancelToken | None = None,
    ) -> dict[str, Any]:
        params = {"userId": user_id, "kind": kind, "id": media_id}
        return await self.request("GET", "/completions/progress", params=params, cancel=cancel)

    async def get_engagement(
        self,
        user_id: str,
        kind: str,
        media_id: str,
        *,
        cancel: CancelToken | None = None,
    ) -> dict[str, Any]:
        params = {"userId": user_id, "kind": kind, "id": media_id}
        return await self.request("GET", "/completions/engagement", params=params, cancel=cancel)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
