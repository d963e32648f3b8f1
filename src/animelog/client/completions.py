"""Progress and engagement details for completion cards.

Many cards can show the same media; lookups go through a shared
``BoundedCache`` keyed ``user:kind:id`` so each pair is fetched once. All
fetches run under the loader's ``CancelToken``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from animelog.client.api import ClientError
from animelog.services.cache import BoundedCache, cache_key
from animelog.services.cancellation import CancelToken, Cancelled

logger = logging.getLogger(__name__)


class CompletionGateway(Protocol):
    async def get_progress(self, user_id: str, kind: str, media_id: str, *,
                           cancel: CancelToken | None = None) -> dict[str, Any]: ...

    async def get_engagement(self, user_id: str, kind: str, media_id: str, *,
                             cancel: CancelToken | None = None) -> dict[str, Any]: ...


@dataclass
class CompletionDetails:
    progress: dict[str, Any] | None = None
    engagement: dict[str, Any] | None = None
    progress_error: str | None = None
    engagement_error: str | None = None


class CompletionDetailsLoader:
    def __init__(
        self,
        gateway: CompletionGateway,
        *,
        progress_cache: BoundedCache[dict[str, Any]] | None = None,
        engagement_cache: BoundedCache[dict[str, Any]] | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self.gateway = gateway
        self.progress_cache = progress_cache if progress_cache is not None else BoundedCache()
        self.engagement_cache = engagement_cache if engagement_cache is not None else BoundedCache()
        self.cancel = cancel or CancelToken()

    async def progress(self, user_id: str, kind: str, media_id: str) -> dict[str, Any]:
        key = cache_key(user_id, kind, media_id)
        cached = self.progress_cache.get(key)
        if cached is not None:
            return cached
        self.cancel.raise_if_cancelled()
        value = await self.gateway.get_progress(user_id, kind, media_id, cancel=self.cancel)
        self.progress_cache.set(key, value)
        return value

    async def engagement(self, user_id: str, kind: str, media_id: str) -> dict[str, Any]:
        key = cache_key(user_id, kind, media_id)
        cached = self.engagement_cache.get(key)
        if cached is not None:
            return cached
        self.cancel.raise_if_cancelled()
        value = await self.gateway.get_engagement(user_id, kind, media_id, cancel=self.cancel)
        self.engagement_cache.set(key, value)
        return value

    async def retry_progress(self, user_id: str, kind: str, media_id: str) -> dict[str, Any]:
        self.progress_cache.invalidate(cache_key(user_id, kind, media_id))
        return await self.progress(user_id, kind, media_id)

    async def retry_engagement(self, user_id: str, kind: str, media_id: str) -> dict[str, Any]:
        self.engagement_cache.invalidate(cache_key(user_id, kind, media_id))
        return await self.engagement(user_id, kind, media_id)

    async def load(self, user_id: str, kind: str, media_id: str) -> CompletionDetails:
        """Fetch both halves concurrently.

        A failure in one half is reported on the result and does not hide the
        other. Cancellation propagates.
        """
        progress, engagement = await asyncio.gather(
            self.progress(user_id, kind, media_id),
            self.engagement(user_id, kind, media_id),
            return_exceptions=True,
        )
        details = CompletionDetails()
        for name, result in (("progress", progress), ("engagement", engagement)):
            if isinstance(result, Cancelled):
                raise result
            if isinstance(result, ClientError):
                logger.warning("%s lookup failed for %s:%s: %s", name, kind, media_id, result)
                setattr(details, f"{name}_error", str(result) or f"Failed to load {name}")
            elif isinstance(result, BaseException):
                raise result
            else:
                setattr(details, name, result)
        return details

    def invalidate_user(self, user_id: str) -> None:
        prefix = f"{user_id}:"
        self.progress_cache.invalidate_prefix(prefix)
        self.engagement_cache.invalidate_prefix(prefix)

    def close(self) -> None:
        self.cancel.cancel()
