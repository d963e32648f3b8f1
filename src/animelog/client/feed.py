"""Client-side feed state.

``FeedStore`` is the single normalised copy of what the feed shows. Views
read it only through selectors, and every change goes through
``FeedStore.dispatch``, so a like toggled in one place shows up everywhere.
``FeedController`` wires user actions to the API and the store.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from animelog.client.api import ClientError
from animelog.services.cancellation import CancelToken, Cancelled

logger = logging.getLogger(__name__)


class FeedGateway(Protocol):
    async def fetch_feed(self, *, before: datetime | None = None, before_id: str | None = None,
                         limit: int | None = None, cancel: CancelToken | None = None,
                         **scope: str | None) -> dict[str, Any]: ...

    async def create_post(self, content: str, *, cancel: CancelToken | None = None,
                          **scope: str | None) -> dict[str, Any]: ...

    async def like_post(self, post_id: str, *, cancel: CancelToken | None = None) -> dict[str, Any]: ...

    async def unlike_post(self, post_id: str, *, cancel: CancelToken | None = None) -> dict[str, Any]: ...


@dataclass(frozen=True)
class PostsLoaded:
    items: list[dict[str, Any]]
    append: bool = False


@dataclass(frozen=True)
class PostAdded:
    post: dict[str, Any]


@dataclass(frozen=True)
class PostRemoved:
    post_id: str


@dataclass(frozen=True)
class LikeSet:
    post_id: str
    liked: bool


FeedEvent = PostsLoaded | PostAdded | PostRemoved | LikeSet


@dataclass
class FeedStore:
    posts: dict[str, dict[str, Any]] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    like_counts: dict[str, int] = field(default_factory=dict)
    reply_counts: dict[str, int] = field(default_factory=dict)
    liked: set[str] = field(default_factory=set)

    def dispatch(self, event: FeedEvent) -> None:
        if isinstance(event, PostsLoaded):
            if not event.append:
                self.posts.clear()
                self.order.clear()
                self.like_counts.clear()
                self.reply_counts.clear()
                self.liked.clear()
            for item in event.items:
                self._ingest(item, prepend=False)
        elif isinstance(event, PostAdded):
            self._ingest(event.post, prepend=True)
        elif isinstance(event, PostRemoved):
            self.posts.pop(event.post_id, None)
            self.like_counts.pop(event.post_id, None)
            self.reply_counts.pop(event.post_id, None)
            self.liked.discard(event.post_id)
            if event.post_id in self.order:
                self.order.remove(event.post_id)
        elif isinstance(event, LikeSet):
            self._set_like(event.post_id, event.liked)
        else:
            raise TypeError(f"Unknown feed event: {event!r}")

    def _ingest(self, item: dict[str, Any], *, prepend: bool) -> None:
        post_id = item["id"]
        if post_id not in self.posts:
            if prepend:
                self.order.insert(0, post_id)
            else:
                self.order.append(post_id)
        self.posts[post_id] = {
            key: value
            for key, value in item.items()
            if key not in ("like_count", "reply_count", "liked_by_me")
        }
        self.like_counts[post_id] = int(item.get("like_count") or 0)
        self.reply_counts[post_id] = int(item.get("reply_count") or 0)
        if item.get("liked_by_me"):
            self.liked.add(post_id)
        else:
            self.liked.discard(post_id)

    def _set_like(self, post_id: str, liked: bool) -> None:
        if post_id not in self.posts or liked == (post_id in self.liked):
            return
        count = self.like_counts.get(post_id, 0)
        if liked:
            self.liked.add(post_id)
            self.like_counts[post_id] = count + 1
        else:
            self.liked.discard(post_id)
            self.like_counts[post_id] = max(0, count - 1)

    # Selectors

    def like_count(self, post_id: str) -> int:
        return self.like_counts.get(post_id, 0)

    def reply_count(self, post_id: str) -> int:
        return self.reply_counts.get(post_id, 0)

    def liked_by(self, post_id: str) -> bool:
        """Whether the viewer likes ``post_id``."""
        return post_id in self.liked

    def visible_posts(self, search: str | None = None) -> list[dict[str, Any]]:
        """Posts in feed order with derived counts, filtered by substring."""
        needle = (search or "").strip().lower()
        rows = []
        for post_id in self.order:
            post = self.posts[post_id]
            if needle and needle not in (post.get("content") or "").lower() and needle not in (
                post.get("username") or ""
            ).lower():
                continue
            rows.append(
                {
                    **post,
                    "like_count": self.like_count(post_id),
                    "reply_count": self.reply_count(post_id),
                    "liked_by_me": self.liked_by(post_id),
                }
            )
        return rows


class FeedController:
    """User-facing feed actions.

    Logged-out likes and posts call ``on_auth_required`` and never reach the
    API.
    """

    def __init__(
        self,
        gateway: FeedGateway,
        *,
        viewer_id: str | None = None,
        on_auth_required: Callable[[], None] | None = None,
        store: FeedStore | None = None,
        cancel: CancelToken | None = None,
        page_size: int = 50,
        **scope: str | None,
    ) -> None:
        self.gateway = gateway
        self.viewer_id = viewer_id
        self.on_auth_required = on_auth_required or (lambda: None)
        self.store = store or FeedStore()
        self.cancel = cancel or CancelToken()
        self.page_size = page_size
        self.scope = {k: v for k, v in scope.items() if v is not None}
        self.error: str | None = None
        self.loading = False
        # (created_at, id) of the last loaded post.
        self.next_cursor: tuple[datetime, str | None] | None = None

    @property
    def logged_in(self) -> bool:
        return self.viewer_id is not None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    async def _fetch(self, cursor: tuple[datetime, str | None] | None) -> dict[str, Any] | None:
        self.loading = True
        self.error = None
        before, before_id = cursor if cursor is not None else (None, None)
        try:
            return await self.gateway.fetch_feed(
                before=before,
                before_id=before_id,
                limit=self.page_size,
                cancel=self.cancel,
                **self.scope,
            )
        except ClientError as exc:
            logger.warning("feed load failed: %s", exc)
            self.error = str(exc) or "Failed to load posts"
            return None
        finally:
            self.loading = False

    @staticmethod
    def _cursor(page: dict[str, Any]) -> tuple[datetime, str | None] | None:
        value = page.get("next_cursor")
        if not value:
            return None
        created_at = value["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return created_at, value.get("id")

    async def load(self) -> None:
        page = await self._fetch(None)
        if page is None:
            return
        self.store.dispatch(PostsLoaded(items=page.get("items") or []))
        self.next_cursor = self._cursor(page)

    async def load_more(self) -> None:
        if self.next_cursor is None or self.loading:
            return
        page = await self._fetch(self.next_cursor)
        if page is None:
            return
        self.store.dispatch(PostsLoaded(items=page.get("items") or [], append=True))
        self.next_cursor = self._cursor(page)

    def can_post(self, content: str | None) -> bool:
        return self.logged_in and bool(content and content.strip())

    async def post(self, content: str | None) -> dict[str, Any] | None:
        """Publish ``content``; blank drafts are ignored."""
        if not content or not content.strip():
            return None
        if not self.logged_in:
            self.on_auth_required()
            return None
        try:
            created = await self.gateway.create_post(content.strip(), cancel=self.cancel, **self.scope)
        except ClientError as exc:
            self.error = str(exc) or "Failed to post"
            return None
        self.store.dispatch(PostAdded(post=created))
        return created

    async def toggle_like(self, post_id: str) -> bool:
        """Flip the viewer's like optimistically; returns the new liked state.

        The optimistic change is rolled back if the API call fails.
        """
        if not self.logged_in:
            self.on_auth_required()
            return self.store.liked_by(post_id)
        if post_id not in self.store.posts:
            return False

        want = not self.store.liked_by(post_id)
        self.store.dispatch(LikeSet(post_id=post_id, liked=want))
        try:
            if want:
                await self.gateway.like_post(post_id, cancel=self.cancel)
            else:
                await self.gateway.unlike_post(post_id, cancel=self.cancel)
        except (ClientError, Cancelled) as exc:
            self.store.dispatch(LikeSet(post_id=post_id, liked=not want))
            if isinstance(exc, Cancelled):
                raise
            self.error = str(exc) or "Failed to update like"
        return self.store.liked_by(post_id)

    def close(self) -> None:
        """Abort any in-flight request; called when the view goes away."""
        self.cancel.cancel()
