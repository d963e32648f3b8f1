"""Structured cancellation for grouped async fetches.

A view that goes away cancels its token; every request started through
``CancelToken.run`` is then aborted at the task level instead of being left
to finish and have its result ignored.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


class Cancelled(Exception):
    """Raised when work is attempted or interrupted under a cancelled token."""


class CancelToken:
    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: set[asyncio.Future] = set()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        for task in list(self._tasks):
            task.cancel()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise Cancelled("Operation cancelled")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token is cancelled first.

        Raises:
            Cancelled: If the token was cancelled before or during the await.
        """
        if self._cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise Cancelled("Operation cancelled")

        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            if self._cancelled:
                raise Cancelled("Operation cancelled") from None
            raise
        finally:
            self._tasks.discard(task)
