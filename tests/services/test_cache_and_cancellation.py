"""Tests for the bounded cache and cancellation tokens."""

import asyncio

import pytest

from animelog.services.cache import BoundedCache, cache_key
from animelog.services.cancellation import CancelToken, Cancelled


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_cache_evicts_least_recently_used() -> None:
    cache: BoundedCache[int] = BoundedCache(max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)

    assert "b" not in cache
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert len(cache) == 2


def test_cache_entries_expire() -> None:
    clock = FakeClock()
    cache: BoundedCache[str] = BoundedCache(ttl_seconds=10, clock=clock)
    cache.set("k", "v")
    clock.now = 9.9
    assert cache.get("k") == "v"
    clock.now = 10
    assert cache.get("k") is None
    assert len(cache) == 0


def test_invalidate_prefix_only_touches_one_user() -> None:
    cache: BoundedCache[int] = BoundedCache()
    cache.set(cache_key("u1", "anime", "a"), 1)
    cache.set(cache_key("u1", "manga", "m"), 2)
    cache.set(cache_key("u10", "anime", "a"), 3)

    assert cache.invalidate_prefix("u1:") == 2
    assert cache.get(cache_key("u10", "anime", "a")) == 3
    assert cache.invalidate("nope") is False


def test_cache_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        BoundedCache(max_entries=0)


@pytest.mark.asyncio
async def test_token_passes_results_through() -> None:
    token = CancelToken()

    async def work() -> int:
        return 42

    assert await token.run(work()) == 42


@pytest.mark.asyncio
async def test_cancel_aborts_in_flight_work() -> None:
    token = CancelToken()
    started = asyncio.Event()
    finished = False

    async def slow() -> None:
        nonlocal finished
        started.set()
        await asyncio.sleep(10)
        finished = True

    pending = asyncio.create_task(token.run(slow()))
    await started.wait()
    token.cancel()

    with pytest.raises(Cancelled):
        await pending
    assert finished is False


@pytest.mark.asyncio
async def test_cancelled_token_refuses_new_work() -> None:
    token = CancelToken()
    calls: list[str] = []
    token.on_cancel(lambda: calls.append("first"))
    token.cancel()
    token.cancel()
    token.on_cancel(lambda: calls.append("late"))

    async def never() -> None:
        raise AssertionError("should not run")

    with pytest.raises(Cancelled):
        await token.run(never())
    with pytest.raises(Cancelled):
        token.raise_if_cancelled()
    assert calls == ["first", "late"]
