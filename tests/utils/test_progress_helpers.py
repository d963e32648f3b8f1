"""Tests for progress buckets and completion ordering."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from itertools import permutations

import pytest

from animelog.utils.completion_sort import (
    SORT_MODES,
    compare_completions,
    completion_sort_key,
    cursor_for,
    is_after_cursor,
)
from animelog.utils.progress_filters import (
    PERCENT_BUCKETS,
    bucket_for,
    matches_progress_filter,
    parse_progress_bucket,
    pct_from,
)

T0 = datetime(2025, 3, 1, tzinfo=timezone.utc)


@dataclass
class Item:
    kind: str
    id: str
    progress_pct: int | None
    last_logged_at: datetime | None


def test_pct_from_floors_and_handles_empty_totals() -> None:
    assert pct_from(1, 3) == 33
    assert pct_from(2, 3) == 66
    assert pct_from(3, 3) == 100
    assert pct_from(0, 0) is None


@pytest.mark.parametrize("pct", range(0, 101))
def test_every_percentage_lands_in_exactly_one_bucket(pct: int) -> None:
    matching = [bucket for bucket in PERCENT_BUCKETS if matches_progress_filter(pct, bucket)]
    assert matching == [bucket_for(pct)]


def test_unknown_bucket_only_matches_missing_progress() -> None:
    assert matches_progress_filter(None, "unknown")
    assert not matches_progress_filter(0, "unknown")
    assert not matches_progress_filter(None, "0-9")
    assert matches_progress_filter(None, "all")


def test_parse_progress_bucket() -> None:
    assert parse_progress_bucket("90-99") == (90, 99)
    assert parse_progress_bucket("100") == (100, 100)
    assert parse_progress_bucket("all") == (None, None)
    with pytest.raises(ValueError):
        parse_progress_bucket("95-100")


def _items() -> list[Item]:
    return [
        Item("anime", "a1", 50, T0),
        Item("anime", "a2", 50, T0),
        Item("manga", "a1", 50, T0),
        Item("anime", "a3", None, T0 + timedelta(days=1)),
        Item("manga", "m9", 100, None),
        Item("anime", "a4", 0, T0 - timedelta(days=2)),
    ]


@pytest.mark.parametrize("sort", SORT_MODES)
def test_distinct_items_never_compare_equal(sort: str) -> None:
    for a, b in permutations(_items(), 2):
        assert compare_completions(a, b, sort) != 0
        assert compare_completions(a, b, sort) == -compare_completions(b, a, sort)


def test_last_logged_sort_is_newest_first_with_unlogged_last() -> None:
    ordered = sorted(_items(), key=lambda item: completion_sort_key(item, "last_logged"))
    assert ordered[0].id == "a3"
    assert ordered[-1].id == "m9"


def test_pct_sorts_are_mirror_images_on_pct() -> None:
    items = [item for item in _items() if item.progress_pct is not None]
    desc = [item.progress_pct for item in sorted(items, key=lambda i: completion_sort_key(i, "pct_desc"))]
    asc = [item.progress_pct for item in sorted(items, key=lambda i: completion_sort_key(i, "pct_asc"))]
    assert desc == sorted(desc, reverse=True)
    assert asc == sorted(asc)


@pytest.mark.parametrize("sort", SORT_MODES)
def test_cursor_pages_neither_overlap_nor_skip(sort: str) -> None:
    ordered = sorted(_items(), key=lambda item: completion_sort_key(item, sort))
    seen: list[Item] = []
    cursor = None
    while True:
        page = [item for item in ordered if is_after_cursor(item, cursor, sort)][:2]
        if not page:
            break
        seen.extend(page)
        cursor = cursor_for(page[-1])
    assert seen == ordered


def test_unknown_sort_mode_rejected() -> None:
    with pytest.raises(ValueError):
        completion_sort_key(_items()[0], "alphabetical")
