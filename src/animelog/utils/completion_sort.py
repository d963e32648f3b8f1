"""Ordering and keyset cursors for completion items.

Every sort mode ends with the ``(kind, id)`` tie key, so two distinct items
never compare equal and "load more" pages never overlap or skip rows.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Final, Literal, Protocol

CompletionSort = Literal["last_logged", "pct_desc", "pct_asc"]
SORT_MODES: Final[tuple[str, ...]] = ("last_logged", "pct_desc", "pct_asc")


class SortableCompletion(Protocol):
    kind: str
    id: str
    progress_pct: int | None
    last_logged_at: datetime | None


@dataclass(frozen=True)
class CompletionCursor:
    """Position of the last item of a page."""

    last_logged_at: datetime | None
    kind: str
    id: str
    pct: int | None


def _recency(value: datetime | None) -> tuple[int, float]:
    # Newest first, items never logged last.
    if value is None:
        return (1, 0.0)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (0, -value.timestamp())


def _sort_key(
    sort: str,
    *,
    last_logged_at: datetime | None,
    kind: str,
    item_id: str,
    pct: int | None,
) -> tuple[Any, ...]:
    recency = _recency(last_logged_at)
    tie = (kind, item_id)
    pct_value = -1 if pct is None else pct
    if sort == "last_logged":
        return (recency, tie)
    if sort == "pct_desc":
        return (-pct_value, recency, tie)
    if sort == "pct_asc":
        return (pct_value, recency, tie)
    raise ValueError(f"Unknown completion sort: {sort!r}")


def completion_sort_key(item: SortableCompletion, sort: str = "last_logged") -> tuple[Any, ...]:
    return _sort_key(
        sort,
        last_logged_at=item.last_logged_at,
        kind=item.kind,
        item_id=item.id,
        pct=item.progress_pct,
    )


def cursor_sort_key(cursor: CompletionCursor, sort: str = "last_logged") -> tuple[Any, ...]:
    return _sort_key(
        sort,
        last_logged_at=cursor.last_logged_at,
        kind=cursor.kind,
        item_id=cursor.id,
        pct=cursor.pct,
    )


def compare_completions(
    a: SortableCompletion,
    b: SortableCompletion,
    sort: str = "last_logged",
) -> int:
    """Three-way comparison; 0 only for the same ``(kind, id)``."""
    ka = completion_sort_key(a, sort)
    kb = completion_sort_key(b, sort)
    return (ka > kb) - (ka < kb)


def cursor_for(item: SortableCompletion) -> CompletionCursor:
    return CompletionCursor(
        last_logged_at=item.last_logged_at,
        kind=item.kind,
        id=item.id,
        pct=item.progress_pct,
    )


def is_after_cursor(
    item: SortableCompletion,
    cursor: CompletionCursor | None,
    sort: str = "last_logged",
) -> bool:
    if cursor is None:
        return True
    return completion_sort_key(item, sort) > cursor_sort_key(cursor, sort)
