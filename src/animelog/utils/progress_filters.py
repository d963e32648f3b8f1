"""Progress-bucket filters for the completions page."""
from __future__ import annotations

import math
from typing import Final, NamedTuple

PROGRESS_FILTER_OPTIONS: Final[tuple[tuple[str, str], ...]] = (
    ("all", "All progress"),
    ("100", "100% complete"),
    ("90-99", "90–99%"),
    ("80-89", "80–89%"),
    ("70-79", "70–79%"),
    ("60-69", "60–69%"),
    ("50-59", "50–59%"),
    ("40-49", "40–49%"),
    ("30-39", "30–39%"),
    ("20-29", "20–29%"),
    ("10-19", "10–19%"),
    ("0-9", "0–9%"),
    ("unknown", "Unknown progress"),
)
PROGRESS_FILTERS: Final[frozenset[str]] = frozenset(value for value, _ in PROGRESS_FILTER_OPTIONS)

# Buckets that partition [0, 100]; used for the per-bucket counts.
PERCENT_BUCKETS: Final[tuple[str, ...]] = tuple(
    value for value, _ in PROGRESS_FILTER_OPTIONS if value not in ("all", "unknown")
)


class ProgressRange(NamedTuple):
    min_pct: int | None
    max_pct: int | None


def parse_progress_bucket(value: str) -> ProgressRange:
    """Translate a filter option into an inclusive percentage range.

    ``"all"`` and ``"unknown"`` carry no range. Raises ``ValueError`` for
    anything outside the fixed option set.
    """
    if value not in PROGRESS_FILTERS:
        raise ValueError(f"Unknown progress filter: {value!r}")
    if value in ("all", "unknown"):
        return ProgressRange(None, None)
    if "-" not in value:
        pct = int(value)
        return ProgressRange(pct, pct)
    low, high = value.split("-", 1)
    return ProgressRange(int(low), int(high))


def normalize_pct(pct: float | None) -> int | None:
    if pct is None or not math.isfinite(pct):
        return None
    return max(0, min(100, math.floor(pct)))


def pct_from(current: int, total: int) -> int | None:
    """Floor percentage of ``current / total``; None when total is not positive."""
    if total <= 0:
        return None
    return normalize_pct(current / total * 100)


def matches_progress_filter(pct: float | None, bucket: str) -> bool:
    if bucket == "all":
        return True

    clamped = normalize_pct(pct)
    if clamped is None:
        return bucket == "unknown"
    if bucket == "unknown":
        return False

    low, high = parse_progress_bucket(bucket)
    return low <= clamped <= high  # type: ignore[operator]


def bucket_for(pct: float | None) -> str:
    """Return the percent bucket holding ``pct`` (or ``"unknown"``)."""
    clamped = normalize_pct(pct)
    if clamped is None:
        return "unknown"
    for bucket in PERCENT_BUCKETS:
        if matches_progress_filter(clamped, bucket):
            return bucket
    return "unknown"  # pragma: no cover - buckets cover 0..100
