"""Star-rating conversions.

Ratings are persisted on a 0-100 scale; the UI shows five stars with
half-star resolution, i.e. ten half-steps.
"""
from __future__ import annotations

import math
from typing import Literal

MAX_HALF_STARS = 10
STAR_COUNT = 5

FillPercent = Literal[0, 50, 100]


def _clamp_int(value: float, low: int, high: int) -> int:
    if not math.isfinite(value):
        return low
    # Half-up rounding, matching how the UI rounds slider values.
    return max(low, min(high, math.floor(value + 0.5)))


def compute_star_fill_percent(half_stars: int, star_index: int) -> FillPercent:
    """Return how much of the 1-based ``star_index``-th star is filled."""
    remaining = half_stars - (star_index - 1) * 2
    if remaining >= 2:
        return 100
    if remaining == 1:
        return 50
    return 0


def star_fills(half_stars: int, stars: int = STAR_COUNT) -> list[FillPercent]:
    hs = _clamp_int(half_stars, 0, stars * 2)
    return [compute_star_fill_percent(hs, i) for i in range(1, stars + 1)]


def rating_to_half_stars(rating: float | None) -> int:
    """Map a 0-100 rating to 0-10 half stars (nearest step)."""
    if rating is None:
        return 0
    return _clamp_int(rating / 10, 0, MAX_HALF_STARS)


def half_stars_to_rating(half_stars: int | None) -> int:
    """Map 0-10 half stars back onto the 0-100 rating scale."""
    if half_stars is None:
        return 0
    return _clamp_int(half_stars, 0, MAX_HALF_STARS) * 10


def format_stars(half_stars: int) -> str:
    """Text rendering used in journal exports, e.g. ``"★★★½"``."""
    hs = _clamp_int(half_stars, 0, MAX_HALF_STARS)
    return "★" * (hs // 2) + ("½" if hs % 2 else "")
