"""TMDB artwork URL helpers."""
from __future__ import annotations

import re
from typing import Any

TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p"
BACKDROP_SIZE = "w1280"
THUMB_SIZE = "w500"

_ORIGINAL_SEGMENT = "/t/p/original/"
_SIZE_SEGMENT_RE = re.compile(r"/t/p/(original|w1280|w780|w500|w342|w300|w185)/")


def normalize_backdrop_url(url: str | None) -> str | None:
    """Downsize full-resolution TMDB backdrops; other hosts pass through."""
    if not url:
        return None
    return url.replace(_ORIGINAL_SEGMENT, f"/t/p/{BACKDROP_SIZE}/")


def normalize_thumb_url(url: str | None) -> str | None:
    if not url:
        return None
    return _SIZE_SEGMENT_RE.sub(f"/t/p/{THUMB_SIZE}/", url)


def tmdb_image_url(path: str | None, size: str = "original") -> str | None:
    """Build an image URL from a TMDB file path such as ``/abc.jpg``."""
    if not path:
        return None
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{TMDB_IMAGE_BASE}/{size}{path}"


def _field(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def artwork_rank_key(row: Any) -> tuple[int, float, int]:
    """Sort key: primary artwork first, then by vote and width, both descending."""
    primary = 0 if _field(row, "is_primary") else 1
    vote = _field(row, "vote") or 0.0
    width = _field(row, "width") or 0
    return (primary, -float(vote), -int(width))


def usable_url(row: Any) -> str | None:
    url = _field(row, "url")
    if isinstance(url, str) and url.strip():
        return url.strip()
    return None
