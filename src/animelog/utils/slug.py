"""Slug and username normalisation."""
from __future__ import annotations

import re

_QUOTES = re.compile(r"['\"]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

UNTITLED_SLUG = "untitled"


def slugify(text: str | None) -> str:
    """Return the URL slug used for anime/manga routes.

    Quotes are dropped so "Frieren's Journey" does not gain a stray hyphen,
    every other run of non-alphanumerics becomes one hyphen, and the result
    never starts or ends with a hyphen. Empty results fall back to
    ``"untitled"``.
    """
    s = (text or "").lower().strip()
    s = _QUOTES.sub("", s)
    s = _NON_ALNUM.sub("-", s).strip("-")
    return s or UNTITLED_SLUG


def canonical_username(name: str | None) -> str:
    """Usernames are stored and compared in trimmed lower-case form."""
    return (name or "").strip().lower()
