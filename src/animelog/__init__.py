"""animelog: API and client layer for an anime/manga social tracking site."""

__version__ = "0.1.0"
