"""Business logic services for the animelog application."""

from .cache import BoundedCache
from .cancellation import CancelToken, Cancelled
from .metadata import MetadataError, TmdbClient, TvdbClient

__all__ = [
    "BoundedCache",
    "CancelToken",
    "Cancelled",
    "MetadataError",
    "TmdbClient",
    "TvdbClient",
]
