"""Async client SDK: API access plus the client-side feed and completion state."""

from animelog.client.api import AnimelogClient, ClientError
from animelog.client.completions import CompletionDetails, CompletionDetailsLoader
from animelog.client.feed import FeedController, FeedStore

__all__ = [
    "AnimelogClient",
    "ClientError",
    "CompletionDetails",
    "CompletionDetailsLoader",
    "FeedController",
    "FeedStore",
]
