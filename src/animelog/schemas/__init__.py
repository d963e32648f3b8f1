"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin import AutoLinkRequest, AutoLinkResponse
from .completion import CompletionItem, CompletionPage, EngagementResponse, ProgressResponse
from .media import AnimeDetail, AnimeSummary, MangaDetail, MangaSummary
from .post import CommentCreate, FeedPage, PostCreate, PostResponse
from .profile import ProfileResponse
from .review import ReviewResponse, ReviewUpsert

__all__ = [
    "AutoLinkRequest", "AutoLinkResponse",
    "CompletionItem", "CompletionPage", "EngagementResponse", "ProgressResponse",
    "AnimeDetail", "AnimeSummary", "MangaDetail", "MangaSummary",
    "CommentCreate", "FeedPage", "PostCreate", "PostResponse",
    "ProfileResponse",
    "ReviewResponse", "ReviewUpsert",
]
