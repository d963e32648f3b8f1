# src/animelog/models/__init__.py
"""SQLAlchemy models for the animelog application."""

from .artwork import AnimeArtwork, AnimeExternalLink, MangaArtwork
from .follow import UserFollow
from .log import AnimeEpisodeLog, AnimeSeriesLog, MangaChapterLog, MangaSeriesLog
from .mark import UserMark
from .media import Anime, AnimeEpisode, Manga, MangaChapter
from .post import Comment, Post, PostLike
from .profile import Profile
from .review import Review

__all__ = [
    "AnimeArtwork", "AnimeExternalLink", "MangaArtwork",
    "UserFollow",
    "AnimeEpisodeLog", "AnimeSeriesLog", "MangaChapterLog", "MangaSeriesLog",
    "UserMark",
    "Anime", "AnimeEpisode", "Manga", "MangaChapter",
    "Comment", "Post", "PostLike",
    "Profile",
    "Review",
]
