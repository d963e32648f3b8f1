"""API endpoint modules for version 1."""

from .activity import router as activity_router
from .admin import router as admin_router
from .completions import router as completions_router
from .health import router as health_router
from .logs import router as logs_router
from .marks import router as marks_router
from .media import router as media_router
from .posts import router as posts_router
from .profiles import router as profiles_router
from .reviews import router as reviews_router
from .trending import router as trending_router

__all__ = [
    "activity_router",
    "admin_router",
    "completions_router",
    "health_router",
    "logs_router",
    "marks_router",
    "media_router",
    "posts_router",
    "profiles_router",
    "reviews_router",
    "trending_router",
]
