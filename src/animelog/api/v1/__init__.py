"""Version 1 API endpoints."""

from .endpoints import (
    activity_router,
    admin_router,
    completions_router,
    health_router,
    logs_router,
    marks_router,
    media_router,
    posts_router,
    profiles_router,
    reviews_router,
    trending_router,
)

ROUTERS = (
    media_router,
    posts_router,
    reviews_router,
    logs_router,
    activity_router,
    marks_router,
    completions_router,
    profiles_router,
    trending_router,
    admin_router,
    health_router,
)

__all__ = [
    "ROUTERS",
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
