"""Shared API dependencies for authentication and common functionality."""

import secrets
from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from animelog.core.security import InvalidTokenError, decode_subject
from animelog.core.settings import settings
from animelog.db.session import get_db
from animelog.models import Profile
from animelog.services.cache import BoundedCache
from animelog.services.metadata import TmdbClient, TvdbClient

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _profile_for_token(token: str, db: Session) -> Profile:
    try:
        user_id = decode_subject(token)
    except InvalidTokenError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    profile = db.get(Profile, user_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return profile


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> Profile:
    """Get the current authenticated user's profile from the JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        Profile of the authenticated user

    Raises:
        HTTPException: If token is invalid or the profile does not exist
    """
    return _profile_for_token(credentials.credentials, db)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> Profile | None:
    """Like ``get_current_user`` but anonymous readers get None."""
    if credentials is None:
        return None
    return _profile_for_token(credentials.credentials, db)


# Type alias for current user dependency
CurrentUserDep = Annotated[Profile, Depends(get_current_user)]
OptionalUserDep = Annotated[Profile | None, Depends(get_optional_user)]


def secret_matches(provided: str | None) -> bool:
    """True when no admin secret is configured or ``provided`` equals it."""
    expected = settings.admin_import_secret
    if not expected:
        return True
    return bool(provided) and secrets.compare_digest(provided, expected)


def import_secret_header(
    x_import_secret: Annotated[str | None, Header(alias="X-Import-Secret")] = None,
) -> str | None:
    return x_import_secret


@lru_cache
def get_progress_cache() -> BoundedCache[dict[str, int | None]]:
    """Process-wide progress cache, keyed ``user:kind:id``."""
    return BoundedCache(settings.cache_max_entries, settings.cache_ttl_seconds)


@lru_cache
def get_engagement_cache() -> BoundedCache[dict[str, int]]:
    return BoundedCache(settings.cache_max_entries, settings.cache_ttl_seconds)


def invalidate_user_caches(user_id: str) -> None:
    """Drop cached progress/engagement after the user writes logs, reviews or marks."""
    prefix = f"{user_id}:"
    get_progress_cache().invalidate_prefix(prefix)
    get_engagement_cache().invalidate_prefix(prefix)


async def get_tmdb_client() -> AsyncGenerator[TmdbClient, None]:
    client = TmdbClient()
    try:
        yield client
    finally:
        await client.close()


async def get_tvdb_client() -> AsyncGenerator[TvdbClient, None]:
    client = TvdbClient()
    try:
        yield client
    finally:
        await client.close()


ProgressCacheDep = Annotated[BoundedCache, Depends(get_progress_cache)]
EngagementCacheDep = Annotated[BoundedCache, Depends(get_engagement_cache)]
TmdbClientDep = Annotated[TmdbClient, Depends(get_tmdb_client)]
TvdbClientDep = Annotated[TvdbClient, Depends(get_tvdb_client)]
