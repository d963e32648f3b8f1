"""JWT helpers shared by the API layer and the test suite."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from animelog.core.settings import settings


class InvalidTokenError(ValueError):
    """Raised when a bearer token cannot be decoded or lacks a subject."""


def create_access_token(user_id: str, expires_minutes: int | None = None) -> str:
    """Mint a token in the identity provider's format.

    Only used by tests and local tooling; production tokens come from the
    hosted auth service.
    """
    minutes = expires_minutes or settings.access_token_expire_minutes
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    claims: dict[str, Any] = {"sub": user_id, "exp": expire}
    if settings.jwt_audience:
        claims["aud"] = settings.jwt_audience
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_subject(token: str) -> str:
    """Return the `sub` claim of a valid token.

    Raises:
        InvalidTokenError: If the signature, expiry or audience check fails.
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as err:
        raise InvalidTokenError("Could not validate credentials") from err

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise InvalidTokenError("Could not validate credentials")
    return subject
