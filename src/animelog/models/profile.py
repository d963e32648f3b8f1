# src/animelog/models/profile.py
"""SQLAlchemy model for public user profiles."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from animelog.db.session import Base
from animelog.db.time import utcnow

VISIBILITY_PUBLIC = "public"
VISIBILITY_FRIENDS = "friends"
VISIBILITY_PRIVATE = "private"
VISIBILITIES = (VISIBILITY_PUBLIC, VISIBILITY_FRIENDS, VISIBILITY_PRIVATE)


class Profile(Base):
    """Public face of an account managed by the identity provider.

    The primary key is the identity provider's user id, so a bearer token's
    subject maps directly onto a row here.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # Canonical lower-case form; lookups by username always normalise first.
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    about_md: Mapped[str | None] = mapped_column(Text, nullable=True)
    default_visibility: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=VISIBILITY_PUBLIC,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
