"""Database session configuration."""

from __future__ import annotations

import uuid
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from animelog.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def new_id() -> str:
    """Return a fresh string UUID used as primary key for most tables."""
    return str(uuid.uuid4())


# Import the models so Base.metadata lists every table (alembic, test fixtures).
import animelog.models  # noqa: E402,F401

_connect_args = (
    {"check_same_thread": False}
    if settings.effective_database_url.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
