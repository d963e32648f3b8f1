# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-animelog")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from animelog.api.v1.dependencies import get_engagement_cache, get_progress_cache
from animelog.core.security import create_access_token
from animelog.db.session import Base
from animelog.db.session import get_db as app_get_session
from animelog.main import app as fastapi_app
from animelog.models import Anime, AnimeEpisode, Manga, MangaChapter, Profile

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def reset_shared_caches() -> Iterator[None]:
    """Process-wide caches must not leak entries between tests."""
    get_progress_cache().clear()
    get_engagement_cache().clear()
    yield
    get_progress_cache().clear()
    get_engagement_cache().clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _profile(db_session: Session, user_id: str, username: str) -> Profile:
    profile = Profile(id=user_id, username=username)
    db_session.add(profile)
    db_session.flush()
    db_session.refresh(profile)
    return profile


@pytest.fixture()
def test_user(db_session: Session) -> Iterator[Profile]:
    """Create and return the primary persisted profile."""
    yield _profile(db_session, "11111111-1111-4111-8111-111111111111", "alice")


@pytest.fixture()
def other_user(db_session: Session) -> Iterator[Profile]:
    """Create and return a second persisted profile."""
    yield _profile(db_session, "22222222-2222-4222-8222-222222222222", "bob")


@pytest.fixture()
def auth_token(test_user: Profile) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def other_auth_token(other_user: Profile) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    token = create_access_token(other_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def anime(db_session: Session) -> Iterator[Anime]:
    """A four-episode series."""
    show = Anime(
        id="aaaaaaaa-0000-4000-8000-000000000001",
        slug="frieren-beyond-journeys-end",
        title="Sousou no Frieren",
        title_english="Frieren: Beyond Journey's End",
        total_episodes=4,
        season_year=2023,
        banner_image_url="https://img.example/banner.jpg",
    )
    db_session.add(show)
    db_session.flush()
    for number in range(1, 5):
        db_session.add(
            AnimeEpisode(
                id=f"eeeeeeee-0000-4000-8000-00000000000{number}",
                anime_id=show.id,
                episode_number=number,
                title=f"Episode {number}",
            )
        )
    db_session.flush()
    db_session.refresh(show)
    yield show


@pytest.fixture()
def episodes(db_session: Session, anime: Anime) -> list[AnimeEpisode]:
    return (
        db_session.query(AnimeEpisode)
        .filter(AnimeEpisode.anime_id == anime.id)
        .order_by(AnimeEpisode.episode_number)
        .all()
    )


@pytest.fixture()
def manga(db_session: Session) -> Iterator[Manga]:
    """A manga with no chapters in the catalogue."""
    book = Manga(
        id="bbbbbbbb-0000-4000-8000-000000000001",
        slug="dungeon-meshi",
        title="Dungeon Meshi",
        title_english="Delicious in Dungeon",
    )
    db_session.add(book)
    db_session.flush()
    db_session.refresh(book)
    yield book


@pytest.fixture()
def manga_chapter(db_session: Session, manga: Manga) -> MangaChapter:
    chapter = MangaChapter(
        id="cccccccc-0000-4000-8000-000000000001",
        manga_id=manga.id,
        chapter_number=1,
        title="Hot Pot",
    )
    db_session.add(chapter)
    db_session.flush()
    return chapter
