"""Application settings and configuration.

This module defines all configuration options for the animelog service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="animelog", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Tokens are minted by the hosted identity provider and verified with its
    # shared JWT secret; `sub` carries the profile id.
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_audience: str | None = Field(default=None, alias="JWT_AUDIENCE")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./animelog.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Admin routes; an empty secret leaves them open for local development
    admin_import_secret: str | None = Field(default=None, alias="ADMIN_IMPORT_SECRET")

    # External metadata services
    tmdb_api_base: str = Field(default="https://api.themoviedb.org/3", alias="TMDB_API_BASE")
    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_v4_read_token: str | None = Field(default=None, alias="TMDB_V4_READ_TOKEN")
    tvdb_api_base: str = Field(default="https://api4.thetvdb.com/v4", alias="TVDB_API_BASE")
    tvdb_api_key: str | None = Field(default=None, alias="TVDB_API_KEY")
    tvdb_pin: str | None = Field(default=None, alias="TVDB_PIN")
    metadata_http_timeout_seconds: float = Field(
        default=10.0,
        alias="METADATA_HTTP_TIMEOUT_SECONDS",
    )

    # Auto-link thresholds
    auto_link_backfill_confidence: int = Field(
        default=90,
        alias="AUTO_LINK_BACKFILL_CONFIDENCE",
    )

    # Feed and page rendering
    feed_page_size: int = Field(default=50, alias="FEED_PAGE_SIZE")
    completions_page_size: int = Field(default=60, alias="COMPLETIONS_PAGE_SIZE")
    backdrop_candidate_limit: int = Field(default=50, alias="BACKDROP_CANDIDATE_LIMIT")
    backdrop_pool_size: int = Field(default=12, alias="BACKDROP_POOL_SIZE")
    ring_segment_cap: int = Field(default=120, alias="RING_SEGMENT_CAP")
    trending_window_days: int = Field(default=7, alias="TRENDING_WINDOW_DAYS")

    # Shared progress/engagement cache
    cache_max_entries: int = Field(default=1024, alias="CACHE_MAX_ENTRIES")
    cache_ttl_seconds: float | None = Field(default=300.0, alias="CACHE_TTL_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
