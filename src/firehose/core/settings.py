"""Application settings and configuration.

This module defines all configuration options for the Firehose application.
Settings are loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the Firehose application.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Firehose", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./firehose.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis configuration for rate-limit counters and leaderboard cache
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    counter_backend: Literal["redis", "memory"] = Field(default="redis", alias="COUNTER_BACKEND")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Scheduled jobs authenticate with a shared secret header
    cron_secret: str | None = Field(default=None, alias="CRON_SECRET")

    # Hotness: (score + w * comments) / (age_hours + c) ** alpha
    hotness_comment_weight: float = Field(default=0.2, alias="HOTNESS_COMMENT_WEIGHT")
    hotness_age_offset_hours: float = Field(default=2.0, alias="HOTNESS_AGE_OFFSET_HOURS")
    hotness_decay_exponent: float = Field(default=1.5, alias="HOTNESS_DECAY_EXPONENT")
    hotness_window_days: int = Field(default=7, alias="HOTNESS_WINDOW_DAYS")

    # Leaderboard
    leaderboard_window_days: int = Field(default=7, alias="LEADERBOARD_WINDOW_DAYS")
    leaderboard_cache_seconds: int = Field(default=3600, alias="LEADERBOARD_CACHE_SECONDS")
    leaderboard_cache_size: int = Field(default=100, alias="LEADERBOARD_CACHE_SIZE")

    # Posts
    post_edit_window_seconds: int = Field(default=2 * 60 * 60, alias="POST_EDIT_WINDOW_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
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
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings for dependency injection."""
    return settings
