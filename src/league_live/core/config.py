"""
Configuration management for League Live.

Uses Pydantic settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables, e.g.
    DATABASE_URL, DATABASE_POOL_SIZE, RATE_LIMIT_ENABLED.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    # ==========================================================================
    # Application Metadata
    # ==========================================================================
    app_name: str = "Sports League API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development", description="development, staging, production")
    log_level: str = "INFO"

    # ==========================================================================
    # Database Configuration
    # ==========================================================================
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection string",
    )
    database_pool_min_size: int = Field(default=1, ge=0, le=50)
    database_pool_size: int = Field(default=10, ge=1, le=50)
    database_pool_timeout: float = Field(
        default=30.0,
        gt=0,
        le=120,
        description="Seconds to wait for a free pool connection before failing",
    )

    @computed_field
    @property
    def db_url(self) -> str:
        """Get the effective database URL."""
        return self.database_url or ""

    # ==========================================================================
    # API Configuration
    # ==========================================================================
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    api_prefix: str = "/api"

    # ==========================================================================
    # CORS Configuration
    # ==========================================================================
    cors_allow_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="Allowed CORS origins. Set to ['*'] for development.",
    )
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["Accept", "Accept-Encoding", "Content-Type"]
    cors_allow_credentials: bool = True
    cors_expose_headers: list[str] = [
        "X-Process-Time",
        "X-RateLimit-Limit",
        "X-RateLimit-Remaining",
        "X-RateLimit-Reset",
    ]

    # ==========================================================================
    # Rate Limiting
    # ==========================================================================
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    rate_limit_requests: int = Field(default=100, description="General requests per window")
    rate_limit_window: int = Field(default=900, description="General window size in seconds")
    rate_limit_create_requests: int = Field(default=10, description="Create requests per window")
    rate_limit_create_window: int = Field(default=900, description="Create window size in seconds")
    rate_limit_events_requests: int = Field(default=30, description="Score event requests per window")
    rate_limit_events_window: int = Field(default=60, description="Score event window size in seconds")

    # ==========================================================================
    # Game Lifecycle
    # ==========================================================================
    strict_status_transitions: bool = Field(
        default=False,
        description="Reject status changes that move a game backwards (e.g. FINISHED -> LIVE)",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
