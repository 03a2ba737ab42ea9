"""
Configuration management for the red-zone stats pipeline.

Uses Pydantic settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables (e.g. MAX_CONCURRENT_GAMES=8).
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Application Metadata
    # ==========================================================================
    app_name: str = "Red Zone Stats"
    environment: str = Field(default="development", description="development, staging, production")
    log_level: str = Field(default="INFO", description="Root log level for the CLI")

    # ==========================================================================
    # Database Configuration
    # ==========================================================================
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection string",
    )
    neon_database_url: Optional[str] = Field(
        default=None,
        description="Alternative Neon-specific database URL",
    )
    database_pool_size: int = Field(default=5, ge=1, le=50)

    @computed_field
    @property
    def db_url(self) -> str:
        """Get the effective database URL."""
        return self.database_url or self.neon_database_url or ""

    # ==========================================================================
    # ESPN API Configuration
    # ==========================================================================
    espn_site_api_url: str = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"
    espn_core_api_url: str = "https://sports.core.api.espn.com/v2/sports/football/leagues/nfl"
    espn_requests_per_minute: int = Field(default=1200, ge=1)
    http_timeout: float = Field(default=30.0, gt=0)
    http_max_retries: int = Field(default=3, ge=1, le=10)
    plays_page_size: int = Field(default=100, ge=1, le=1000)
    plays_max_pages: int = Field(default=20, ge=1, description="Safety cap on play pages per game")

    # ==========================================================================
    # Refresh Orchestration
    # ==========================================================================
    max_concurrent_games: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Games fetched and segmented at the same time",
    )
    refresh_timeout_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Abort the whole refresh (without writing) after this long",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
