"""
ResourceHub Configuration Management

Uses Pydantic Settings for type-safe configuration from environment variables.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # =========================================================================
    # APPLICATION
    # =========================================================================
    APP_NAME: str = "ResourceHub"
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "info"
    VERSION: str = "0.1.0"

    # =========================================================================
    # API SERVER
    # =========================================================================
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:3000"

    # =========================================================================
    # CAPACITY POLICY
    # =========================================================================
    DEFAULT_WEEKLY_CAPACITY: float = 40.0
    CRITICAL_UTILIZATION_THRESHOLD: float = 150.0
    MAX_ALLOCATED_HOURS: float = 80.0
    WORKDAYS_PER_WEEK: int = 5
    HEATMAP_INCLUDE_WEEKENDS: bool = False

    # =========================================================================
    # OBSERVABILITY
    # =========================================================================
    METRICS_ENABLED: bool = True

    # =========================================================================
    # NOTIFICATIONS
    # =========================================================================
    NOTIFY_ON_FORCED_OVER_ALLOCATION: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
