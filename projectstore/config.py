"""
Store configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Store settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROJECTSTORE_",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./projectstore.db"
    sqlite_busy_timeout_ms: int = 5000
    pool_size: int = 5
    max_overflow: int = 10

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # Versions
    project_version_retention: int = 3  # versions kept by apply_retention

    # Event log
    event_page_size: int = 100


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
