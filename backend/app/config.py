"""
Configuration management for PartLookup backend.
Uses pydantic-settings for environment variable handling.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # API Configuration
    api_title: str = "PartLookup API"
    api_version: str = "1.0.0"
    debug: bool = False

    # Storage Configuration
    db_path: str | None = None  # None = backend/data/partlookup.db
    db_timeout_seconds: float = 5.0  # SQLite busy timeout

    # Import Configuration
    csv_encoding: str = "utf-8-sig"  # tolerates the BOM Excel writes

    # Scanner Configuration
    scan_repeat_cooldown_seconds: float = 2.0  # same code again within this window is ignored


# Global settings instance
settings = Settings()
