"""Configuration settings for yipcvars."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from ``YIP_*`` environment variables or ``.env``."""

    # Path to the CMS SQLite database
    db_path: Optional[Path] = None
    # How long to wait on a locked database (milliseconds)
    busy_timeout_ms: int = 5000
    log_level: str = "WARNING"

    class Config:
        env_prefix = "YIP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars not in model


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
