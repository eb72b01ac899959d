# memelinks/config.py
"""
Centralized application configuration using pydantic-settings.

All settings are read from environment variables or .env file.
The shared worker secret lives in API_KEY and is never logged.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Priority: environment variables > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    # --- Database ---
    DB_URL: str = Field(
        default="sqlite:///data/meme_links.db",
        description="SQLite or PostgreSQL connection URL"
    )
    AUTO_CREATE_SCHEMA: bool = Field(
        default=True,
        description="Create the links table on startup if missing"
    )

    # --- Server ---
    HOST: str = Field(
        default="127.0.0.1",
        description="Server bind host"
    )
    PORT: int = Field(
        default=3000,
        description="Server bind port"
    )

    # --- Debug / Logging ---
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    LOG_TO_FILE: bool = Field(
        default=False,
        description="Also write ERROR records to LOGS_PATH/error.log"
    )
    LOGS_PATH: str = Field(
        default="logs",
        description="Directory for log files"
    )

    # --- Worker API ---
    API_KEY: Optional[str] = Field(
        default=None,
        description="Shared secret expected in the apiKey body field"
    )

    # --- Links ---
    MAX_URL_LENGTH: int = Field(
        default=2048,
        description="Maximum accepted length of a submitted URL"
    )
    CLEAR_URL_ON_COMPLETE: bool = Field(
        default=True,
        description="Blank the stored URL when a record is marked complete"
    )

    # --- Browser sessions ---
    SESSION_TTL_SECONDS: int = Field(default=3600, gt=0)
    SESSION_MAX_TOKENS: int = Field(default=1000, gt=0)
    SESSION_SWEEP_INTERVAL_SECONDS: float = Field(default=3600, gt=0)
    COOKIE_SECURE: bool = Field(
        default=False,
        description="Mark the session cookie Secure (HTTPS deployments)"
    )

    # --- Rate limiting ---
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=900, gt=0)
    RATE_LIMIT_MAX_REQUESTS: int = Field(default=100, gt=0)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v_upper


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance (singleton pattern)."""
    return Settings()


# --- Paths (computed, not from env) ---
PACKAGE_ROOT: str = os.path.abspath(os.path.dirname(__file__))
STATIC_PATH: str = os.path.join(PACKAGE_ROOT, "static")
INDEX_PAGE: str = os.path.join(STATIC_PATH, "index.html")
