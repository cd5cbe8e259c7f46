"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    BaseSettings populates fields from environment variables; constructing the
    nested groups via default_factory makes that happen at Settings() time.
    """

    return AppSettings()


def _build_identity_settings() -> "IdentitySettings":
    return IdentitySettings()


def _build_storage_settings() -> "StorageSettings":
    return StorageSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    feed_limit: int = Field(
        100,
        description="Maximum number of posts returned by feed queries",
        ge=1,
    )
    max_content_chars: int = Field(
        280,
        description="Maximum post length in Unicode code points",
        ge=1,
    )
    empty_author_feed_not_found: bool = Field(
        True,
        description="Answer 404 instead of an empty list when an author has no posts",
    )

    rate_limit_backend: Literal["memory", "redis"] = Field(
        "memory",
        description="Storage for sliding-window counters",
    )
    rate_limit_requests: int = Field(
        3,
        description="Maximum number of posts allowed per window (per author)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Sliding window size in seconds",
        ge=1,
    )
    rate_limit_fail_open: bool = Field(
        False,
        description="Allow writes when the rate-limit backend is unreachable",
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_timeout_seconds: float = Field(
        2.0,
        description="Timeout for a single rate-limit backend round trip",
        gt=0,
    )
    redis_url: str = Field(
        "redis://localhost:6379/0",
        description="Redis connection URL for the redis rate-limit backend",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class IdentitySettings(BaseSettings):
    """External identity service (author directory + sessions)."""

    backend: Literal["memory", "http"] = Field(
        "memory",
        description="Author directory implementation",
    )
    base_url: str | None = Field(
        None,
        description="Base URL of the identity service (required for http backend)",
    )
    api_key: str | None = Field(
        None,
        description="Secret key sent as a bearer token to the identity service",
    )
    batch_size: int = Field(
        100,
        description="Maximum number of ids per batched user lookup",
        ge=1,
    )
    timeout_seconds: float = Field(
        5.0,
        description="Request timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="IDENTITY_",
        case_sensitive=False,
    )


class StorageSettings(BaseSettings):
    """Post storage configuration."""

    backend: Literal["memory", "postgres"] = Field(
        "memory",
        description="Post store implementation",
    )
    dsn: str | None = Field(
        None,
        description="PostgreSQL DSN (required for postgres backend)",
    )
    pool_min_size: int = Field(1, ge=1)
    pool_max_size: int = Field(10, ge=1)
    timeout_seconds: float = Field(
        5.0,
        description="Timeout for a single storage query",
        gt=0,
    )
    create_schema: bool = Field(
        False,
        description="Create the posts table on startup if it does not exist",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field("json")
    output: Literal["stdout", "file"] = Field("stdout")
    file_path: str | None = Field(None, description="Log file path for file output")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, ge=0)
    request_id_header: str = Field("X-Request-ID")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app: AppSettings = Field(default_factory=_build_app_settings)
    identity: IdentitySettings = Field(default_factory=_build_identity_settings)
    storage: StorageSettings = Field(default_factory=_build_storage_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
