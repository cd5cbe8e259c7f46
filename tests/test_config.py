"""Tests for settings and container wiring."""

import pytest

from emojifeed.adapters.directory.http_client import HttpAuthorDirectory
from emojifeed.adapters.directory.in_memory import InMemoryAuthorDirectory
from emojifeed.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from emojifeed.adapters.rate_limit.redis_backend import RedisSlidingWindowRateLimiter
from emojifeed.adapters.storage.in_memory import InMemoryPostStore
from emojifeed.adapters.storage.postgres import PostgresPostStore
from emojifeed.api.dependencies import build_container
from emojifeed.core.config import AppSettings, Settings
from emojifeed.core.errors import ValidationAppError
from emojifeed.core.rate_limit import build_rate_limiter


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("APP_RATE_LIMIT_BACKEND", "APP_RATE_LIMIT_REQUESTS", "APP_RATE_LIMIT_FAIL_OPEN"):
        monkeypatch.delenv(name, raising=False)

    app_settings = AppSettings()

    assert app_settings.rate_limit_requests == 3
    assert app_settings.rate_limit_window_seconds == 60
    assert app_settings.rate_limit_fail_open is False
    assert app_settings.feed_limit == 100
    assert app_settings.max_content_chars == 280


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_RATE_LIMIT_REQUESTS", "5")
    monkeypatch.setenv("IDENTITY_BATCH_SIZE", "50")
    monkeypatch.setenv("LOG_FORMAT", "plain")

    cfg = Settings()

    assert cfg.app.rate_limit_requests == 5
    assert cfg.identity.batch_size == 50
    assert cfg.log.format == "plain"


def test_memory_backends_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_RATE_LIMIT_BACKEND", "memory")
    monkeypatch.setenv("IDENTITY_BACKEND", "memory")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")

    container = build_container(Settings())

    assert isinstance(container.store, InMemoryPostStore)
    assert isinstance(container.directory, InMemoryAuthorDirectory)
    assert isinstance(container.limiter, InMemorySlidingWindowRateLimiter)


def test_external_backends(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_RATE_LIMIT_BACKEND", "redis")
    monkeypatch.setenv("IDENTITY_BACKEND", "http")
    monkeypatch.setenv("IDENTITY_BASE_URL", "https://identity.example")
    monkeypatch.setenv("STORAGE_BACKEND", "postgres")
    monkeypatch.setenv("STORAGE_DSN", "postgresql://localhost/posts")

    container = build_container(Settings())

    assert isinstance(container.store, PostgresPostStore)
    assert isinstance(container.directory, HttpAuthorDirectory)
    assert isinstance(container.limiter, RedisSlidingWindowRateLimiter)


def test_postgres_requires_dsn(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORAGE_BACKEND", "postgres")
    monkeypatch.delenv("STORAGE_DSN", raising=False)

    with pytest.raises(ValidationAppError) as exc_info:
        build_container(Settings())

    assert exc_info.value.code == "storage_missing_dsn"


def test_http_directory_requires_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IDENTITY_BACKEND", "http")
    monkeypatch.delenv("IDENTITY_BASE_URL", raising=False)

    with pytest.raises(ValidationAppError) as exc_info:
        build_container(Settings())

    assert exc_info.value.code == "identity_missing_base_url"


def test_rate_limiter_uses_configured_quota() -> None:
    limiter = build_rate_limiter(AppSettings(rate_limit_requests=7, rate_limit_window_seconds=30))

    assert isinstance(limiter, InMemorySlidingWindowRateLimiter)


def test_settings_expose_only_consumed_groups() -> None:
    assert set(Settings.model_fields) == {"app", "identity", "storage", "log"}
    assert "debug" not in AppSettings.model_fields


def test_container_carries_request_time_settings() -> None:
    cfg = Settings(app=AppSettings(rate_limit_include_headers=False))

    container = build_container(cfg)

    assert container.rate_limit_include_headers is False
    assert container.identity_timeout_seconds == cfg.identity.timeout_seconds
    assert container.profile_service is not None
