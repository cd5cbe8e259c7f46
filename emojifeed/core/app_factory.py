"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and the
service container) so tests can build an app around in-memory backends.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from emojifeed.api.dependencies import ServiceContainer, build_container
from emojifeed.api.routes import health_router, posts_router, profiles_router
from emojifeed.core.config import Settings, settings as default_settings
from emojifeed.core.exception_handlers import setup_exception_handlers
from emojifeed.core.logging import configure_logging
from emojifeed.core.middleware import request_id_middleware
from emojifeed.core.openapi import apply_openapi_customizations


def create_app(
    container: ServiceContainer | None = None,
    *,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        container: Pre-built backends/services; built from settings if omitted.
        settings: Settings to build from; defaults to the global settings.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    container = container or build_container(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await container.start()
        try:
            yield
        finally:
            await container.close()

    app = FastAPI(
        title="emojifeed",
        description=(
            "Emoji-only micro-posts: a global feed, per-author feeds and a "
            "rate-limited create mutation for signed-in users."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(posts_router, prefix="/v1")
    app.include_router(profiles_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
