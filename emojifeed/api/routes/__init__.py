from __future__ import annotations

from emojifeed.api.routes.health import router as health_router
from emojifeed.api.routes.posts import router as posts_router
from emojifeed.api.routes.profiles import router as profiles_router

__all__ = ["health_router", "posts_router", "profiles_router"]
