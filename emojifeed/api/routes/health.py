from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check used by load balancers and monitoring.

    Does not touch storage, the identity service or the rate-limit backend.
    """

    return {"status": "ok"}
