"""
🧭 MovieMeter • API Router Aggregator
====================================

Exports the **combined `router`** and each sub-router.

Quick usage
-----------
    from moviemeter.api.v1.routers import build_v1_router
    app.include_router(build_v1_router(), prefix="/api")

Auth lives in the child routers (`require_identity` per protected route).
"""

from fastapi import APIRouter

from .auth import router as auth_router
from .reviews import router as reviews_router


def build_v1_router() -> APIRouter:
    """Compose `/auth/*` and `/reviews/*` into a single `APIRouter`."""
    r = APIRouter()
    r.include_router(auth_router)
    r.include_router(reviews_router)
    return r


router = build_v1_router()


__all__ = ["router", "build_v1_router", "auth_router", "reviews_router"]
