"""
🧭 Lesson Video API • Router Aggregator
======================================

Exports the **combined `router`** (ready to include) and the individual
sub-routers so callers can mount them as needed.

Quick usage
-----------
    from app.api.v1.routers import router as api_router
    app.include_router(api_router, prefix=settings.API_PREFIX)

Security notes
--------------
- This layer is a pure aggregator; **auth lives in child routes**.
"""

from fastapi import APIRouter

from .video import router as video_router


def build_router() -> APIRouter:
    """Compose the API surface into a single `APIRouter` (no extra prefixes)."""
    r = APIRouter()
    r.include_router(video_router)
    return r


router = build_router()


__all__ = [
    "router",
    "build_router",
    "video_router",
]
