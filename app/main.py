# app/main.py
from __future__ import annotations

"""
# Lesson Video API • Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the lesson video delivery service.

## Design Goals
- Deterministic, testable **app factory** (`create_app`) with explicit lifespan.
- Explicit **middleware order**: 1) request id → 2) CORS.
  No GZip or `BaseHTTPMiddleware`: both would buffer or re-encode proxied
  byte ranges.
- Centralized exception handling (`app.core.exception_handlers`).

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (quick DB check).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator
import logging
import os

from fastapi import FastAPI
from starlette.responses import JSONResponse

# -- Logging bootstrap (Loguru + stdlib intercept) ----------------------------
# Importing sets up handlers/format; ignore the symbol with _ alias.
from app.core import logger as _logsetup  # noqa: F401

from app.core.config import settings
from app.core.exception_handlers import install_exception_handlers
from app.db.session import async_engine, db_healthcheck
from app.middleware.request_id import RequestIDMiddleware
from app.security_headers import configure_cors
from app.services.range_proxy import close_upstream_client

logger = logging.getLogger("lesson_video")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifecycle manager.

    Shutdown:
        - Close the upstream HTTP connection pool.
        - Dispose the DB async engine.
    """
    logger.info("✅ %s starting up (env=%s)", settings.PROJECT_NAME, settings.ENV)
    try:
        yield
    finally:
        try:
            await close_upstream_client()
            logger.info("🛑 Upstream HTTP pool closed")
        except Exception:
            logger.exception("Error closing upstream HTTP pool")
        try:
            await async_engine.dispose()
            logger.info("🛑 Database engine disposed")
        except Exception:
            logger.exception("Error disposing DB engine")
        logger.info("🛑 %s shutting down", settings.PROJECT_NAME)


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Returns:
        FastAPI: fully wired application with middleware, exception handlers,
        routers, and health/readiness endpoints.
    """
    docs_url = "/docs" if settings.ENABLE_DOCS else None
    redoc_url = "/redoc" if settings.ENABLE_DOCS else None
    openapi_url = "/openapi.json" if settings.ENABLE_DOCS else None

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )

    # ── Middlewares (last added runs first) ─────────────────────────────────
    configure_cors(app)
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ──────────────────────────────────────────────────
    install_exception_handlers(app)

    # ── Routers ─────────────────────────────────────────────────────────────
    from app.api.v1.routers import router as api_router

    app.include_router(api_router, prefix=settings.API_PREFIX)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe: `{"ok": True}` when the process is responsive."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> JSONResponse:
        """Readiness probe (DB `SELECT 1`); 503 when the database is unreachable."""
        db_ok = await db_healthcheck()
        return JSONResponse(
            {"ready": db_ok, "checks": {"db": db_ok}},
            status_code=200 if db_ok else 503,
        )

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Minimal root that points to docs (when enabled)."""
        return JSONResponse({"name": settings.PROJECT_NAME, "docs": app.docs_url or "", "version": settings.VERSION})

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn/Gunicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn app.main:app --reload --no-server-header`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        workers=int(os.getenv("WORKERS", "1")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        server_header=False,
    )
