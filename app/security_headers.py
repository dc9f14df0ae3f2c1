# app/security_headers.py
from __future__ import annotations

"""
# Lesson Video API • Cache Headers & CORS

## What you get
- **Cache helpers**: `set_sensitive_cache()` for signed grants and
  `set_stream_headers()` for proxied media.
- **CORS installer**: strict allow-list from settings (safe localhost defaults
  in dev), with `Range` allowed and range response headers exposed so players
  on another origin can seek.

No CSP/COEP/CORP middleware: media served by the proxy must stay embeddable
in `<video>` elements on the frontend origin.

## Quick start
    from app.security_headers import configure_cors

    app = FastAPI()
    configure_cors(app)
"""

from typing import Iterable, Mapping, MutableMapping, Optional

from fastapi import Response
from starlette.middleware.cors import CORSMiddleware

from app.core.config import settings


# ─────────────────────────────────────────────────────────────
# 🔓 Public helpers (idempotent; safe to call in routes)
# ─────────────────────────────────────────────────────────────

# Always present on proxied media, success or not.
STREAM_HEADERS: Mapping[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "X-Content-Type-Options": "nosniff",
    "Content-Disposition": "inline",
    "Accept-Ranges": "bytes",
}


def set_stream_headers(headers: MutableMapping[str, str]) -> None:
    """Overwrite `headers` with the fixed media delivery headers."""
    for name, value in STREAM_HEADERS.items():
        headers[name] = value


def set_sensitive_cache(response: Response) -> None:
    """Mark a **Response** as never cacheable (idempotent); used for signed grants."""
    response.headers.setdefault("Cache-Control", "no-store")
    response.headers.setdefault("Pragma", "no-cache")
    response.headers.setdefault("Expires", "0")


# ─────────────────────────────────────────────────────────────
# 🌐 CORS installer (allow-list, not '*')
# ─────────────────────────────────────────────────────────────

def configure_cors(
    app,
    *,
    allow_credentials: bool = True,
    allow_methods: Optional[Iterable[str]] = None,
    allow_headers: Optional[Iterable[str]] = None,
) -> None:
    """Install strict CORS based on settings."""
    allow_methods = allow_methods or ["GET", "HEAD", "OPTIONS", "POST", "PATCH"]
    allow_headers = allow_headers or [
        "Authorization",
        "Content-Type",
        "Range",
        "X-Request-ID",
    ]

    origins = settings.frontend_origins_list
    origins_regex = (settings.ALLOW_ORIGINS_REGEX or "").strip() or None

    if not origins and not origins_regex:
        # localhost-friendly defaults in dev
        origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_origin_regex=origins_regex,
        allow_credentials=allow_credentials,
        allow_methods=list(allow_methods),
        allow_headers=list(allow_headers),
        expose_headers=["Accept-Ranges", "Content-Length", "Content-Range", "X-Request-ID"],
        max_age=3600,
    )


__all__ = [
    "STREAM_HEADERS",
    "set_stream_headers",
    "set_sensitive_cache",
    "configure_cors",
]
