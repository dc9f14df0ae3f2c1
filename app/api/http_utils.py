from __future__ import annotations

"""
Lesson Video API · HTTP Utilities
=================================

Shared helpers for API routers:

- Query/body value cleanup (`clean_str`)
- UUID parsing for ids arriving as strings
- No-store JSON helper

All helpers are side-effect free; none of them raise `HTTPException`.
"""

import uuid
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.security_headers import set_sensitive_cache

__all__ = ["clean_str", "parse_uuid", "json_no_store"]


def clean_str(value: Any) -> Optional[str]:
    """Trimmed string, or None for missing/blank values."""
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    """Parse `value` as a UUID; None when it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    s = clean_str(value)
    if s is None:
        return None
    try:
        return uuid.UUID(s)
    except (ValueError, AttributeError, TypeError):
        return None


def json_no_store(payload: Any, status_code: int = 200) -> JSONResponse:
    """Return a JSON response with strict `no-store` caching."""
    resp = JSONResponse(content=jsonable_encoder(payload), status_code=status_code)
    set_sensitive_cache(resp)
    return resp
