# app/core/jwt.py
from __future__ import annotations

"""
Lesson Video API • JWT helpers
==============================
- `decode_token` with optional issuer/audience enforcement
- Case-insensitive Bearer token extraction
- `get_current_caller` FastAPI dependency → `CallerIdentity`

Notes
-----
- Tokens are issued by the surrounding platform; this service only verifies them.
- Identity comes from `sub`, falling back to `username`. `role` and `labid`
  are carried through when present.
- No `leeway` is passed to python-jose (unsupported); standard `exp`/`nbf`/`iat` checks apply.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException, Request, status
from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import settings

logger = logging.getLogger("auth")

_UNAUTHORIZED_HEADERS = {"WWW-Authenticate": "Bearer"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, headers=_UNAUTHORIZED_HEADERS)


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as asserted by a verified token."""

    subject: str
    role: Optional[str] = None
    lab_id: Optional[str] = None


# ─────────────────────────────────────────────────────────────
# 🔓 Decode JWT Token
# ─────────────────────────────────────────────────────────────
def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT.

    Security checks
    ---------------
    1) Verify signature and standard claims (exp/nbf/iat)
    2) Enforce issuer/audience when configured
    3) Require a subject (`sub` or `username`)

    Raises
    ------
    HTTPException
      - 401 for invalid/expired tokens or a missing subject
    """
    issuer = settings.JWT_ISSUER or None
    audience = settings.JWT_AUDIENCE or None
    options: Dict[str, Any] = {"verify_aud": bool(audience)}

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options=options,
            audience=audience,
            issuer=issuer,
        )
    except ExpiredSignatureError:
        logger.info("Token expired.")
        raise _unauthorized("Token has expired.")
    except JWTError as e:
        logger.warning("JWT decoding failed: %s", e)
        raise _unauthorized("Invalid token.")

    if not (payload.get("sub") or payload.get("username")):
        logger.warning("Missing sub/username in token payload.")
        raise _unauthorized("Token missing subject.")

    return payload


# ─────────────────────────────────────────────────────────────
# 📥 Extract Bearer Token from Authorization Header
# ─────────────────────────────────────────────────────────────
def get_bearer_token(request: Request) -> str:
    """Extract a Bearer token from the `Authorization` header (case-insensitive)."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        logger.info("Missing Authorization header.")
        raise _unauthorized("Missing Authorization header.")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("Malformed Authorization header.")
        raise _unauthorized("Invalid Authorization scheme.")

    token = parts[1].strip()
    if not token:
        raise _unauthorized("Empty token.")

    return token


# ─────────────────────────────────────────────────────────────
# 👤 Caller dependency
# ─────────────────────────────────────────────────────────────
async def get_current_caller(request: Request) -> CallerIdentity:
    """FastAPI dependency: verify the Bearer token and return the caller."""
    payload = decode_token(get_bearer_token(request))
    caller = CallerIdentity(
        subject=str(payload.get("sub") or payload.get("username")),
        role=payload.get("role"),
        lab_id=payload.get("labid"),
    )
    logger.debug("Authenticated caller sub=%s role=%s", caller.subject, caller.role)
    return caller


__all__ = [
    "CallerIdentity",
    "decode_token",
    "get_bearer_token",
    "get_current_caller",
]
