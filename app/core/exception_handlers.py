from __future__ import annotations

"""
Error classification & JSON exception handlers.

Every failure is mapped onto the small taxonomy in `app.core.exceptions` and
rendered as ``{"error": ..., "code": ..., "request_id": ...}``. Server-side
failures are logged with their private context; bodies stay generic so no
internal URL or storage credential ever reaches a client.

Streaming endpoints pass their request-scoped `StreamSession` to
`failure_response`; once that session has sent headers no error body may be
written and `None` is returned instead.
"""

import logging
from typing import Any, Optional, Protocol

import httpx
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import (
    AppException,
    BadRequestException,
    InternalErrorException,
    SigningFailureException,
    UpstreamFailureException,
)
from app.middleware.request_id import get_request_id
from app.utils.aws import S3StorageError

logger = logging.getLogger(__name__)


class HeadersSentFlag(Protocol):
    headers_sent: bool


# ─────────────────────────────────────────────────────────────
# 🧭 Classification
# ─────────────────────────────────────────────────────────────
def classify_failure(exc: BaseException) -> AppException:
    """Map any exception onto the application taxonomy."""
    if isinstance(exc, AppException):
        return exc
    if isinstance(exc, StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return AppException(status_code=exc.status_code, message=detail, headers=getattr(exc, "headers", None))
    if isinstance(exc, RequestValidationError):
        return BadRequestException("Invalid request parameters")
    if isinstance(exc, S3StorageError):
        return SigningFailureException(reason=str(exc))
    if isinstance(exc, httpx.HTTPError):
        return UpstreamFailureException(reason=f"{exc.__class__.__name__}: {exc}")
    return InternalErrorException(reason=f"{exc.__class__.__name__}: {exc}")


def _log_failure(app_exc: AppException, original: BaseException, request: Optional[Request]) -> None:
    where = f"{request.method} {request.url.path}" if request is not None else "stream"
    if not app_exc.is_server_error:
        logger.info("%s → %s %s %s", where, app_exc.status_code, app_exc.message, app_exc.context or "")
        return
    if isinstance(app_exc, InternalErrorException) and app_exc is not original:
        logger.error("%s → unexpected failure %s", where, app_exc.context, exc_info=original)
    else:
        logger.error("%s → %s %s %s", where, app_exc.status_code, app_exc.message, app_exc.context)


def render(app_exc: AppException, request: Optional[Request], *, extra: Optional[dict[str, Any]] = None) -> JSONResponse:
    body = app_exc.to_problem(fallback_request_id=get_request_id(request) or None)
    if extra:
        body.update(extra)
    return JSONResponse(status_code=app_exc.status_code, content=body, headers=app_exc.headers)


def failure_response(
    exc: BaseException,
    request: Optional[Request],
    *,
    session: Optional[HeadersSentFlag] = None,
) -> Optional[JSONResponse]:
    """Classify, log and render `exc`; `None` when the session already sent headers."""
    app_exc = classify_failure(exc)
    _log_failure(app_exc, exc, request)
    if session is not None and session.headers_sent:
        logger.warning("Suppressed %s error body: response headers already sent", app_exc.status_code)
        return None
    return render(app_exc, request)


# ─────────────────────────────────────────────────────────────
# 🧩 FastAPI handlers
# ─────────────────────────────────────────────────────────────
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:  # type: ignore[override]
    _log_failure(exc, exc, request)
    return render(exc, request)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore[override]
    return failure_response(exc, request)  # type: ignore[return-value]


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore[override]
    app_exc = classify_failure(exc)
    _log_failure(app_exc, exc, request)
    return render(app_exc, request, extra={"details": jsonable_encoder(exc.errors())})


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore[override]
    response = failure_response(exc, request)
    if response is None:  # pragma: no cover - no session here
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Internal server error"})
    return response


def install_exception_handlers(app: FastAPI) -> None:
    """Register the JSON handlers on `app` (order-independent)."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]


__all__ = [
    "classify_failure",
    "failure_response",
    "render",
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
    "install_exception_handlers",
]
