# app/core/exceptions.py
from __future__ import annotations

"""
Lesson Video API • Application Exceptions
=========================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
lets us attach structured metadata and render one JSON error shape from
`app.core.exception_handlers`.

Taxonomy
--------
- `BadRequestException`        400  missing/invalid input
- `NotFoundException`          404  topic, course or media reference absent
- `SigningFailureException`    500  storage service could not sign a URL
- `UpstreamFailureException`   500  origin fetch error or non-success status
- `InternalErrorException`     500  anything unclassified

`context` holds diagnostic data (topic id, locator, upstream status). It is
logged by the handlers and **never** rendered into a response body.

Usage
-----
    raise TopicNotFoundException(topic_id=topic_id)
    raise UpstreamFailureException(upstream_status=503, locator="videos/a.mp4")
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "BadRequestException",
    "NotFoundException",
    "VideoNotFoundException",
    "TopicNotFoundException",
    "CourseNotFoundException",
    "SigningFailureException",
    "UpstreamFailureException",
    "InternalErrorException",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code (400/401/404/500).
    message : str
        Human-readable error message (serialized as `error`, also `detail`).
    code : int
        Optional internal/typed error code. Defaults to `status_code`.
    request_id : str | None
        Optional request correlation id.
    context : dict
        Log-only diagnostics; never serialized.
    headers : dict | None
        Optional headers (e.g., `{"WWW-Authenticate": "Bearer"}`).
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        request_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.request_id: Optional[str] = request_id
        self.context: Dict[str, Any] = {k: v for k, v in (context or {}).items() if v is not None}

    def to_problem(self, *, fallback_request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return the canonical error body used by the handlers."""
        return {
            "error": self.message,
            "code": self.code,
            "request_id": self.request_id or fallback_request_id or "N/A",
        }

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


# ──────────────────────────────────────────────────────────────
# 🧾 Client-facing (terminal, rendered as-is)
# ──────────────────────────────────────────────────────────────
class BadRequestException(AppException):
    """Raised for missing or malformed request input."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, message=message, context=context)


class NotFoundException(AppException):
    """Raised when a topic, course or media reference does not exist."""

    def __init__(self, message: str = "Not found", *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, message=message, context=context)


class VideoNotFoundException(NotFoundException):
    """The topic has neither a media record path nor a literal URL."""

    def __init__(self, *, topic_id: Optional[str] = None, message: str = "Video not found") -> None:
        super().__init__(message, context={"topic_id": topic_id})


class TopicNotFoundException(NotFoundException):
    def __init__(self, *, topic_id: Optional[str] = None) -> None:
        super().__init__("Topic not found", context={"topic_id": topic_id})


class CourseNotFoundException(NotFoundException):
    def __init__(self, *, topic_id: Optional[str] = None, course_id: Optional[str] = None) -> None:
        super().__init__("Course not found", context={"topic_id": topic_id, "course_id": course_id})


# ──────────────────────────────────────────────────────────────
# 🔥 Server-side (logged with context, generic body)
# ──────────────────────────────────────────────────────────────
class SigningFailureException(AppException):
    """The storage service could not produce a signed URL."""

    def __init__(
        self,
        *,
        bucket: Optional[str] = None,
        path: Optional[str] = None,
        reason: Optional[str] = None,
        message: str = "Failed to generate video URL",
    ) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=message,
            context={"bucket": bucket, "path": path, "reason": reason},
        )


class UpstreamFailureException(AppException):
    """The origin fetch failed or answered with something other than 200/206."""

    def __init__(
        self,
        *,
        upstream_status: Optional[int] = None,
        locator: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch video",
            context={"upstream_status": upstream_status, "locator": locator, "reason": reason},
        )


class InternalErrorException(AppException):
    """Anything unclassified."""

    def __init__(self, *, message: str = "Internal server error", reason: Optional[str] = None) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=message,
            context={"reason": reason},
        )
