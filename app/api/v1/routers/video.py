from __future__ import annotations

"""
Lesson Video API • Video Delivery & Authoring
=============================================

Route Index
-----------
- GET   /video                 → Range-correct proxy of a topic's video bytes
- GET   /video/signed-url      → Short-lived signed URL for direct playback (auth)
- POST  /video                 → Create a topic carrying a video reference
- PATCH /video/{topic_id}      → Repoint (or clear) a topic's video reference
- POST  /video/upload-url      → Presigned PUT for an authoring upload (auth)

Security
--------
- Signed URLs are only ever returned with **no-store** headers and never
  logged. Error bodies never carry internal URLs or storage details.
- Proxied media always carries no-cache headers and `nosniff`.

Failure Mapping
---------------
400 missing/invalid input · 401 missing/invalid token · 404 video, topic or
course absent · 500 signing failure, upstream failure or anything else.
"""

# ── [Imports] ─────────────────────────────────────────────────────────────────────────────
from typing import Optional
import functools
import logging

from anyio import to_thread
from fastapi import APIRouter, Body, Depends, Query, Request, Response, status

from app.api.http_utils import clean_str, json_no_store
from app.core.config import settings
from app.core.exception_handlers import failure_response
from app.core.exceptions import (
    BadRequestException,
    CourseNotFoundException,
    SigningFailureException,
    TopicNotFoundException,
    VideoNotFoundException,
)
from app.core.jwt import CallerIdentity, get_current_caller
from app.core.storage import public_object_url, upload_key
from app.repositories.topics import ReferenceStoreProtocol, get_reference_store
from app.schemas.video import (
    CreateVideoIn,
    CreateVideoOut,
    SignedUrlOut,
    TopicOut,
    UpdateVideoIn,
    UploadUrlIn,
    UploadUrlOut,
)
from app.services import video_authoring
from app.services.locators import StoragePath, classify_locator
from app.services.range_proxy import RangeProxy, StreamSession, get_range_proxy
from app.services.signed_urls import SignedURLIssuer, get_signed_url_issuer, get_storage_client
from app.services.video_resolver import VideoReferenceResolver, get_video_resolver
from app.utils.aws import S3Client, S3StorageError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Video"])
__all__ = ["router"]


# ╔════════════════════════════════ Route: Stream (Proxy) ════════════════════╗
# ║ 🎞️  GET /video                                                            ║
# ╚═══════════════════════════════════════════════════════════════════════════╝
@router.get(
    "/video",
    summary="Stream a topic's video (HTTP range aware)",
    response_class=Response,
    responses={
        200: {"description": "Full content", "content": {"video/mp4": {}}},
        206: {"description": "Partial content (Range honored by the origin)"},
        400: {"description": "Missing topicId parameter"},
        404: {"description": "Video, topic or course not found"},
        500: {"description": "Signing or upstream failure"},
    },
)
async def stream_video(
    request: Request,
    topic_id: Optional[str] = Query(None, alias="topicId"),
    url: Optional[str] = Query(None, description="Explicit locator; bypasses stored references"),
    store: ReferenceStoreProtocol = Depends(get_reference_store),
    resolver: VideoReferenceResolver = Depends(get_video_resolver),
    issuer: SignedURLIssuer = Depends(get_signed_url_issuer),
    proxy: RangeProxy = Depends(get_range_proxy),
):
    """
    Proxy the topic's video bytes with `Range` forwarded to the origin.

    Steps
    -----
    1) Validate ``topicId``
    2) Locator: explicit ``url`` (classified) or the resolver's choice
    3) Topic and owning course must exist
    4) Storage paths get a very short-lived signed URL
    5) Open the upstream fetch and relay status, range headers and bytes
    """
    session = StreamSession()
    try:
        # ── Validate ────────────────────────────────────────────────────────
        tid = clean_str(topic_id)
        if tid is None:
            raise BadRequestException("Missing topicId parameter")

        # ── Locator ─────────────────────────────────────────────────────────
        locator = classify_locator(url, resolver.default_bucket)
        if locator is None:
            locator = (await resolver.resolve(tid)).locator

        # ── Topic / course context ──────────────────────────────────────────
        topic = await store.get_topic(tid)
        if topic is None:
            raise TopicNotFoundException(topic_id=tid)
        if await store.get_course(topic.course_id) is None:
            raise CourseNotFoundException(topic_id=tid, course_id=topic.course_id)

        # ── Fetchable URL ───────────────────────────────────────────────────
        if isinstance(locator, StoragePath):
            fetch_url = (await issuer.issue(locator, settings.PROXY_SIGNED_URL_TTL_SECONDS)).url
        else:
            fetch_url = locator.url

        # ── Relay ───────────────────────────────────────────────────────────
        return await proxy.stream(
            fetch_url,
            request.headers.get("range"),
            request.headers.get("user-agent") or "",
            session,
        )
    except Exception as exc:
        return failure_response(exc, request, session=session)


# ╔════════════════════════════════ Route: Signed URL ════════════════════════╗
# ║ 🔐  GET /video/signed-url                                                 ║
# ╚═══════════════════════════════════════════════════════════════════════════╝
@router.get(
    "/video/signed-url",
    summary="Signed URL for direct playback",
    response_model=SignedUrlOut,
    responses={
        200: {"description": "OK"},
        400: {"description": "Missing topic ID"},
        401: {"description": "Missing or invalid bearer token"},
        404: {"description": "Video not available"},
        500: {"description": "Failed to generate video URL"},
    },
)
async def video_signed_url(
    topic_id: Optional[str] = Query(None, alias="topicId"),
    caller: CallerIdentity = Depends(get_current_caller),
    resolver: VideoReferenceResolver = Depends(get_video_resolver),
    issuer: SignedURLIssuer = Depends(get_signed_url_issuer),
):
    """
    Return ``{"url", "expiresIn"}`` for the topic's video.

    External (non-storage) URLs come back unchanged with ``expiresIn: null``.
    Every call issues a fresh grant; nothing is cached.
    """
    tid = clean_str(topic_id)
    if tid is None:
        raise BadRequestException("Missing topic ID")

    try:
        source = await resolver.resolve(tid)
    except VideoNotFoundException:
        raise VideoNotFoundException(topic_id=tid, message="Video not available") from None

    grant = await issuer.issue(
        source.locator,
        settings.SIGNED_URL_TTL_SECONDS,
        verify_exists=settings.SIGNED_URL_VERIFY_OBJECT,
    )
    logger.info("Issued %s playback URL for topic %s to %s", source.origin_kind, tid, caller.subject)
    return json_no_store({"url": grant.url, "expiresIn": grant.expires_in})


# ╔════════════════════════════════ Route: Create ════════════════════════════╗
# ║ ➕  POST /video                                                           ║
# ╚═══════════════════════════════════════════════════════════════════════════╝
@router.post(
    "/video",
    summary="Create a topic carrying a video reference",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateVideoOut,
    responses={
        201: {"description": "Created"},
        400: {"description": "Missing required fields: title, url, courseId"},
        500: {"description": "Failed to create topic record"},
    },
)
async def create_video(
    payload: Optional[CreateVideoIn] = Body(None),
    store: ReferenceStoreProtocol = Depends(get_reference_store),
):
    """
    Append a topic to the course and record its video.

    Steps
    -----
    1) Require ``title``, ``url``, ``courseId``
    2) ``order_index`` = existing topics in the course + 1
    3) Insert the topic (literal URL kept on the topic)
    4) Insert the companion media record (failure logged, not surfaced)
    """
    body = payload or CreateVideoIn()
    topic = await video_authoring.create_video(store, title=body.title, url=body.url, course_id=body.course_id)
    return json_no_store({"message": "Video created successfully", "data": topic.to_dict()}, status.HTTP_201_CREATED)


# ╔════════════════════════════════ Route: Update ════════════════════════════╗
# ║ ✏️  PATCH /video/{topic_id}                                               ║
# ╚═══════════════════════════════════════════════════════════════════════════╝
@router.patch(
    "/video/{topic_id}",
    summary="Repoint or clear a topic's video",
    response_model=TopicOut,
    responses={
        200: {"description": "Updated"},
        404: {"description": "Topic not found"},
    },
)
async def update_video(
    topic_id: str,
    payload: UpdateVideoIn,
    store: ReferenceStoreProtocol = Depends(get_reference_store),
):
    """Set the topic's video to ``url`` (``null`` clears it); the new reference wins resolution."""
    topic = await video_authoring.set_topic_video(store, topic_id, url=payload.url)
    return json_no_store({"message": "Video updated successfully", "data": topic.to_dict()})


# ╔════════════════════════════════ Route: Upload URL ════════════════════════╗
# ║ ⬆️🔐  POST /video/upload-url                                              ║
# ╚═══════════════════════════════════════════════════════════════════════════╝
@router.post(
    "/video/upload-url",
    summary="Presigned PUT for a lesson video upload",
    response_model=UploadUrlOut,
    responses={
        200: {"description": "OK"},
        400: {"description": "Unsupported content type"},
        401: {"description": "Missing or invalid bearer token"},
        500: {"description": "Failed to generate upload URL"},
    },
)
async def video_upload_url(
    payload: UploadUrlIn,
    caller: CallerIdentity = Depends(get_current_caller),
    storage: S3Client = Depends(get_storage_client),
):
    """
    Reserve a fresh object key under the upload prefix and sign a PUT for it.

    The client uploads with the same ``Content-Type`` and then stores
    ``publicUrl`` (or ``path``) through ``POST /video``.
    """
    content_type = payload.content_type.lower()
    if not content_type.startswith("video/"):
        raise BadRequestException("Unsupported content type", context={"content_type": content_type})

    bucket = settings.STORAGE_DEFAULT_BUCKET
    key = upload_key(payload.filename, content_type)
    ttl = settings.UPLOAD_URL_TTL_SECONDS
    try:
        upload_url = await to_thread.run_sync(
            functools.partial(storage.presigned_put, key, content_type=content_type, bucket=bucket, expires_in=ttl)
        )
    except S3StorageError as e:
        raise SigningFailureException(bucket=bucket, path=key, reason=str(e), message="Failed to generate upload URL") from e

    logger.info("Upload slot %s/%s reserved by %s", bucket, key, caller.subject)
    return json_no_store(
        {
            "uploadUrl": upload_url,
            "bucket": bucket,
            "path": key,
            "publicUrl": public_object_url(bucket, key),
            "expiresIn": ttl,
        }
    )
