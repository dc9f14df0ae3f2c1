from __future__ import annotations

"""
Lesson Video API • Storage Layout
=================================

Documented layout of the object storage service (Supabase-style):

    {base}/storage/v1/object/public/{bucket}/{path}         public object URL
    {base}/storage/v1/object/sign/{bucket}/{path}?token=..  storage-native signed URL
    {base}/storage/v1/object/authenticated/{bucket}/{path}  authenticated object URL
    {base}/storage/v1/s3/{bucket}/{path}?X-Amz-...          S3-compatible (presigned)

    {bucket}/
      lesson-videos/{uuid}.{ext}       authoring uploads (presigned PUT)
      {anything else}                  legacy paths stored on topics/videos

Security
--------
- Only the public form is readable without a grant; every other form is
  re-signed before it is handed to a player or fetched by the proxy.
"""

import mimetypes
import uuid
from typing import Optional
from urllib.parse import quote

from app.core.config import settings

STORAGE_API_ROOT = "/storage/v1"
STORAGE_PUBLIC_OBJECT_PREFIX = f"{STORAGE_API_ROOT}/object/public/"

# Upload keys: {prefix}/{uuid}.{ext}
UPLOAD_KEY_TEMPLATE = "{prefix}/{object_id}.{ext}"

_FALLBACK_EXTENSIONS = {
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
    "video/x-matroska": "mkv",
    "video/ogg": "ogv",
}


def _extension_for(filename: Optional[str], content_type: str) -> str:
    name = (filename or "").strip()
    if "." in name:
        ext = name.rsplit(".", 1)[1].lower()
        if ext.isalnum() and len(ext) <= 8:
            return ext
    if content_type in _FALLBACK_EXTENSIONS:
        return _FALLBACK_EXTENSIONS[content_type]
    guessed = mimetypes.guess_extension(content_type) or ".bin"
    return guessed.lstrip(".")


def upload_key(filename: Optional[str], content_type: str, *, prefix: Optional[str] = None) -> str:
    """Fresh object key for an authoring upload; never reuses the client filename."""
    return UPLOAD_KEY_TEMPLATE.format(
        prefix=(prefix or settings.STORAGE_UPLOAD_PREFIX).strip("/"),
        object_id=uuid.uuid4(),
        ext=_extension_for(filename, content_type),
    )


def storage_base_url() -> Optional[str]:
    """Origin of the storage service (configured, or derived from the S3 endpoint)."""
    if settings.STORAGE_PUBLIC_BASE_URL:
        return settings.STORAGE_PUBLIC_BASE_URL
    endpoint = settings.AWS_S3_ENDPOINT_URL or ""
    marker = endpoint.find(STORAGE_API_ROOT)
    if marker > 0:
        return endpoint[:marker]
    return None


def public_object_url(bucket: str, path: str) -> Optional[str]:
    """Public URL for `bucket/path`, or None when no storage origin is known."""
    base = storage_base_url()
    if not base:
        return None
    return f"{base}{STORAGE_PUBLIC_OBJECT_PREFIX}{quote(bucket)}/{quote(path.lstrip('/'))}"


__all__ = [
    "STORAGE_API_ROOT",
    "STORAGE_PUBLIC_OBJECT_PREFIX",
    "UPLOAD_KEY_TEMPLATE",
    "upload_key",
    "storage_base_url",
    "public_object_url",
]
