from __future__ import annotations

"""
Media locator classification.

One pure rule decides what a stored or client-supplied video reference is:

- a storage-service URL (``/storage/v1/object/{public|sign|authenticated}/...``
  or the S3-compatible ``/storage/v1/s3/...`` form) decomposes into a
  `StorageRef`; public objects stay directly fetchable, everything else must be
  re-signed before use;
- any other ``http(s)://`` value is an opaque absolute URL;
- anything else non-blank is a path inside the default bucket.

The resolver, the signed URL issuer, the proxy input handling and the
authoring path all go through `classify_locator`, so the same string always
yields the same ``(bucket, path)`` wherever it came from.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import unquote, urlsplit

__all__ = [
    "AbsoluteURL",
    "StoragePath",
    "MediaLocator",
    "StorageRef",
    "parse_storage_url",
    "classify_locator",
    "is_http_url",
]


@dataclass(frozen=True)
class AbsoluteURL:
    """Directly fetchable URL (public storage object or external host)."""

    url: str


@dataclass(frozen=True)
class StoragePath:
    """Bucket-relative object that needs a signed URL before it can be fetched."""

    bucket: str
    path: str

    def __str__(self) -> str:
        return f"{self.bucket}/{self.path}"


MediaLocator = Union[AbsoluteURL, StoragePath]


@dataclass(frozen=True)
class StorageRef:
    bucket: str
    path: str
    access: str  # public | sign | authenticated | s3

    @property
    def needs_signing(self) -> bool:
        return self.access != "public"

    def as_storage_path(self) -> StoragePath:
        return StoragePath(bucket=self.bucket, path=self.path)


_STORAGE_PATH_RE = re.compile(
    r"/storage/v1/(?:object/(?P<access>public|sign|authenticated)|s3)/(?P<bucket>[^/]+)/(?P<path>.+)$"
)


def is_http_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme.lower() in ("http", "https") and bool(parts.netloc)


def parse_storage_url(value: Optional[str]) -> Optional[StorageRef]:
    """
    Decompose a storage-service URL into bucket, path and access kind.

    Query string and fragment (signing tokens, ``X-Amz-*`` parameters) are
    ignored and the path is percent-decoded. Returns None for anything that
    is not an absolute storage URL.
    """
    s = (value or "").strip()
    if not s or not is_http_url(s):
        return None
    m = _STORAGE_PATH_RE.search(urlsplit(s).path)
    if m is None:
        return None
    bucket = unquote(m.group("bucket"))
    path = unquote(m.group("path")).lstrip("/")
    if not bucket or not path:
        return None
    return StorageRef(bucket=bucket, path=path, access=m.group("access") or "s3")


def classify_locator(value: Optional[str], default_bucket: str) -> Optional[MediaLocator]:
    """Classify a raw reference; None when it is empty or blank."""
    s = (value or "").strip()
    if not s:
        return None

    ref = parse_storage_url(s)
    if ref is not None:
        return ref.as_storage_path() if ref.needs_signing else AbsoluteURL(s)
    if is_http_url(s):
        return AbsoluteURL(s)

    path = s.lstrip("/")
    if not path:
        return None
    return StoragePath(bucket=default_bucket, path=path)
