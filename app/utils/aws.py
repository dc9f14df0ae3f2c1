# app/utils/aws.py
from __future__ import annotations

"""
🧊 Lesson Video API • Object Storage Utilities
==============================================

Thin boto3 wrapper over the storage service's **S3-compatible** endpoint, used by:
- Signed URL issuance (short-lived presigned GET, any bucket)
- Proxy fetches of bucket-relative paths (very short-lived presigned GET)
- Authoring uploads (presigned PUT into the lesson-videos prefix)

🎯 Goals
--------
- SigV4 presigned GET/PUT with path-style addressing, so signed URLs keep the
  ``{endpoint}/{bucket}/{key}`` shape the locator rules understand
- Explicit timeouts + bounded retries
- Key normalization (no leading slash, no `..`)
- Pluggable creds (explicit settings or the standard AWS credential chain)
- Zero secret leakage in logs

Implementation notes
--------------------
- Signing itself is local (no network). `head()` is the only network call and
  callers run it off the event loop.
- Storage failures surface as `S3StorageError`.
"""

from typing import Any, Dict, Optional
import logging
import re

import boto3
import botocore
from botocore.config import Config as BotoConfig
from pydantic import SecretStr

from app.core.config import settings

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# 🧱 Exceptions
# ─────────────────────────────────────────────────────────────────────────────

class S3StorageError(RuntimeError):
    """Raised when a storage operation fails (network, auth, policy, etc.)."""


# ─────────────────────────────────────────────────────────────────────────────
# 🧰 Key and value validation
# ─────────────────────────────────────────────────────────────────────────────

_KEY_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_BUCKET_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9._\-]{0,62}")


def _normalize_key(key: str) -> str:
    """
    Normalize and validate object keys.

    Steps
    -----
    1) Coerce to str, strip whitespace
    2) Remove leading '/'
    3) Collapse '//' runs
    4) Reject '..' segments and control characters; any other UTF-8
       (commas, quotes, accents) is a legal object name

    Raises
    ------
    S3StorageError
        If key is empty, escapes via '..' or holds control characters.
    """
    k = str(key or "").strip().lstrip("/")
    k = re.sub(r"/{2,}", "/", k)
    if not k:
        raise S3StorageError("Invalid storage key: empty")
    if ".." in k.split("/"):
        raise S3StorageError("Invalid storage key: path traversal detected")
    if _KEY_CONTROL_RE.search(k):
        raise S3StorageError("Invalid storage key: contains control characters")
    return k


def _normalize_bucket(bucket: str) -> str:
    b = str(bucket or "").strip()
    if not _BUCKET_RE.fullmatch(b):
        raise S3StorageError("Invalid bucket name")
    return b


def _secret_value(v: Optional[SecretStr | str]) -> Optional[str]:
    """Return the underlying secret string without raising if not SecretStr."""
    if v is None:
        return None
    if isinstance(v, SecretStr):
        return v.get_secret_value()
    return str(v)


# ─────────────────────────────────────────────────────────────────────────────
# 📦 S3 Client
# ─────────────────────────────────────────────────────────────────────────────

class S3Client:
    """
    High-level storage wrapper with safe defaults.

    Parameters
    ----------
    bucket : str | None
        Default bucket. Defaults to `settings.STORAGE_DEFAULT_BUCKET`; every
        operation also accepts an explicit `bucket=`.
    region_name : str | None
        Defaults to `settings.AWS_REGION`.
    endpoint_url : str | None
        S3-compatible endpoint. Defaults to `settings.AWS_S3_ENDPOINT_URL`.
    addressing_style : str | None
        "path" (default), "virtual" or "auto".

    Notes
    -----
    * Credentials: explicit `AWS_ACCESS_KEY_ID` + `AWS_SECRET_ACCESS_KEY`
      when configured, otherwise the standard AWS credential chain.
    * Retries/Timeouts: bounded retry policy and short timeouts to fail fast.
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        *,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        addressing_style: Optional[str] = None,
    ) -> None:
        self.bucket = bucket or settings.STORAGE_DEFAULT_BUCKET
        if not self.bucket:
            raise S3StorageError("STORAGE_DEFAULT_BUCKET not configured")

        self.region = region_name or settings.AWS_REGION
        endpoint_cfg = endpoint_url or settings.AWS_S3_ENDPOINT_URL

        cfg = BotoConfig(
            signature_version="s3v4",
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=3,
            read_timeout=10,
            s3={"addressing_style": addressing_style or settings.AWS_S3_ADDRESSING_STYLE},
        )

        ak = settings.AWS_ACCESS_KEY_ID
        sk = _secret_value(settings.AWS_SECRET_ACCESS_KEY)
        st = _secret_value(settings.AWS_SESSION_TOKEN)

        client_kwargs: Dict[str, Any] = {"config": cfg, "region_name": self.region}
        if endpoint_cfg:
            client_kwargs["endpoint_url"] = endpoint_cfg
        if ak and sk:
            client_kwargs["aws_access_key_id"] = ak
            client_kwargs["aws_secret_access_key"] = sk
            if st:
                client_kwargs["aws_session_token"] = st

        try:
            self.client = boto3.client("s3", **client_kwargs)
        except Exception as e:  # pragma: no cover
            raise S3StorageError(f"Failed to create S3 client: {e}") from e

        self._repr = f"S3Client(bucket={self.bucket}, region={self.region}, endpoint={'yes' if endpoint_cfg else 'no'})"

    # ────────────────────────────────────────────────────────────────────────
    # 🔐 Signed URL helpers
    # ────────────────────────────────────────────────────────────────────────

    def presigned_get(
        self,
        key: str,
        *,
        bucket: Optional[str] = None,
        expires_in: int = 300,
    ) -> str:
        """
        Generate a short-lived **presigned GET** URL.

        Parameters
        ----------
        key : str
            Object key (normalized).
        bucket : str | None
            Bucket override (defaults to the client's bucket).
        expires_in : int
            TTL seconds.

        Raises
        ------
        S3StorageError
            On signing failure or invalid key/bucket.
        """
        params: Dict[str, Any] = {
            "Bucket": _normalize_bucket(bucket or self.bucket),
            "Key": _normalize_key(key),
        }

        try:
            return self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params=params,
                ExpiresIn=int(expires_in),
            )
        except Exception as e:
            raise S3StorageError(f"Failed to create presigned GET: {e}") from e

    def presigned_put(
        self,
        key: str,
        *,
        content_type: str,
        bucket: Optional[str] = None,
        expires_in: int = 900,
        cache_control: Optional[str] = None,
    ) -> str:
        """
        Generate a **presigned PUT** URL for direct-to-storage uploads.

        Clients **must** send the same `Content-Type` header on upload.
        """
        params: Dict[str, Any] = {
            "Bucket": _normalize_bucket(bucket or self.bucket),
            "Key": _normalize_key(key),
            "ContentType": content_type,
        }
        if cache_control:
            params["CacheControl"] = cache_control

        try:
            return self.client.generate_presigned_url(
                ClientMethod="put_object",
                Params=params,
                ExpiresIn=int(expires_in),
                HttpMethod="PUT",
            )
        except Exception as e:
            raise S3StorageError(f"Failed to create presigned PUT: {e}") from e

    # ────────────────────────────────────────────────────────────────────────
    # 🔎 Metadata helpers
    # ────────────────────────────────────────────────────────────────────────

    def head(self, key: str, *, bucket: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        HEAD the object; metadata dict, or None when it does not exist.

        Raises
        ------
        S3StorageError
            For anything other than "not found" (auth, throttling, outage).
        """
        b = _normalize_bucket(bucket or self.bucket)
        k = _normalize_key(key)
        try:
            return dict(self.client.head_object(Bucket=b, Key=k) or {})
        except botocore.exceptions.ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in {"404", "NoSuchKey", "NotFound"}:
                return None
            raise S3StorageError(f"head_object failed: {code or e}") from e
        except Exception as e:
            raise S3StorageError(f"head_object failed: {e}") from e

    def exists(self, key: str, *, bucket: Optional[str] = None) -> bool:
        """Boolean existence check using `HEAD`."""
        return self.head(key, bucket=bucket) is not None

    def __repr__(self) -> str:  # pragma: no cover
        return self._repr


__all__ = ["S3Client", "S3StorageError"]
