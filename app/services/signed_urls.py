from __future__ import annotations

"""
Signed URL issuance for lesson media.

`SignedURLIssuer.issue(locator, ttl)` turns a classified locator into a URL a
player (or the range proxy) can fetch:

- opaque absolute URLs (external hosts, public storage objects) pass through
  unchanged with ``expires_in=None``;
- absolute URLs that point at a non-public storage object are decomposed and
  re-signed (a stored signed URL has usually expired);
- storage paths are signed directly.

Signing goes through the storage service's S3-compatible API (boto3
presigned GET). boto3 calls run in a worker thread so credential resolution
or the optional HEAD never block the event loop. Every failure surfaces as
`SigningFailureException`; the signed URL itself is never logged.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Optional

from anyio import to_thread

from app.core.exceptions import SigningFailureException
from app.services.locators import AbsoluteURL, MediaLocator, StoragePath, parse_storage_url
from app.utils.aws import S3Client, S3StorageError

logger = logging.getLogger(__name__)

__all__ = ["SignedAccessURL", "SignedURLIssuer", "get_storage_client", "get_signed_url_issuer"]


@dataclass(frozen=True)
class SignedAccessURL:
    """A fetchable URL; `expires_in` is None when it is not time-bounded."""

    url: str
    expires_in: Optional[int]


_storage_client: Optional[S3Client] = None


def get_storage_client() -> S3Client:
    """Process-wide storage client (created on first use)."""
    global _storage_client
    if _storage_client is None:
        try:
            _storage_client = S3Client()
        except S3StorageError as e:
            raise SigningFailureException(reason=f"storage client unavailable: {e}") from e
    return _storage_client


class SignedURLIssuer:
    def __init__(self, storage: Optional[S3Client] = None) -> None:
        self._storage = storage

    @property
    def storage(self) -> S3Client:
        if self._storage is None:
            self._storage = get_storage_client()
        return self._storage

    @staticmethod
    def signing_target(locator: MediaLocator) -> Optional[StoragePath]:
        """The storage object `locator` must be signed for, or None for passthrough."""
        if isinstance(locator, StoragePath):
            return locator
        ref = parse_storage_url(locator.url)
        if ref is not None and ref.needs_signing:
            return ref.as_storage_path()
        return None

    async def issue(self, locator: MediaLocator, ttl_seconds: int, *, verify_exists: bool = False) -> SignedAccessURL:
        """
        Issue a signed access URL for `locator`.

        Parameters
        ----------
        locator : AbsoluteURL | StoragePath
        ttl_seconds : int
            Lifetime of the grant.
        verify_exists : bool
            HEAD the object first so a missing object fails here rather than
            at playback time.

        Raises
        ------
        SigningFailureException
            Invalid path, missing object, credentials or service failure.
        """
        target = self.signing_target(locator)
        if target is None:
            assert isinstance(locator, AbsoluteURL)
            return SignedAccessURL(url=locator.url, expires_in=None)

        ttl = int(ttl_seconds)
        storage = self.storage
        try:
            if verify_exists:
                exists = await to_thread.run_sync(functools.partial(storage.exists, target.path, bucket=target.bucket))
                if not exists:
                    raise SigningFailureException(bucket=target.bucket, path=target.path, reason="object not found")
            url = await to_thread.run_sync(
                functools.partial(storage.presigned_get, target.path, bucket=target.bucket, expires_in=ttl)
            )
        except S3StorageError as e:
            raise SigningFailureException(bucket=target.bucket, path=target.path, reason=str(e)) from e

        logger.debug("Signed %s/%s for %ss", target.bucket, target.path, ttl)
        return SignedAccessURL(url=url, expires_in=ttl)


def get_signed_url_issuer() -> SignedURLIssuer:
    """FastAPI dependency."""
    return SignedURLIssuer()
