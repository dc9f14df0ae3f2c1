# tests/fixtures/storage.py

"""
🧊 Storage fake:
- Drop-in for `app.utils.aws.S3Client` (presigned GET/PUT, HEAD, exists)
- Every grant carries a fresh signature so reuse is detectable
- Captures call arguments for assertions
"""

import itertools
from typing import Optional, Set, Tuple

import pytest

from app.utils.aws import S3StorageError

__all__ = ["FakeS3", "fake_s3", "failing_s3", "STORAGE_ORIGIN"]

STORAGE_ORIGIN = "https://proj.supabase.co"


class FakeS3:
    def __init__(
        self,
        *,
        objects: Optional[Set[Tuple[str, str]]] = None,
        raise_on_presign: Optional[Exception] = None,
    ):
        self.bucket = "videos"
        self.objects = objects  # None → every object exists
        self._raise_on_presign = raise_on_presign
        self._sig = itertools.count(1)
        self.presign_calls = []
        self.put_calls = []
        self.head_calls = []

    def presigned_get(self, key, *, bucket=None, expires_in=300):
        bucket = bucket or self.bucket
        self.presign_calls.append({"bucket": bucket, "key": key, "expires_in": expires_in})
        if self._raise_on_presign:
            raise self._raise_on_presign
        return (
            f"{STORAGE_ORIGIN}/storage/v1/s3/{bucket}/{key}"
            f"?X-Amz-Expires={expires_in}&X-Amz-Signature=sig{next(self._sig)}"
        )

    def presigned_put(self, key, *, content_type, bucket=None, expires_in=900, cache_control=None):
        bucket = bucket or self.bucket
        self.put_calls.append({"bucket": bucket, "key": key, "content_type": content_type, "expires_in": expires_in})
        if self._raise_on_presign:
            raise self._raise_on_presign
        return f"{STORAGE_ORIGIN}/storage/v1/s3/{bucket}/{key}?X-Amz-Signature=put{next(self._sig)}"

    def head(self, key, *, bucket=None):
        bucket = bucket or self.bucket
        self.head_calls.append({"bucket": bucket, "key": key})
        if self.objects is not None and (bucket, key) not in self.objects:
            return None
        return {"ContentLength": 1024, "ContentType": "video/mp4"}

    def exists(self, key, *, bucket=None):
        return self.head(key, bucket=bucket) is not None


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


def failing_s3() -> FakeS3:
    return FakeS3(raise_on_presign=S3StorageError("SignatureDoesNotMatch"))
