# tests/conftest.py
"""
Global test bootstrap
- Required settings (JWT secret, DB password, storage endpoint) set BEFORE any
  `app.*` import, since `app.core.config.settings` is built at import time
- Dummy AWS credentials so boto3 can sign locally without a network
- Fixtures from `tests/fixtures/*`
"""

from __future__ import annotations

import os

import pytest

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-lesson-video-api")
os.environ.setdefault("POSTGRES_PASSWORD", "test-password")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test-access-key")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test-secret-access-key")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_S3_ENDPOINT_URL", "https://proj.supabase.co/storage/v1/s3")
os.environ.setdefault("STORAGE_DEFAULT_BUCKET", "videos")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from tests.fixtures.store import *  # noqa: E402,F401,F403
from tests.fixtures.storage import *  # noqa: E402,F401,F403
from tests.fixtures.upstream import *  # noqa: E402,F401,F403
from tests.fixtures.tokens import *  # noqa: E402,F401,F403
from tests.fixtures.app import *  # noqa: E402,F401,F403


@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"
