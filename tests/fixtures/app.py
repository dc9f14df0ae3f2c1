# tests/fixtures/app.py

"""
🧩 App Fixture:
- Builds the real application (`create_app`) so middleware and exception
  handlers match production
- Swaps the reference store, storage client and upstream pool for fakes
  through `dependency_overrides`
"""

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.repositories.topics import get_reference_store
from app.services.range_proxy import RangeProxy, get_range_proxy
from app.services.signed_urls import SignedURLIssuer, get_signed_url_issuer, get_storage_client
from tests.fixtures.upstream import mock_upstream

__all__ = ["make_client"]


@pytest.fixture
def make_client(store, fake_s3):
    """
    Factory: `make_client(handler=None, *, s3=None)` → `TestClient`.

    `handler` is an `httpx.MockTransport` handler standing in for the origin;
    `s3` replaces the default `fake_s3`.
    """

    def _make(handler=None, *, s3=None, raise_server_exceptions=True) -> TestClient:
        app = create_app()
        storage = s3 or fake_s3
        app.dependency_overrides[get_reference_store] = lambda: store
        app.dependency_overrides[get_storage_client] = lambda: storage
        app.dependency_overrides[get_signed_url_issuer] = lambda: SignedURLIssuer(storage=storage)
        if handler is not None:
            app.dependency_overrides[get_range_proxy] = lambda: RangeProxy(mock_upstream(handler), chunk_size=4096)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _make
