# tests/test_core/test_main.py

"""
Probes, root and CORS on the real application factory.
"""

from types import SimpleNamespace

from fastapi.testclient import TestClient

from app import main as main_mod
from app.main import create_app


def test_healthz():
    r = TestClient(create_app()).get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert r.headers["x-request-id"]


def test_readyz_reports_db(monkeypatch):
    async def _down():
        return False

    async def _up():
        return True

    monkeypatch.setattr(main_mod, "db_healthcheck", _down)
    r = TestClient(create_app()).get("/readyz")
    assert r.status_code == 503
    assert r.json() == {"ready": False, "checks": {"db": False}}

    monkeypatch.setattr(main_mod, "db_healthcheck", _up)
    r = TestClient(create_app()).get("/readyz")
    assert r.status_code == 200


def test_root():
    body = TestClient(create_app()).get("/").json()
    assert body["name"] == "Lesson Video API"
    assert body["docs"] == "/docs"


def test_cors_preflight_allows_range():
    r = TestClient(create_app()).options(
        "/video",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "range",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert "range" in r.headers["access-control-allow-headers"].lower()


def test_lifespan_closes_upstream_pool(monkeypatch):
    closed = []

    async def _close():
        closed.append(True)

    async def _dispose():
        closed.append("engine")

    monkeypatch.setattr(main_mod, "close_upstream_client", _close)
    monkeypatch.setattr(main_mod, "async_engine", SimpleNamespace(dispose=_dispose))

    with TestClient(create_app()) as client:
        assert client.get("/healthz").status_code == 200
    assert closed == [True, "engine"]
