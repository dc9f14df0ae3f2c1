from __future__ import annotations

"""
Range-correct streaming proxy.

Fetches a single upstream object with the client's `Range` header forwarded
verbatim and relays status, range headers and bytes back to the client.

Contract
--------
- Upstream 200/206 only; anything else (or a network error) is an
  `UpstreamFailureException` before a single byte is sent.
- Status mirrors upstream. `Content-Type` (default ``video/mp4``),
  `Content-Length` and `Content-Range` are mirrored; the fixed media headers
  from `app.security_headers.STREAM_HEADERS` are always set.
- Bytes are relayed in upstream order. Each downstream `send` is awaited
  before the next upstream read, so a slow client throttles the fetch.
- Client disconnect or upstream read failure ends the relay, closes the
  upstream response and never produces a second error. After a read failure
  the response is left unterminated so the client sees a truncated message
  rather than a short but complete one.

The `httpx.AsyncClient` (connection pool) is process-wide, created lazily and
closed from the application lifespan.
"""

import logging
from typing import Optional
from urllib.parse import urlsplit

import anyio
import httpx
from starlette.responses import StreamingResponse
from starlette.types import Send

from app.core.config import settings
from app.core.exception_handlers import failure_response
from app.core.exceptions import UpstreamFailureException
from app.security_headers import set_stream_headers

logger = logging.getLogger(__name__)

__all__ = [
    "StreamSession",
    "RangeProxy",
    "ProxyStreamingResponse",
    "get_upstream_client",
    "close_upstream_client",
    "get_range_proxy",
]

DEFAULT_CONTENT_TYPE = "video/mp4"
_ACCEPTED_STATUSES = (200, 206)


def redact_url(url: str) -> str:
    """scheme://host/path, without query (signing tokens) or credentials."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return f"{parts.scheme}://{host}{parts.path}"


class StreamSession:
    """Per-request streaming state; `headers_sent` flips once the status line is out."""

    def __init__(self) -> None:
        self.headers_sent = False
        self.bytes_sent = 0
        self.client_disconnected = False
        self.upstream_failed = False


# ─────────────────────────────────────────────────────────────
# 🌐 Upstream client (process-wide pool)
# ─────────────────────────────────────────────────────────────
_client: Optional[httpx.AsyncClient] = None


def _build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=settings.UPSTREAM_CONNECT_TIMEOUT,
            read=settings.UPSTREAM_READ_TIMEOUT,
            write=settings.UPSTREAM_WRITE_TIMEOUT,
            pool=settings.UPSTREAM_POOL_TIMEOUT,
        ),
        limits=httpx.Limits(
            max_connections=settings.UPSTREAM_MAX_CONNECTIONS,
            max_keepalive_connections=settings.UPSTREAM_MAX_KEEPALIVE,
        ),
        follow_redirects=True,
        trust_env=False,
    )


def get_upstream_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = _build_client()
    return _client


async def close_upstream_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


# ─────────────────────────────────────────────────────────────
# 📡 Streaming response
# ─────────────────────────────────────────────────────────────
def _mirror_headers(upstream: httpx.Response) -> dict[str, str]:
    headers = {"Content-Type": upstream.headers.get("content-type") or DEFAULT_CONTENT_TYPE}
    for name in ("Content-Length", "Content-Range"):
        value = upstream.headers.get(name)
        if value:
            headers[name] = value
    set_stream_headers(headers)
    return headers


class ProxyStreamingResponse(StreamingResponse):
    """Relays an open upstream response; owns closing it."""

    def __init__(self, upstream: httpx.Response, *, session: StreamSession, chunk_size: int, locator: str) -> None:
        self.upstream = upstream
        self.session = session
        self.locator = locator
        super().__init__(
            content=upstream.aiter_bytes(chunk_size),
            status_code=upstream.status_code,
            headers=_mirror_headers(upstream),
        )

    async def stream_response(self, send: Send) -> None:
        try:
            await send({"type": "http.response.start", "status": self.status_code, "headers": self.raw_headers})
            self.session.headers_sent = True
            async for chunk in self.body_iterator:
                await send({"type": "http.response.body", "body": chunk, "more_body": True})
                self.session.bytes_sent += len(chunk)
        except OSError:
            self.session.client_disconnected = True
            logger.info("Client disconnected after %s bytes from %s", self.session.bytes_sent, self.locator)
            return
        except (httpx.HTTPError, httpx.StreamError) as e:
            self.session.upstream_failed = True
            failure_response(
                UpstreamFailureException(locator=self.locator, reason=f"read failed: {e.__class__.__name__}: {e}"),
                None,
                session=self.session,
            )
            return
        finally:
            with anyio.CancelScope(shield=True):
                await self.upstream.aclose()

        try:
            await send({"type": "http.response.body", "body": b"", "more_body": False})
        except OSError:
            self.session.client_disconnected = True


# ─────────────────────────────────────────────────────────────
# 🔁 Proxy
# ─────────────────────────────────────────────────────────────
class RangeProxy:
    def __init__(self, client: Optional[httpx.AsyncClient] = None, *, chunk_size: Optional[int] = None) -> None:
        self._client = client
        self.chunk_size = int(chunk_size or settings.PROXY_CHUNK_SIZE)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client if self._client is not None else get_upstream_client()

    async def stream(
        self,
        url: str,
        range_header: Optional[str],
        user_agent: Optional[str],
        session: StreamSession,
    ) -> ProxyStreamingResponse:
        """
        Open the upstream fetch and return the relaying response.

        Steps
        -----
        1) Forward `Range` verbatim (when present) and `User-Agent`
        2) Reject any upstream status other than 200/206
        3) Wrap the open response; bytes flow when the server sends it

        Raises
        ------
        UpstreamFailureException
            Network error or unexpected upstream status.
        """
        locator = redact_url(url)
        headers = {"User-Agent": user_agent or "", "Accept-Encoding": "identity"}
        if range_header:
            headers["Range"] = range_header

        request = self.client.build_request("GET", url, headers=headers)
        try:
            upstream = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise UpstreamFailureException(locator=locator, reason=f"{e.__class__.__name__}: {e}") from e

        if upstream.status_code not in _ACCEPTED_STATUSES:
            await upstream.aclose()
            raise UpstreamFailureException(upstream_status=upstream.status_code, locator=locator)

        logger.debug("Upstream %s %s range=%s", upstream.status_code, locator, range_header or "-")
        return ProxyStreamingResponse(upstream, session=session, chunk_size=self.chunk_size, locator=locator)


def get_range_proxy() -> RangeProxy:
    """FastAPI dependency."""
    return RangeProxy()
