from __future__ import annotations

import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from .config_types import ClientConfig
from .errors import NetworkError

log = logging.getLogger(__name__)

JSON = "application/json"
FORM = "application/x-www-form-urlencoded"

# Characters left as-is when escaping an assembled query segment.
QUERY_SAFE = "?&=/:@-._~!$'()*+,;"
MAX_REDIRECTS = 20


def _origin(url: httpx.URL) -> tuple[str, str, int | None]:
    return url.scheme, url.host, url.port


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query(query: Mapping[str, Any] | None) -> str:
    if not query:
        return ""
    return "?" + "&".join(f"{key}={_format_value(value)}" for key, value in query.items())


def encode_query(query_string: str) -> str:
    return quote(query_string, safe=QUERY_SAFE)


class Transport:
    """One pooled httpx.AsyncClient shared by every call of a CouchDBClient."""

    def __init__(self, cfg: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None):
        self._cfg = cfg
        kwargs: dict[str, Any] = {}
        if cfg.timeout_s is not None:
            kwargs["timeout"] = cfg.timeout_s
        if transport is not None:
            kwargs["transport"] = transport

        # Cookies are managed by the session, never by httpx's jar.
        no_cookies = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
        self._client = httpx.AsyncClient(
            base_url=cfg.base_url,
            headers={"User-Agent": "couchdb-client/0.1.0", "Accept": JSON},
            cookies=no_cookies,
            follow_redirects=False,
            **kwargs,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_request(
            self,
            method: str,
            path: str,
            *,
            cookie: str | None = None,
            content: str | bytes | None = None,
            content_type: str | None = None,
            timeout: float | None = None,
    ) -> httpx.Request:
        headers: dict[str, str] = {}
        if cookie:
            headers["Cookie"] = cookie
        if content_type:
            headers["Content-Type"] = content_type
        extra: dict[str, Any] = {}
        if timeout is not None:
            extra["timeout"] = timeout
        return self._client.build_request(method, path, headers=headers, content=content, **extra)

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send ``request``, following redirects.

        httpx drops a hand-set ``Cookie`` header when it builds a redirect
        request, so the session cookie is carried over here for hops that
        stay on the same origin.
        """
        cookie = request.headers.get("Cookie")
        origin = _origin(request.url)
        for _ in range(MAX_REDIRECTS + 1):
            response = await self._send_once(request)
            next_request = response.next_request
            if next_request is None:
                return response
            await response.aclose()
            if cookie and _origin(next_request.url) == origin:
                next_request.headers["Cookie"] = cookie
            request = next_request
        raise NetworkError(f"{request.method} {request.url.path} failed: too many redirects")

    async def _send_once(self, request: httpx.Request) -> httpx.Response:
        try:
            response = await self._client.send(request)
        except httpx.RequestError as e:
            raise NetworkError(f"{request.method} {request.url.path} failed: {e}") from e
        log.debug("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response
