from __future__ import annotations

import asyncio
from typing import Callable

import httpx
import pytest

from couchdb_client import ClientConfig, CouchDBClient

SESSION_OK = {"ok": True, "name": "admin", "roles": ["_admin"]}


class FakeCouch:
    """Minimal CouchDB stand-in for httpx.MockTransport.

    Routes are keyed by ``(method, path)``; every request is recorded.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.session_delay = 0.0
        self.route("POST", "/_session", lambda _r: httpx.Response(
            200, json=SESSION_OK, headers={"Set-Cookie": "AuthSession=xyz; Version=1; Path=/; HttpOnly"}
        ))

    def route(self, method: str, path: str, fn: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method, path)] = fn

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/_session" and self.session_delay:
            await asyncio.sleep(self.session_delay)
        fn = self.routes.get((request.method, request.url.path))
        if fn is None:
            return httpx.Response(404, json={"error": "not_found", "reason": "missing"})
        return fn(request)


@pytest.fixture
def couch() -> FakeCouch:
    return FakeCouch()


@pytest.fixture
def make_client(couch: FakeCouch):
    def _make(**cfg) -> CouchDBClient:
        cfg.setdefault("username", "admin")
        cfg.setdefault("password", "secret")
        return CouchDBClient(ClientConfig(**cfg), transport=httpx.MockTransport(couch.handler))

    return _make
