from __future__ import annotations

import json
from typing import Any, Mapping

import httpx

from .config_types import ClientConfig
from .decoding import decode_db_list, decode_update_result, unwrap
from .models import FAILED_UPDATE, SessionInfo, UpdateResult
from .session import SessionManager
from .transport import JSON, Transport, build_query, encode_query


def _encode_body(body: Any) -> str | bytes:
    if isinstance(body, (str, bytes)):
        return body
    return json.dumps(body, ensure_ascii=False)


class CouchDBClient:
    """Async client for the CouchDB HTTP API.

    Operations that need a session (everything except ``get``) authenticate
    lazily on first use; the session cookie is then attached to every
    request, ``get`` included.
    """

    def __init__(self, cfg: ClientConfig | None = None, *, transport: httpx.AsyncBaseTransport | None = None):
        self._cfg = cfg or ClientConfig()
        self._t = Transport(self._cfg, transport=transport)
        self._session = SessionManager(self._cfg, self._t)

    async def __aenter__(self) -> "CouchDBClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._t.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    @property
    def base_url(self) -> str:
        return self._cfg.base_url

    @property
    def is_authorized(self) -> bool:
        return self._session.is_authorized

    @property
    def session(self) -> SessionInfo | None:
        return self._session.info

    @property
    def cookie(self) -> str | None:
        return self._session.cookie

    async def ensure_authenticated(self) -> SessionInfo:
        return await self._session.ensure_authenticated()

    async def list_databases(self) -> list[str] | None:
        await self.ensure_authenticated()
        request = self._t.build_request("GET", "/_all_dbs", cookie=self.cookie)
        response = await self._t.send(request)
        return unwrap(
            decode_db_list(response),
            fallback=None,
            policy=self._cfg.decode_policy,
            what="GET /_all_dbs",
        )

    async def get(self, db: str, uri: str, query: Mapping[str, Any] | None = None) -> httpx.Response:
        path = f"/{db}/{uri}" + encode_query(build_query(query))
        request = self._t.build_request("GET", path, cookie=self.cookie)
        return await self._t.send(request)

    async def insert(self, db: str, body: Any) -> UpdateResult:
        return await self._write("POST", f"/{db}", body)

    async def update(self, db: str, uri: str, body: Any) -> UpdateResult:
        return await self._write("PUT", f"/{db}/{uri}", body)

    async def delete(self, db: str, uri: str, rev: str) -> UpdateResult:
        await self.ensure_authenticated()
        path = f"/{db}/{uri}" + encode_query(build_query({"rev": rev}))
        request = self._t.build_request("DELETE", path, cookie=self.cookie)
        response = await self._t.send(request)
        return self._update_result(response, f"DELETE /{db}/{uri}")

    async def _write(self, method: str, path: str, body: Any) -> UpdateResult:
        await self.ensure_authenticated()
        request = self._t.build_request(
            method,
            path,
            cookie=self.cookie,
            content=_encode_body(body),
            content_type=JSON,
            timeout=self._cfg.write_timeout_s,
        )
        response = await self._t.send(request)
        return self._update_result(response, f"{method} {path}")

    def _update_result(self, response: httpx.Response, what: str) -> UpdateResult:
        return unwrap(
            decode_update_result(response),
            fallback=FAILED_UPDATE,
            policy=self._cfg.decode_policy,
            what=what,
        )
