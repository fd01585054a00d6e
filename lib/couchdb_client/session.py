from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlencode

from .config_types import COOKIE_POLICIES, ClientConfig
from .decoding import decode_session
from .errors import AuthError, NetworkError
from .models import SessionInfo
from .transport import FORM, Transport

log = logging.getLogger(__name__)


def select_cookie(set_cookie_values: list[str], policy: str = "last") -> str | None:
    """Reduce ``Set-Cookie`` header values to a ``Cookie`` header value.

    Only the leading ``name=value`` pair of each header is kept. With the
    ``"last"`` policy the last header wins; ``"merge"`` keeps one pair per
    cookie name, later headers overriding earlier ones.
    """
    if policy not in COOKIE_POLICIES:
        raise ValueError(f"unknown cookie policy: {policy!r}")
    pairs = [value.split(";", 1)[0].strip() for value in set_cookie_values]
    pairs = [p for p in pairs if p]
    if not pairs:
        return None
    if policy == "last":
        return pairs[-1]
    by_name: dict[str, str] = {}
    for pair in pairs:
        by_name[pair.split("=", 1)[0].strip()] = pair
    return "; ".join(by_name.values())


class SessionManager:
    """Owns the session cookie and the ``/_session`` payload.

    Authentication happens at most once per successful outcome: concurrent
    callers share a single in-flight request, and once the payload is stored
    it is returned without touching the network again.
    """

    def __init__(self, cfg: ClientConfig, transport: Transport):
        self._cfg = cfg
        self._t = transport
        self._cookie: str | None = None
        self._info: SessionInfo | None = None
        self._inflight: asyncio.Future[SessionInfo] | None = None

    @property
    def cookie(self) -> str | None:
        return self._cookie

    @property
    def info(self) -> SessionInfo | None:
        return self._info

    @property
    def is_authorized(self) -> bool:
        return self._info is not None and self._info.ok

    async def ensure_authenticated(self) -> SessionInfo:
        if self._info is not None:
            return self._info
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._authenticate())
            self._inflight.add_done_callback(self._clear_inflight)
        return await asyncio.shield(self._inflight)

    def _clear_inflight(self, _fut: asyncio.Future[SessionInfo]) -> None:
        self._inflight = None

    async def _authenticate(self) -> SessionInfo:
        body = urlencode({"name": self._cfg.username, "password": self._cfg.password})
        request = self._t.build_request(
            "POST",
            "/_session",
            content=body,
            content_type=FORM,
            timeout=self._cfg.write_timeout_s,
        )
        try:
            response = await self._t.send(request)
        except NetworkError as e:
            raise AuthError(None, f"session request failed: {e}") from e

        decoded = decode_session(response)
        if not decoded.ok:
            raise AuthError(response.status_code, f"session response rejected: {decoded.error}", decoded.body)

        cookie = select_cookie(response.headers.get_list("set-cookie"), self._cfg.cookie_policy)
        # Both fields change together, after the body has decoded.
        self._cookie, self._info = cookie, decoded.value
        log.debug("session established for %r (ok=%s)", decoded.value.name, decoded.value.ok)
        return decoded.value
