from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

import httpx

from .config_types import DECODE_POLICIES
from .errors import DecodeError
from .models import Decoded, SessionInfo, UpdateResult

log = logging.getLogger(__name__)

T = TypeVar("T")


def _snippet(response: httpx.Response) -> str | None:
    if not response.content:
        return None
    return response.text[:1000]


def _failure(response: httpx.Response, reason: str) -> Decoded[Any]:
    return Decoded(error=reason, status_code=response.status_code, body=_snippet(response))


def decode_json(response: httpx.Response) -> Decoded[Any]:
    if not response.content:
        return _failure(response, "empty body")
    try:
        data = json.loads(response.content)
    except ValueError as e:
        return _failure(response, f"malformed JSON: {e}")
    return Decoded(value=data, status_code=response.status_code)


def decode_db_list(response: httpx.Response) -> Decoded[list[str]]:
    decoded = decode_json(response)
    if not decoded.ok:
        return decoded
    data = decoded.value
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        return _failure(response, "expected a JSON array of strings")
    return Decoded(value=list(data), status_code=response.status_code)


def decode_update_result(response: httpx.Response) -> Decoded[UpdateResult]:
    decoded = decode_json(response)
    if not decoded.ok:
        return decoded
    data = decoded.value
    if not isinstance(data, dict):
        return _failure(response, "expected a JSON object")
    ok, doc_id, rev = data.get("ok"), data.get("id"), data.get("rev")
    if not isinstance(ok, bool) or not isinstance(doc_id, str) or not isinstance(rev, str):
        return _failure(response, "missing ok/id/rev")
    return Decoded(value=UpdateResult(ok=ok, id=doc_id, rev=rev), status_code=response.status_code)


def decode_session(response: httpx.Response) -> Decoded[SessionInfo]:
    decoded = decode_json(response)
    if not decoded.ok:
        return decoded
    data = decoded.value
    if not isinstance(data, dict) or not isinstance(data.get("ok"), bool):
        return _failure(response, "not a session document")
    name = data.get("name")
    if name is not None and not isinstance(name, str):
        return _failure(response, "session name is not a string")
    roles = data.get("roles") or []
    if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
        return _failure(response, "session roles is not a list of strings")
    return Decoded(
        value=SessionInfo(ok=data["ok"], name=name, roles=tuple(roles)),
        status_code=response.status_code,
    )


def unwrap(decoded: Decoded[T], *, fallback: T, policy: str, what: str) -> T:
    """Apply the decode-failure policy at the public boundary.

    ``"sentinel"`` hands back ``fallback``; ``"raise"`` turns the failure
    into a DecodeError.
    """
    if decoded.ok:
        return decoded.value  # type: ignore[return-value]
    if policy not in DECODE_POLICIES:
        raise ValueError(f"unknown decode policy: {policy!r}")
    if policy == "raise":
        raise DecodeError(decoded.status_code, f"{what}: {decoded.error}", decoded.body)
    log.debug("%s: %s (status %s), returning fallback", what, decoded.error, decoded.status_code)
    return fallback
