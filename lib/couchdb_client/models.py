from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class SessionInfo:
    """Body of a successful ``POST /_session``."""

    ok: bool
    name: str | None = None
    roles: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of insert/update/delete.

    ``FAILED_UPDATE`` is the value callers see when the server reply could
    not be decoded; check ``ok`` rather than waiting for an exception.
    """

    ok: bool
    id: str
    rev: str


FAILED_UPDATE = UpdateResult(ok=False, id="", rev="")


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Either a decoded value or the reason decoding failed."""

    value: T | None = None
    error: str | None = None
    status_code: int | None = None
    body: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
