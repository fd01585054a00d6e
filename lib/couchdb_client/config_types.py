from __future__ import annotations
from dataclasses import dataclass, field

DECODE_POLICIES = ("sentinel", "raise")
COOKIE_POLICIES = ("last", "merge")


@dataclass(frozen=True)
class ClientConfig:
    protocol: str = "http://"
    host: str = "127.0.0.1"
    port: int = 5984
    username: str = ""
    password: str = field(default="", repr=False)
    write_timeout_s: float = 30.0
    timeout_s: float | None = None
    decode_policy: str = "sentinel"
    cookie_policy: str = "last"
    base_url: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", f"{self.protocol}{self.host}:{self.port}")
