from __future__ import annotations

from couchdb_client import CouchDBClient
from couchdb_client.config_types import ClientConfig

from .config import AppConfig, normalize_protocol


def make_client(
    cfg: AppConfig,
    *,
    protocol: str | None = None,
    host: str | None = None,
    port: int | None = None,
) -> CouchDBClient:
    return CouchDBClient(
        ClientConfig(
            protocol=normalize_protocol(protocol) if protocol else cfg.protocol,
            host=host or cfg.host,
            port=port if port is not None else cfg.port,
            username=cfg.username,
            password=cfg.password,
            decode_policy=cfg.decode_policy,
            cookie_policy=cfg.cookie_policy,
        )
    )
