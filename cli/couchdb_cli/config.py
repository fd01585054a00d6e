from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from typing import Any

import tomli_w
from couchdb_client.config_types import COOKIE_POLICIES, DECODE_POLICIES
from platformdirs import user_config_dir

APP_NAME = "couchdb-cli"
CONFIG_FILENAME = "config.toml"
ENV_USER = "COUCHDB_USER"
ENV_PASSWORD = "COUCHDB_PASSWORD"

SETTING_KEYS = ("protocol", "host", "port", "username", "password", "decode_policy", "cookie_policy")


@dataclass
class AppConfig:
    protocol: str = "http://"
    host: str = "127.0.0.1"
    port: int = 5984
    username: str = ""
    password: str = ""
    decode_policy: str = "sentinel"
    cookie_policy: str = "last"


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig()


def normalize_protocol(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    if not value:
        return "http://"
    if not value.endswith("://"):
        value = value.rstrip(":/") + "://"
    return value


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return {
        "protocol": cfg.protocol,
        "host": cfg.host,
        "port": cfg.port,
        "decode_policy": cfg.decode_policy,
        "cookie_policy": cfg.cookie_policy,
        "auth": {
            "username": cfg.username,
            "password": cfg.password,
        },
    }


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    cfg.protocol = normalize_protocol(str(data.get("protocol") or cfg.protocol))
    cfg.host = str(data.get("host") or cfg.host).strip()
    port = data.get("port")
    if port is not None:
        try:
            cfg.port = int(port)
        except (TypeError, ValueError):
            pass
    cfg.decode_policy = str(data.get("decode_policy") or cfg.decode_policy)
    cfg.cookie_policy = str(data.get("cookie_policy") or cfg.cookie_policy)
    auth_raw = data.get("auth") or {}
    if isinstance(auth_raw, dict):
        cfg.username = str(auth_raw.get("username") or "")
        cfg.password = str(auth_raw.get("password") or "")
    return cfg


def apply_env(cfg: AppConfig) -> AppConfig:
    username = os.getenv(ENV_USER)
    password = os.getenv(ENV_PASSWORD)
    if username:
        cfg.username = username
    if password:
        cfg.password = password
    return cfg


def load_config(*, env: bool = True) -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        cfg = from_toml(data)
    except FileNotFoundError:
        cfg = default_config()
    return apply_env(cfg) if env else cfg


def set_value(cfg: AppConfig, key: str, value: str) -> AppConfig:
    k = key.strip().lower()
    if k not in SETTING_KEYS:
        raise KeyError(key)
    if k == "port":
        cfg.port = int(value)
    elif k == "protocol":
        cfg.protocol = normalize_protocol(value)
    elif k == "decode_policy" and value not in DECODE_POLICIES:
        raise ValueError(value)
    elif k == "cookie_policy" and value not in COOKIE_POLICIES:
        raise ValueError(value)
    else:
        setattr(cfg, k, value.strip())
    return cfg


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
