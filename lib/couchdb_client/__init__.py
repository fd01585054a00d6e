from .client import CouchDBClient
from .config_types import ClientConfig
from .errors import ApiError, AuthError, CouchDBClientError, DecodeError, NetworkError, TransportError
from .models import FAILED_UPDATE, SessionInfo, UpdateResult

__all__ = [
    "CouchDBClient",
    "ClientConfig",
    "ApiError",
    "AuthError",
    "CouchDBClientError",
    "DecodeError",
    "NetworkError",
    "TransportError",
    "SessionInfo",
    "UpdateResult",
    "FAILED_UPDATE",
]
