from __future__ import annotations


class CouchDBClientError(Exception):
    """Base client error."""


class NetworkError(CouchDBClientError):
    """Transport/network layer error."""


TransportError = NetworkError


class ApiError(CouchDBClientError):
    def __init__(self, status_code: int | None, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthError(ApiError):
    """Session could not be established."""


class DecodeError(ApiError):
    """Response body did not match the expected shape."""
