from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import typer
from couchdb_client import AuthError, CouchDBClient, DecodeError, NetworkError

from .. import console
from ..config import load_config
from ..http import make_client

T = TypeVar("T")

HOST_OPTION = typer.Option(None, "--host", help="Override CouchDB host.")
PORT_OPTION = typer.Option(None, "--port", help="Override CouchDB port.")
PROTOCOL_OPTION = typer.Option(None, "--protocol", help="Override protocol (http or https).")


def run_with_client(
        fn: Callable[[CouchDBClient], Awaitable[T]],
        *,
        protocol: str | None,
        host: str | None,
        port: int | None,
) -> T:
    """Open a client, run ``fn`` against it and close the client again."""
    cfg = load_config()
    client = make_client(cfg, protocol=protocol, host=host, port=port)

    async def _main() -> T:
        async with client:
            return await fn(client)

    try:
        return asyncio.run(_main())
    except AuthError as e:
        console.err(f"Authentication failed: {e}")
        raise typer.Exit(code=2)
    except NetworkError as e:
        console.err(f"Cannot reach CouchDB: {e}")
        raise typer.Exit(code=2)
    except DecodeError as e:
        console.err(f"Unexpected response: {e}")
        raise typer.Exit(code=2)


def parse_query(pairs: list[str] | None) -> dict[str, Any]:
    query: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            console.err(f"Invalid query parameter {pair!r}, expected key=value.")
            raise typer.Exit(code=2)
        query[key.strip()] = value
    return query
