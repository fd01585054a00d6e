from __future__ import annotations

import typer

from .. import console
from ._common import HOST_OPTION, PORT_OPTION, PROTOCOL_OPTION, run_with_client


def session(
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
        protocol: str | None = PROTOCOL_OPTION,
        host: str | None = HOST_OPTION,
        port: int | None = PORT_OPTION,
):
    """Open a session with the configured credentials and show who you are."""
    info = run_with_client(lambda c: c.ensure_authenticated(), protocol=protocol, host=host, port=port)
    if json_out:
        console.print_json({"ok": info.ok, "name": info.name, "roles": list(info.roles)})
    elif info.ok:
        roles = ", ".join(info.roles) or "-"
        console.ok(f"name={info.name or '-'} roles={roles}")
    else:
        console.err("CouchDB refused the session.")
    if not info.ok:
        raise typer.Exit(code=1)
