from __future__ import annotations

import json
from typing import Any

import typer
from rich.table import Table

from .. import console
from ._common import HOST_OPTION, PORT_OPTION, PROTOCOL_OPTION, parse_query, run_with_client


def _load_body(data: str | None, file: str | None) -> Any:
    if bool(data) == bool(file):
        console.err("Provide exactly one of --data or --file.")
        raise typer.Exit(code=2)
    raw = data
    if file:
        try:
            with open(file, encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            console.err(f"Cannot read {file}: {e}")
            raise typer.Exit(code=2)
    try:
        return json.loads(raw or "")
    except ValueError as e:
        console.err(f"Body is not valid JSON: {e}")
        raise typer.Exit(code=2)


def _report_update(result, *, json_out: bool) -> None:
    if json_out:
        console.print_json({"ok": result.ok, "id": result.id, "rev": result.rev})
    elif result.ok:
        console.ok(f"id={result.id} rev={result.rev}")
    else:
        console.err("CouchDB did not confirm the write.")
    if not result.ok:
        raise typer.Exit(code=1)


def list_dbs(
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
        protocol: str | None = PROTOCOL_OPTION,
        host: str | None = HOST_OPTION,
        port: int | None = PORT_OPTION,
):
    """List databases."""
    names = run_with_client(lambda c: c.list_databases(), protocol=protocol, host=host, port=port)
    if json_out:
        console.print_json(names)
        return
    if names is None:
        console.warn("Server returned no database list.")
        return
    table = Table(title="Databases")
    table.add_column("name")
    for name in names:
        table.add_row(name)
    console.print(table)


def get_doc(
        db: str = typer.Argument(..., help="Database name."),
        uri: str = typer.Argument(..., help="Document id or view path."),
        query: list[str] | None = typer.Option(None, "-q", "--query", help="Query parameter key=value (repeatable)."),
        protocol: str | None = PROTOCOL_OPTION,
        host: str | None = HOST_OPTION,
        port: int | None = PORT_OPTION,
):
    """Fetch a document or view result."""
    params = parse_query(query)
    response = run_with_client(lambda c: c.get(db, uri, params), protocol=protocol, host=host, port=port)
    try:
        console.print_json(response.json())
    except ValueError:
        console.print(response.text)
    if response.status_code >= 400:
        raise typer.Exit(code=1)


def insert_doc(
        db: str = typer.Argument(..., help="Database name."),
        data: str | None = typer.Option(None, "--data", help="Document as a JSON string."),
        file: str | None = typer.Option(None, "--file", help="Read the document from a JSON file."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
        protocol: str | None = PROTOCOL_OPTION,
        host: str | None = HOST_OPTION,
        port: int | None = PORT_OPTION,
):
    """Create a document."""
    body = _load_body(data, file)
    result = run_with_client(lambda c: c.insert(db, body), protocol=protocol, host=host, port=port)
    _report_update(result, json_out=json_out)


def update_doc(
        db: str = typer.Argument(..., help="Database name."),
        uri: str = typer.Argument(..., help="Document id."),
        data: str | None = typer.Option(None, "--data", help="Document as a JSON string."),
        file: str | None = typer.Option(None, "--file", help="Read the document from a JSON file."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
        protocol: str | None = PROTOCOL_OPTION,
        host: str | None = HOST_OPTION,
        port: int | None = PORT_OPTION,
):
    """Create or replace a document at a known id."""
    body = _load_body(data, file)
    result = run_with_client(lambda c: c.update(db, uri, body), protocol=protocol, host=host, port=port)
    _report_update(result, json_out=json_out)


def delete_doc(
        db: str = typer.Argument(..., help="Database name."),
        uri: str = typer.Argument(..., help="Document id."),
        rev: str = typer.Option(..., "--rev", help="Current document revision."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
        protocol: str | None = PROTOCOL_OPTION,
        host: str | None = HOST_OPTION,
        port: int | None = PORT_OPTION,
):
    """Delete a document revision."""
    if not yes and not typer.confirm(f"Delete {db}/{uri} at rev {rev}?", default=False):
        raise typer.Exit(code=0)
    result = run_with_client(lambda c: c.delete(db, uri, rev), protocol=protocol, host=host, port=port)
    _report_update(result, json_out=json_out)
