from __future__ import annotations

import json

import httpx
import pytest
from typer.testing import CliRunner

from couchdb_client import FAILED_UPDATE, AuthError, NetworkError, SessionInfo, UpdateResult
from couchdb_cli import main
from couchdb_cli.commands import _common


class _FakeClient:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.closed = False
        self.dbs: list[str] | None = ["alpha", "beta"]
        self.result = UpdateResult(ok=True, id="doc1", rev="1-abc")
        self.error: Exception | None = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.closed = True

    def _record(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    async def ensure_authenticated(self) -> SessionInfo:
        self._record("session")
        return SessionInfo(ok=True, name="admin", roles=("_admin",))

    async def list_databases(self):
        self._record("dbs")
        return self.dbs

    async def get(self, db, uri, query=None):
        self._record("get", db, uri, query)
        return httpx.Response(200, json={"_id": uri})

    async def insert(self, db, body):
        self._record("insert", db, body)
        return self.result

    async def update(self, db, uri, body):
        self._record("update", db, uri, body)
        return self.result

    async def delete(self, db, uri, rev):
        self._record("delete", db, uri, rev)
        return self.result


@pytest.fixture
def client(monkeypatch) -> _FakeClient:
    fake = _FakeClient()
    monkeypatch.setattr(_common, "load_config", lambda: None)
    monkeypatch.setattr(_common, "make_client", lambda *_args, **_kwargs: fake)
    return fake


def _invoke(*args: str, **kwargs):
    return CliRunner().invoke(main.app, list(args), **kwargs)


def test_dbs_lists_databases(client) -> None:
    result = _invoke("dbs")
    assert result.exit_code == 0
    assert "alpha" in result.output
    assert "beta" in result.output
    assert client.closed is True


def test_dbs_json_output(client) -> None:
    result = _invoke("dbs", "--json")
    assert result.exit_code == 0
    assert json.loads(result.output) == ["alpha", "beta"]


def test_dbs_without_list(client) -> None:
    client.dbs = None
    result = _invoke("dbs")
    assert result.exit_code == 0
    assert "no database list" in result.output


def test_get_passes_query(client) -> None:
    result = _invoke("get", "mydb", "doc1", "-q", "include_docs=true", "-q", "limit=5")
    assert result.exit_code == 0
    assert client.calls == [("get", "mydb", "doc1", {"include_docs": "true", "limit": "5"})]
    assert '"_id": "doc1"' in result.output


def test_get_rejects_bad_query(client) -> None:
    result = _invoke("get", "mydb", "doc1", "-q", "oops")
    assert result.exit_code == 2
    assert client.calls == []


def test_insert_reports_revision(client) -> None:
    result = _invoke("insert", "mydb", "--data", '{"title": "hello"}')
    assert result.exit_code == 0
    assert "rev=1-abc" in result.output
    assert client.calls == [("insert", "mydb", {"title": "hello"})]


def test_insert_reads_file(client, tmp_path) -> None:
    doc = tmp_path / "doc.json"
    doc.write_text('{"_id": "x"}', encoding="utf-8")
    result = _invoke("insert", "mydb", "--file", str(doc))
    assert result.exit_code == 0
    assert client.calls == [("insert", "mydb", {"_id": "x"})]


def test_insert_rejects_invalid_json(client) -> None:
    result = _invoke("insert", "mydb", "--data", "{nope")
    assert result.exit_code == 2
    assert client.calls == []


def test_update_failure_exits_nonzero(client) -> None:
    client.result = FAILED_UPDATE
    result = _invoke("update", "mydb", "doc1", "--data", "{}")
    assert result.exit_code == 1
    assert "did not confirm" in result.output


def test_delete_requires_confirmation(client) -> None:
    result = _invoke("delete", "mydb", "doc1", "--rev", "1-abc", input="n\n")
    assert result.exit_code == 0
    assert client.calls == []


def test_delete_with_yes(client) -> None:
    result = _invoke("delete", "mydb", "doc1", "--rev", "1-abc", "--yes")
    assert result.exit_code == 0
    assert client.calls == [("delete", "mydb", "doc1", "1-abc")]


def test_auth_error_exit_code(client) -> None:
    client.error = AuthError(401, "session response rejected: not a session document")
    result = _invoke("dbs")
    assert result.exit_code == 2
    assert "Authentication failed" in result.output


def test_network_error_exit_code(client) -> None:
    client.error = NetworkError("GET /_all_dbs failed: connection refused")
    result = _invoke("dbs")
    assert result.exit_code == 2
    assert "Cannot reach CouchDB" in result.output


def test_session_command(client) -> None:
    result = _invoke("session")
    assert result.exit_code == 0
    assert "name=admin" in result.output
    assert "_admin" in result.output
