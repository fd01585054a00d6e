from __future__ import annotations

import typer

from .commands import config_cmd, docs_cmd, session_cmd
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="couchdb",
        help="CouchDB command-line client",
        no_args_is_help=True,
    )

    app.command("dbs")(docs_cmd.list_dbs)
    app.command("get")(docs_cmd.get_doc)
    app.command("insert")(docs_cmd.insert_doc)
    app.command("update")(docs_cmd.update_doc)
    app.command("delete")(docs_cmd.delete_doc)
    app.command("session")(session_cmd.session)
    app.add_typer(config_cmd.app, name="config")

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
