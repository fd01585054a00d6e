from __future__ import annotations

import os

import typer

from .. import console
from ..config import SETTING_KEYS, config_path, default_config, load_config, save_config, set_value

app = typer.Typer(help="Manage connection settings (~/.config/couchdb-cli/config.toml).")


@app.command("init")
def init_config(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        host: str = typer.Option("127.0.0.1", "--host", prompt="CouchDB host"),
        port: int = typer.Option(5984, "--port", prompt="CouchDB port"),
        username: str = typer.Option("", "--username", prompt="Username"),
        password: str = typer.Option("", "--password", prompt=True, hide_input=True),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.host = host.strip() or cfg.host
    cfg.port = port
    cfg.username = username
    cfg.password = password
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_config():
    cfg = load_config()
    password_state = "(set)" if cfg.password else "(empty)"
    console.console.print(
        f"base_url={cfg.protocol}{cfg.host}:{cfg.port} username={cfg.username or '-'} "
        f"password={password_state} decode_policy={cfg.decode_policy} cookie_policy={cfg.cookie_policy}"
    )


@app.command("set")
def set_config(
        key: str = typer.Argument(..., help=f"Setting key ({', '.join(SETTING_KEYS)})."),
        value: str = typer.Argument(..., help="New value."),
):
    cfg = load_config(env=False)
    try:
        set_value(cfg, key, value)
    except KeyError:
        console.err(f"Unknown setting: {key}")
        raise typer.Exit(code=2)
    except ValueError:
        console.err(f"Invalid value for {key}: {value}")
        raise typer.Exit(code=2)
    save_config(cfg)
    console.ok("Config updated.")


@app.command("path")
def show_path():
    console.console.print(config_path())
