"""CLI helpers for managing vmetal configuration files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from commands.common import reported_errors
from vmetal_core import AppConfig, resolve_config_path
from ui.formatters import config_summary_table

app = typer.Typer(help="Manage vmetal configuration files")

_TEMPLATE = """[vmetal]
# base_url = https://api.vultr.com/v1
# timeout = 30

[vmetal.secrets]
# api_key =
"""


def register(app_root: typer.Typer) -> None:
    """Attach configuration-related subcommands to the CLI."""

    app_root.add_typer(app, name="config")


@app.command("init")
def init_config(
    path: Optional[Path] = typer.Option(None, "--path", help="Destination for the ini file"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Overwrite when the file already exists"),
) -> None:
    """Create a template configuration file with explanatory comments."""

    destination = (path or resolve_config_path()).expanduser()
    if destination.exists() and not overwrite:
        typer.secho(
            f"Configuration file already exists: {destination}",
            fg=typer.colors.YELLOW,
        )
        raise typer.Exit(code=1)

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(_TEMPLATE, encoding="ascii")

    try:
        os.chmod(destination, 0o600)
    except (PermissionError, NotImplementedError):  # pragma: no cover - platform specific
        pass

    typer.secho(f"Template saved to {destination}", fg=typer.colors.GREEN)


@app.command("show")
def show_config(
    path: Optional[Path] = typer.Option(None, "--path", help="Configuration file to read"),
) -> None:
    """Print the effective configuration, with secrets masked."""

    with reported_errors():
        config = AppConfig.from_sources(ini_path=(path or resolve_config_path()).expanduser())
    Console().print(config_summary_table(config))
