"""Typer commands for account SSH keys."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from commands.common import load_adapter, reported_errors
from services.providers import build_sshkey_service
from services.sshkey import SshKeyService
from ui.formatters import ssh_keys_table
from ui.menus import confirm_action

app = typer.Typer(help="Manage SSH keys stored on the Vultr account")
console = Console()


def register(app_root: typer.Typer) -> None:
    """Attach SSH key subcommands to the CLI."""

    app_root.add_typer(app, name="sshkey")


def _service() -> SshKeyService:
    return build_sshkey_service(load_adapter())


def _read_key(path: Path) -> str:
    return path.read_text(encoding="utf-8").strip()


@app.command("list")
def list_keys() -> None:
    """List SSH keys."""

    service = _service()
    with reported_errors():
        keys = service.get_list()
    if keys is None:
        typer.secho("No SSH keys on this account", fg=typer.colors.YELLOW)
        return
    console.print(ssh_keys_table(keys))


@app.command("create")
def create(
    name: str = typer.Argument(..., help="Name of the key"),
    key_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Public key file (authorized_keys format)"),
) -> None:
    """Register a new SSH public key."""

    service = _service()
    with reported_errors():
        key_id = service.create(name, _read_key(key_file))
    console.print(f"[green]SSH key created: {key_id}[/green]")


@app.command("update")
def update(
    key_id: str = typer.Argument(..., help="SSHKEYID of the key"),
    name: Optional[str] = typer.Option(None, "--name", help="New name"),
    key_file: Optional[Path] = typer.Option(
        None, "--key-file", exists=True, dir_okay=False, help="File with the new public key"
    ),
) -> None:
    """Rename a key or replace its contents. Existing servers keep the old key."""

    public_key = _read_key(key_file) if key_file else None
    service = _service()
    with reported_errors():
        status = service.update(key_id, name, public_key)
    console.print(f"[green]SSH key {key_id} updated[/green] (HTTP {status})")


@app.command("destroy")
def destroy(
    key_id: str = typer.Argument(..., help="SSHKEYID of the key"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove a key from the account. Servers that already have it keep it."""

    if not (yes or confirm_action(f"Remove SSH key {key_id}?")):
        typer.secho("Operation cancelled", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)
    service = _service()
    with reported_errors():
        status = service.destroy(key_id)
    console.print(f"[green]SSH key {key_id} removed[/green] (HTTP {status})")
