"""Interactive questionary-based menus for the vmetal CLI."""

from __future__ import annotations

from typing import Optional

import questionary
from rich.console import Console

from vmetal_core import AppConfig, with_overrides
from ui.formatters import config_summary_table


def prompt_app_config(config: AppConfig, console: Optional[Console] = None) -> AppConfig:
    """Prompt user for configuration values, returning an updated config object."""

    console = console or Console()
    console.print("[bold]vmetal configuration[/bold]")
    console.print("Leave blank to keep the current value.")

    current = config
    while True:
        api_key = questionary.password("Vultr API key").ask()
        base_url = questionary.text("API base URL", default=current.base_url).ask()
        timeout = questionary.text("Request timeout in seconds", default=str(current.timeout)).ask()

        updated = with_overrides(
            current,
            api_key=(api_key or "").strip() or current.api_key,
            base_url=(base_url or "").strip().rstrip("/") or current.base_url,
            timeout=_parse_timeout(timeout, current.timeout),
        )
        console.print(config_summary_table(updated))
        confirmed = questionary.confirm("Accept the configuration above?", default=True).ask()
        if confirmed:
            return updated
        console.print("[yellow]Reopening configuration prompts...[/yellow]")
        current = updated


def confirm_action(message: str) -> bool:
    """Ask for confirmation before a destructive call; a cancelled prompt means no."""

    return bool(questionary.confirm(message, default=False).ask())


def _parse_timeout(answer: Optional[str], fallback: int) -> int:
    try:
        value = int((answer or "").strip())
    except ValueError:
        return fallback
    return value if value > 0 else fallback
