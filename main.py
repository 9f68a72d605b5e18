"""Entry point for the vmetal CLI."""

from __future__ import annotations

import typer

from commands import register as register_commands
from vmetal_core import configure_logging


def _build_app() -> typer.Typer:
    """Create the Typer application with every command group registered."""

    application = typer.Typer(help="Vultr bare-metal and SSH key manager", no_args_is_help=True)

    @application.callback()
    def _root(
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Log API calls to stderr"),
    ) -> None:
        configure_logging(verbose)

    register_commands(application)
    return application


app = _build_app()


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
