"""Logging setup for the vmetal CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr through rich.

    Library modules only create loggers; the handler is installed here once,
    by the CLI entry point.
    """

    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)
    logging.getLogger("urllib3").setLevel(logging.INFO if verbose else logging.WARNING)
