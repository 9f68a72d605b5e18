"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator

import typer

from vmetal_core import resolve_config
from vmetal_http import Adapter, ApiException
from services.providers import build_adapter


def load_adapter() -> Adapter:
    """Resolve configuration and return an adapter, prompting only on a terminal."""

    interactive = sys.stdin.isatty() and sys.stdout.isatty()
    with reported_errors():
        return build_adapter(resolve_config(interactive=interactive))


@contextmanager
def reported_errors() -> Iterator[None]:
    """Render API and validation failures and exit with status 1."""

    try:
        yield
    except typer.Exit:
        raise
    except ApiException as exc:
        detail = f" (HTTP {exc.status_code})" if exc.status_code else ""
        typer.secho(f"Vultr API error{detail}: {exc.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except (ValueError, RuntimeError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
