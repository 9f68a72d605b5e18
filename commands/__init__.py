"""Subpackage with CLI command implementations for vmetal."""

from __future__ import annotations

import typer


def register(app: typer.Typer) -> None:
	"""Register all CLI commands on the provided Typer application."""

	from . import baremetal, configure, sshkey

	baremetal.register(app)
	sshkey.register(app)
	configure.register(app)
