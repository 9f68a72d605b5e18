"""Core helpers used by the vmetal CLI."""

from .config import (
    AppConfig,
    resolve_config,
    resolve_config_path,
    resolve_default_config_path,
    save_config_to_ini,
    with_overrides,
)
from .logging import configure_logging

__all__ = [
    "AppConfig",
    "configure_logging",
    "resolve_config",
    "resolve_config_path",
    "resolve_default_config_path",
    "save_config_to_ini",
    "with_overrides",
]
