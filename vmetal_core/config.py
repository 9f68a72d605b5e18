"""Application configuration management for the vmetal CLI."""

from __future__ import annotations

import configparser
import os
from contextlib import suppress
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from vmetal_http import DEFAULT_BASE_URL

DEFAULT_TIMEOUT = 30


class _EnvConfig(BaseModel):
    """Validation schema for configuration values gathered from all sources."""

    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: int = Field(default=DEFAULT_TIMEOUT, gt=0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return value.rstrip("/")


@dataclass(slots=True)
class AppConfig:
    """Application configuration resolved at runtime."""

    api_key: Optional[str]
    base_url: str = DEFAULT_BASE_URL
    timeout: int = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load configuration from environment variables."""

        return cls._validated(_env_values())

    @classmethod
    def from_sources(cls, *, ini_path: Path | None = None) -> "AppConfig":
        """Load configuration from ini file and environment variables."""

        merged: dict[str, Any] = {}
        if ini_path and ini_path.exists():
            merged.update(_load_ini_values(ini_path))
        merged.update(_env_values())
        return cls._validated(merged)

    @classmethod
    def _validated(cls, values: dict[str, Any]) -> "AppConfig":
        try:
            data = _EnvConfig(**values)
        except ValidationError as exc:
            raise RuntimeError(f"Invalid vmetal configuration: {exc}") from exc
        return cls(**data.model_dump())


def resolve_default_config_path() -> Path:
    """Return path to default configuration file location."""

    return Path("~/.config/vmetal/config.ini").expanduser()


def resolve_config_path() -> Path:
    """Resolve configuration file path, honoring environment overrides."""

    override = os.getenv("VMETAL_CONFIG_PATH")
    if override:
        return Path(override).expanduser()
    return resolve_default_config_path()


def resolve_config(
    interactive: bool = True,
    *,
    config_path: Path | None = None,
    persist_prompt: bool = True,
) -> AppConfig:
    """Build application configuration, prompting for the API key when it is missing."""

    path = config_path or resolve_config_path()
    config = AppConfig.from_sources(ini_path=path)
    if not interactive or config.api_key:
        return config

    from ui.menus import prompt_app_config  # Imported lazily to avoid cycles

    updated = prompt_app_config(config)
    if persist_prompt:
        _maybe_persist_config(updated, path)
    return updated


def with_overrides(config: AppConfig, **overrides: Any) -> AppConfig:
    """Return new configuration instance with the provided field overrides."""

    return replace(config, **overrides)


def save_config_to_ini(config: AppConfig, path: Path) -> None:
    """Persist configuration values to an ini file, separating secrets."""

    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # Preserve field case

    general: dict[str, str] = {}
    secrets: dict[str, str] = {}

    for field in _CONFIG_FIELDS:
        value = getattr(config, field)
        if value in (None, ""):
            continue
        target = secrets if field in _SENSITIVE_FIELDS else general
        target[field] = str(value)

    parser[CONFIG_SECTION] = general
    if secrets:
        parser[SECRETS_SECTION] = secrets

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        parser.write(handle)

    with suppress(PermissionError, NotImplementedError):
        os.chmod(path, 0o600)


def _get_env(key: str) -> Optional[str]:
    """Return environment variable value with blank strings normalized to None."""
    value = os.getenv(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


CONFIG_SECTION = "vmetal"
SECRETS_SECTION = "vmetal.secrets"
_CONFIG_FIELDS = ("api_key", "base_url", "timeout")
_SENSITIVE_FIELDS = {"api_key"}
_ENV_VARIABLES = {
    "api_key": "VULTR_API_KEY",
    "base_url": "VULTR_API_BASE",
    "timeout": "VULTR_TIMEOUT",
}


def _env_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for field, variable in _ENV_VARIABLES.items():
        value = _get_env(variable)
        if value is not None:
            values[field] = value
    return values


def _load_ini_values(path: Path) -> dict[str, str]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    if not parser.read(path, encoding="utf-8"):
        return {}

    values: dict[str, str] = {}
    for field in _CONFIG_FIELDS:
        section = SECRETS_SECTION if field in _SENSITIVE_FIELDS else CONFIG_SECTION
        if parser.has_option(section, field):
            raw = parser.get(section, field).strip()
            if raw:
                values[field] = raw
    return values


def _maybe_persist_config(config: AppConfig, path: Path) -> None:
    from questionary import confirm

    message = f"Save configuration (including the API key) to {path}?"
    should_save = confirm(message, default=False).ask()
    if not should_save:
        return

    try:
        save_config_to_ini(config, path)
    except OSError as exc:
        print(f"[WARN] Failed to save configuration: {exc}")
