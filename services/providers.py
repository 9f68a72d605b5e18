"""Factory helpers for constructing service implementations from configuration."""

from __future__ import annotations

from vmetal_core import AppConfig
from vmetal_http import Adapter
from services.baremetal import BaremetalService
from services.region import BAREMETAL_AVAILABILITY_PATH, RegionService
from services.sshkey import SshKeyService


def build_adapter(config: AppConfig) -> Adapter:
    """Instantiate the HTTP adapter matching application configuration."""

    if not config.api_key:
        raise ValueError("Vultr API key not configured")
    return Adapter(config.api_key, base_url=config.base_url, timeout=config.timeout)


def build_baremetal_service(adapter: Adapter) -> BaremetalService:
    """Return the bare-metal façade, validating plans against bare-metal availability."""

    regions = RegionService(adapter, availability_path=BAREMETAL_AVAILABILITY_PATH)
    return BaremetalService(adapter, regions)


def build_sshkey_service(adapter: Adapter) -> SshKeyService:
    return SshKeyService(adapter)
