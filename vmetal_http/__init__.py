"""HTTP adapter for the Vultr v1 control-plane API."""

from __future__ import annotations

from .client import DEFAULT_BASE_URL, Adapter
from .exceptions import ApiException

__all__ = ["DEFAULT_BASE_URL", "Adapter", "ApiException"]
