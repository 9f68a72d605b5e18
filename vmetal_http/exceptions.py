"""Errors raised by the Vultr HTTP adapter."""

from __future__ import annotations


class ApiException(Exception):
    """Represents a transport failure or an error returned by the Vultr API."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


__all__ = ["ApiException"]
