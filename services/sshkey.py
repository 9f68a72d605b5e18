"""SSH key management on the Vultr v1 API."""

from __future__ import annotations

import logging
from typing import Any, Optional

from vmetal_http import ApiException

from services.base import ApiAdapter, SshKey
from services.errors import RequestValidationError
from services.payloads import parse_created, record_list

logger = logging.getLogger(__name__)


class SshKeyService:
    """CRUD operations for the SSH keys stored on the account.

    Keys are only injected when a server is installed: updating or removing a
    key leaves machines that already received it untouched.
    """

    def __init__(self, adapter: ApiAdapter) -> None:
        self._adapter = adapter

    def get_list(self) -> list[SshKey] | None:
        """Return every key, or ``None`` when the account has none."""

        logger.debug("Listing SSH keys")
        records = record_list(self._adapter.get("sshkey/list"))
        if not records:
            return None
        return [
            SshKey(
                identifier=str(item["SSHKEYID"]),
                name=str(item.get("name") or ""),
                public_key=str(item.get("ssh_key") or ""),
                created_at=parse_created(item.get("date_created")),
            )
            for item in records
        ]

    def create(self, name: str, public_key: str) -> str:
        """Register a key (``authorized_keys`` format) and return its SSHKEYID."""

        logger.info("Creating SSH key", extra={"key_name": name})
        payload = self._adapter.post("sshkey/create", {"name": name, "ssh_key": public_key})
        try:
            return str(payload["SSHKEYID"])
        except (KeyError, TypeError) as exc:
            raise ApiException("Vultr did not return an SSHKEYID for the new key") from exc

    def update(
        self,
        key_id: str,
        name: Optional[str] = None,
        public_key: Optional[str] = None,
    ) -> Any:
        if name is None and public_key is None:
            raise RequestValidationError(
                f"Please provide name or key to update for key ID {key_id}!"
            )

        params: dict[str, Any] = {"SSHKEYID": key_id}
        if name is not None:
            params["name"] = name
        if public_key is not None:
            params["ssh_key"] = public_key

        logger.info("Updating SSH key", extra={"key_id": key_id})
        return self._adapter.post("sshkey/update", params, True)

    def destroy(self, key_id: str) -> Any:
        logger.info("Destroying SSH key", extra={"key_id": key_id})
        return self._adapter.post("sshkey/destroy", {"SSHKEYID": key_id}, True)
