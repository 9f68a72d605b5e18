"""Contracts and record types shared by the Vultr service façades.

The services never talk to ``requests`` directly. They receive an object
satisfying :class:`ApiAdapter` (normally ``vmetal_http.Adapter``) through
their constructor, which keeps them trivially testable with a fake adapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from services.errors import RequestValidationError

SUBSCRIPTION_STATUSES = ("pending", "active", "suspended", "closed")


class ApiAdapter(Protocol):
    """Transport used by the services to reach the provider."""

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Issue a GET request and return the decoded JSON body."""

    def post(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        want_status_code: bool = False,
    ) -> Any:
        """Issue a POST request and return the decoded body or the status code."""


class AvailabilityLookup(ABC):
    """Source of the plan IDs offered within a region."""

    @abstractmethod
    def get_availability(self, region_id: int) -> Sequence[int]:
        """Return plan IDs that can be deployed in ``region_id``."""


@dataclass(slots=True)
class Subscription:
    """A bare-metal server provisioned under the account."""

    subscription_id: int
    status: str
    label: str = ""
    tag: str = ""
    main_ip: str | None = None
    region_id: int | None = None
    plan_id: int | None = None
    os_id: int | None = None
    app_id: int | None = None
    os: str = ""
    ram: str = ""
    disk: str = ""
    cpu_count: int = 0
    location: str = ""
    default_password: str | None = None
    netmask_v4: str | None = None
    gateway_v4: str | None = None
    v6_networks: list[Mapping[str, Any]] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass(slots=True)
class SshKey:
    """SSH public key stored on the account."""

    identifier: str
    name: str
    public_key: str
    created_at: datetime | None = None


@dataclass(slots=True)
class Ipv4Address:
    ip: str
    netmask: str | None = None
    gateway: str | None = None
    type: str | None = None
    reverse: str | None = None


@dataclass(slots=True)
class Ipv6Address:
    ip: str
    network: str | None = None
    network_size: int | None = None
    type: str | None = None


@dataclass(slots=True)
class BandwidthUsage:
    """Daily traffic counters for a subscription."""

    incoming: list[tuple[date, int]]
    outgoing: list[tuple[date, int]]


@dataclass(slots=True)
class OperatingSystemInfo:
    os_id: int
    name: str
    arch: str | None = None
    family: str | None = None
    windows: bool = False
    surcharge: float = 0.0


@dataclass(slots=True)
class ApplicationInfo:
    app_id: int
    name: str
    short_name: str | None = None
    deploy_name: str | None = None
    surcharge: float = 0.0


@dataclass(slots=True)
class RegionInfo:
    region_id: int
    name: str
    country: str | None = None
    continent: str | None = None
    state: str | None = None
    region_code: str | None = None


_CREATE_WIRE_KEYS = {
    "DCID": "region_id",
    "METALPLANID": "plan_id",
    "OSID": "os_id",
    "ISOID": "iso_id",
    "SCRIPTID": "script_id",
    "SNAPSHOTID": "snapshot_id",
    "enable_ipv6": "enable_ipv6",
    "label": "label",
    "SSHKEYID": "ssh_key_ids",
    "APPID": "app_id",
    "userdata": "user_data",
    "notify_activate": "notify_activate",
    "hostname": "hostname",
    "tag": "tag",
}
_CREATE_REQUIRED = ("region_id", "plan_id", "os_id")


@dataclass(slots=True)
class BaremetalCreateRequest:
    """Input parameters for provisioning a bare-metal server.

    ``user_data`` may be plain text or already base64 encoded; the service
    encodes it when it does not decode as base64. ``extra_params`` holds
    wire parameters without a dedicated field; they are sent verbatim.
    """

    region_id: int
    plan_id: int
    os_id: int
    iso_id: str | None = None
    script_id: int | None = None
    snapshot_id: str | None = None
    enable_ipv6: bool | None = None
    label: str | None = None
    ssh_key_ids: Sequence[str] = ()
    app_id: int | None = None
    user_data: str | None = None
    notify_activate: bool | None = None
    hostname: str | None = None
    tag: str | None = None
    extra_params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "BaremetalCreateRequest":
        """Build a request from wire keys (``DCID``...) or field names.

        Keys that match neither are forwarded as ``extra_params``.
        """

        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        field_names = set(_CREATE_WIRE_KEYS.values())
        for key, value in config.items():
            name = _CREATE_WIRE_KEYS.get(key, key)
            if name not in field_names:
                extra[key] = value
                continue
            values[name] = value

        missing = [name for name in _CREATE_REQUIRED if values.get(name) is None]
        if missing:
            raise RequestValidationError(
                "Missing required create option(s): {keys}".format(keys=", ".join(missing))
            )

        for flag in ("enable_ipv6", "notify_activate"):
            if isinstance(values.get(flag), str):
                values[flag] = values[flag].strip().lower() == "yes"
        keys = values.get("ssh_key_ids")
        if isinstance(keys, str):
            values["ssh_key_ids"] = tuple(item.strip() for item in keys.split(",") if item.strip())
        elif keys is None:
            values.pop("ssh_key_ids", None)

        return cls(**values, extra_params=extra)

    def to_params(self) -> dict[str, Any]:
        """Return the form parameters understood by ``baremetal/create``."""

        params: dict[str, Any] = {
            "DCID": int(self.region_id),
            "METALPLANID": int(self.plan_id),
            "OSID": int(self.os_id),
        }
        if self.iso_id is not None:
            params["ISOID"] = self.iso_id
        if self.script_id is not None:
            params["SCRIPTID"] = int(self.script_id)
        if self.snapshot_id is not None:
            params["SNAPSHOTID"] = self.snapshot_id
        if self.enable_ipv6 is not None:
            params["enable_ipv6"] = _yes_no(self.enable_ipv6)
        if self.label is not None:
            params["label"] = self.label
        if self.ssh_key_ids:
            params["SSHKEYID"] = ",".join(str(key) for key in self.ssh_key_ids)
        if self.app_id is not None:
            params["APPID"] = int(self.app_id)
        if self.user_data is not None:
            params["userdata"] = self.user_data
        if self.notify_activate is not None:
            params["notify_activate"] = _yes_no(self.notify_activate)
        if self.hostname is not None:
            params["hostname"] = self.hostname
        if self.tag is not None:
            params["tag"] = self.tag
        for key, value in self.extra_params.items():
            params.setdefault(key, value)
        return params


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"
