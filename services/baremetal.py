"""Bare-metal server operations on the Vultr v1 API."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from vmetal_http import ApiException

from services.base import (
    ApiAdapter,
    ApplicationInfo,
    AvailabilityLookup,
    BandwidthUsage,
    BaremetalCreateRequest,
    Ipv4Address,
    Ipv6Address,
    OperatingSystemInfo,
    Subscription,
)
from services.errors import PlanUnavailableError
from services.payloads import (
    as_float,
    decode_user_data,
    encode_user_data,
    is_base64,
    keyed_records,
    optional_int,
    parse_created,
    record_list,
)

logger = logging.getLogger(__name__)


class BaremetalService:
    """Lifecycle and metadata calls for bare-metal subscriptions.

    Every read goes to the provider; nothing is cached. Mutating calls return
    the HTTP status code reported by the adapter, errors are raised by the
    adapter and propagate unchanged.
    """

    def __init__(self, adapter: ApiAdapter, regions: AvailabilityLookup) -> None:
        self._adapter = adapter
        self._regions = regions

    # -- listing -----------------------------------------------------------

    def get_list(
        self,
        subscription_id: Optional[int] = None,
        tag: Optional[str] = None,
        label: Optional[str] = None,
        main_ip: Optional[str] = None,
    ) -> list[Subscription]:
        """List servers on the account, pending ones included.

        The provider applies a single filter at a time; passing several is not
        rejected here.
        """

        params: dict[str, Any] = {}
        if subscription_id is not None:
            params["SUBID"] = subscription_id
        if tag is not None:
            params["tag"] = tag
        if label is not None:
            params["label"] = label
        if main_ip is not None:
            params["main_ip"] = main_ip

        logger.debug("Listing bare-metal servers", extra={"filters": params})
        payload = self._adapter.get("baremetal/list", params)
        # Filtering by SUBID returns the bare subscription object.
        if isinstance(payload, Mapping) and "SUBID" in payload:
            return [_convert_subscription(payload)]
        return [_convert_subscription(item) for item in record_list(payload)]

    def get_detail(self, subscription_id: int) -> list[Subscription]:
        return self.get_list(subscription_id=subscription_id)

    def get_by_tag(self, tag: str) -> list[Subscription]:
        return self.get_list(tag=tag)

    def get_by_label(self, label: str) -> list[Subscription]:
        return self.get_list(label=label)

    def get_by_main_ip(self, main_ip: str) -> list[Subscription]:
        return self.get_list(main_ip=main_ip)

    # -- application / operating system changes ---------------------------

    def get_app_change_list(self, subscription_id: int) -> list[ApplicationInfo]:
        """Applications this server can be switched to."""

        payload = self._adapter.get("baremetal/app_change_list", {"SUBID": int(subscription_id)})
        return [
            ApplicationInfo(
                app_id=int(item["APPID"]),
                name=str(item.get("name", "")),
                short_name=item.get("short_name"),
                deploy_name=item.get("deploy_name"),
                surcharge=as_float(item.get("surcharge")),
            )
            for item in record_list(payload)
        ]

    def app_change(self, subscription_id: int, app_id: int) -> int:
        """Reinstall the server with a one-click application. All data is lost."""

        logger.info(
            "Changing bare-metal application",
            extra={"subscription_id": subscription_id, "app_id": app_id},
        )
        params = {"SUBID": int(subscription_id), "APPID": int(app_id)}
        return self._adapter.post("baremetal/app_change", params, True)

    def get_os_change_list(self, subscription_id: int) -> list[OperatingSystemInfo]:
        """Operating systems this server can be switched to."""

        payload = self._adapter.get("baremetal/os_change_list", {"SUBID": int(subscription_id)})
        return [
            OperatingSystemInfo(
                os_id=int(item["OSID"]),
                name=str(item.get("name", "")),
                arch=item.get("arch"),
                family=item.get("family"),
                windows=bool(item.get("windows", False)),
                surcharge=as_float(item.get("surcharge")),
            )
            for item in record_list(payload)
        ]

    def os_change(self, subscription_id: int, os_id: int) -> int:
        """Reinstall the server with another operating system. All data is lost."""

        logger.info(
            "Changing bare-metal operating system",
            extra={"subscription_id": subscription_id, "os_id": os_id},
        )
        params = {"SUBID": int(subscription_id), "OSID": int(os_id)}
        return self._adapter.post("baremetal/os_change", params, True)

    # -- user-data ---------------------------------------------------------

    def get_user_data(self, subscription_id: int) -> str:
        """Return the decoded user-data; non UTF-8 bytes survive as surrogates."""

        payload = self._adapter.get("baremetal/get_user_data", {"SUBID": int(subscription_id)})
        if not isinstance(payload, Mapping):
            raise ApiException("Unexpected user-data payload from Vultr API")
        return decode_user_data(payload.get("userdata") or "")

    def set_user_data(self, subscription_id: int, user_data: str) -> int:
        """Replace the cloud-init user-data; ``user_data`` is plain text."""

        params = {
            "SUBID": int(subscription_id),
            "userdata": encode_user_data(user_data),
        }
        return self._adapter.post("baremetal/set_user_data", params, True)

    # -- network -----------------------------------------------------------

    def get_bandwidth(self, subscription_id: int) -> BandwidthUsage:
        payload = self._adapter.get("baremetal/bandwidth", {"SUBID": int(subscription_id)})
        if not isinstance(payload, Mapping):
            payload = {}
        return BandwidthUsage(
            incoming=_convert_counters(payload.get("incoming_bytes")),
            outgoing=_convert_counters(payload.get("outgoing_bytes")),
        )

    def get_ipv4_list(self, subscription_id: int) -> list[Ipv4Address]:
        """IPv4 details, only available once the server is ``active``."""

        payload = self._adapter.get("baremetal/list_ipv4", {"SUBID": int(subscription_id)})
        return [
            Ipv4Address(
                ip=str(item.get("ip", "")),
                netmask=item.get("netmask"),
                gateway=item.get("gateway"),
                type=item.get("type"),
                reverse=item.get("reverse"),
            )
            for item in keyed_records(payload, subscription_id)
        ]

    def get_ipv6_list(self, subscription_id: int) -> list[Ipv6Address] | None:
        """IPv6 details, or ``None`` when the server has no IPv6 configured."""

        payload = self._adapter.get("baremetal/list_ipv6", {"SUBID": int(subscription_id)})
        if not payload:
            return None
        return [
            Ipv6Address(
                ip=str(item.get("ip", "")),
                network=item.get("network"),
                network_size=optional_int(item.get("network_size")),
                type=item.get("type"),
            )
            for item in keyed_records(payload, subscription_id)
        ]

    # -- lifecycle ---------------------------------------------------------

    def reboot(self, subscription_id: int) -> int:
        """Hard reboot: the server is powered off, then back on."""

        logger.info("Rebooting bare-metal server", extra={"subscription_id": subscription_id})
        return self._adapter.post("baremetal/reboot", {"SUBID": int(subscription_id)}, True)

    def destroy(self, subscription_id: int, want_status_code: bool = True) -> Any:
        """Destroy the server. Data is lost and the IP address is released."""

        logger.info("Destroying bare-metal server", extra={"subscription_id": subscription_id})
        return self._adapter.post(
            "baremetal/destroy", {"SUBID": int(subscription_id)}, want_status_code
        )

    def reinstall(self, subscription_id: int) -> int:
        """Reinstall the current OS. Data is lost, the IP address stays."""

        logger.info("Reinstalling bare-metal server", extra={"subscription_id": subscription_id})
        return self._adapter.post("baremetal/reinstall", {"SUBID": int(subscription_id)}, True)

    def set_label(self, subscription_id: int, label: str) -> int:
        params = {"SUBID": int(subscription_id), "label": label}
        return self._adapter.post("baremetal/label_set", params, True)

    def create(self, request: BaremetalCreateRequest | Mapping[str, Any]) -> int:
        """Provision a server and return its subscription ID.

        Billing starts immediately. The server is not ready when this returns;
        poll :meth:`get_list` until its status becomes ``active``.
        """

        if not isinstance(request, BaremetalCreateRequest):
            request = BaremetalCreateRequest.from_mapping(request)

        if request.user_data is not None and not is_base64(request.user_data):
            request = replace(request, user_data=encode_user_data(request.user_data))

        self.is_available(request.region_id, request.plan_id)

        logger.info(
            "Creating bare-metal server",
            extra={"region_id": request.region_id, "plan_id": request.plan_id},
        )
        payload = self._adapter.post("baremetal/create", request.to_params())
        try:
            return int(payload["SUBID"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ApiException("Vultr did not return a SUBID for the new server") from exc

    def is_available(self, region_id: int, plan_id: int) -> bool:
        """Return True when ``plan_id`` is offered in ``region_id``.

        Raises :class:`PlanUnavailableError` otherwise.
        """

        availability = self._regions.get_availability(int(region_id))
        if int(plan_id) not in {int(item) for item in availability}:
            raise PlanUnavailableError(int(region_id), int(plan_id))
        return True


def _convert_subscription(item: Mapping[str, Any]) -> Subscription:
    v6_networks = item.get("v6_networks") or []
    return Subscription(
        subscription_id=int(item["SUBID"]),
        status=str(item.get("status", "")),
        label=str(item.get("label") or ""),
        tag=str(item.get("tag") or ""),
        main_ip=item.get("main_ip") or None,
        region_id=optional_int(item.get("DCID")),
        plan_id=optional_int(item.get("METALPLANID")),
        os_id=optional_int(item.get("OSID")),
        app_id=optional_int(item.get("APPID")),
        os=str(item.get("os") or ""),
        ram=str(item.get("ram") or ""),
        disk=str(item.get("disk") or ""),
        cpu_count=optional_int(item.get("cpu_count")) or 0,
        location=str(item.get("location") or ""),
        default_password=item.get("default_password"),
        netmask_v4=item.get("netmask_v4"),
        gateway_v4=item.get("gateway_v4"),
        v6_networks=[network for network in v6_networks if isinstance(network, Mapping)],
        created_at=parse_created(item.get("date_created")),
    )


def _convert_counters(rows: Sequence[Sequence[Any]] | None) -> list[tuple[date, int]]:
    result: list[tuple[date, int]] = []
    for row in rows or []:
        if len(row) < 2:
            continue
        try:
            day = date.fromisoformat(str(row[0]))
        except ValueError:
            continue
        result.append((day, int(row[1])))
    return result
