"""Region lookups used to validate bare-metal plans before provisioning."""

from __future__ import annotations

import logging
from typing import Sequence

from services.base import ApiAdapter, AvailabilityLookup, RegionInfo
from services.payloads import optional_int, record_list

logger = logging.getLogger(__name__)

BAREMETAL_AVAILABILITY_PATH = "regions/availability_baremetal"


class RegionService(AvailabilityLookup):
    """Read-only access to datacenter regions and their plan availability."""

    def __init__(self, adapter: ApiAdapter, *, availability_path: str = "regions/availability") -> None:
        self._adapter = adapter
        self._availability_path = availability_path

    def get_list(self) -> Sequence[RegionInfo]:
        logger.debug("Listing regions")
        payload = self._adapter.get("regions/list")
        return [
            RegionInfo(
                region_id=int(item["DCID"]),
                name=str(item.get("name", "")),
                country=item.get("country"),
                continent=item.get("continent"),
                state=item.get("state") or None,
                region_code=item.get("regioncode"),
            )
            for item in record_list(payload)
        ]

    def get_availability(self, region_id: int) -> Sequence[int]:
        logger.debug(
            "Fetching plan availability",
            extra={"region_id": region_id, "path": self._availability_path},
        )
        payload = self._adapter.get(self._availability_path, {"DCID": int(region_id)})
        if not payload:
            return []
        plans = [optional_int(item) for item in payload]
        return [plan for plan in plans if plan is not None]
