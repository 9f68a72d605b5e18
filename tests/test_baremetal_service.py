"""Unit tests for BaremetalService request construction and decoding."""

from __future__ import annotations

import base64
import gzip
import unittest
from datetime import date
from typing import Any

from services.base import AvailabilityLookup, BaremetalCreateRequest
from services.baremetal import BaremetalService
from services.errors import PlanUnavailableError, RequestValidationError
from vmetal_http import ApiException

_SERVER = {
    "SUBID": "900000",
    "os": "CentOS 7 x64",
    "ram": "65536 MB",
    "disk": "2x 240 GB SSD",
    "main_ip": "203.0.113.10",
    "cpu_count": 12,
    "location": "New Jersey",
    "DCID": "1",
    "default_password": "ab81u!ryranq",
    "date_created": "2017-04-12 18:45:41",
    "status": "active",
    "netmask_v4": "255.255.254.0",
    "gateway_v4": "203.0.113.1",
    "METALPLANID": 28,
    "v6_networks": [{"v6_network": "::", "v6_main_ip": "", "v6_network_size": "0"}],
    "label": "db-1",
    "tag": "database",
    "OSID": "167",
    "APPID": "0",
}


class _FakeAdapter:
    def __init__(self, responses: dict[str, Any] | None = None, status_code: int = 200) -> None:
        self.responses = responses or {}
        self.status_code = status_code
        self.gets: list[tuple[str, dict]] = []
        self.posts: list[tuple[str, dict, bool]] = []

    def get(self, path: str, params=None):
        self.gets.append((path, dict(params or {})))
        return self.responses.get(path, [])

    def post(self, path: str, params=None, want_status_code: bool = False):
        self.posts.append((path, dict(params or {}), want_status_code))
        if want_status_code:
            return self.status_code
        return self.responses.get(path, {})


class _FakeRegions(AvailabilityLookup):
    def __init__(self, plans_by_region: dict[int, list[int]]) -> None:
        self.plans_by_region = plans_by_region
        self.calls: list[int] = []

    def get_availability(self, region_id: int):
        self.calls.append(region_id)
        return self.plans_by_region.get(region_id, [])


class BaremetalListTests(unittest.TestCase):
    def setUp(self) -> None:
        self.adapter = _FakeAdapter({"baremetal/list": {"900000": _SERVER}})
        self.service = BaremetalService(self.adapter, _FakeRegions({}))

    def test_get_list_without_filters_sends_no_parameters(self) -> None:
        servers = self.service.get_list()

        self.assertEqual(self.adapter.gets, [("baremetal/list", {})])
        self.assertEqual(len(servers), 1)

    def test_get_list_only_includes_present_filters(self) -> None:
        self.service.get_list(tag="database", main_ip="203.0.113.10")

        _, params = self.adapter.gets[0]
        self.assertEqual(params, {"tag": "database", "main_ip": "203.0.113.10"})

    def test_convenience_lookups_use_single_filter(self) -> None:
        self.service.get_detail(900000)
        self.service.get_by_tag("database")
        self.service.get_by_label("db-1")
        self.service.get_by_main_ip("203.0.113.10")

        sent = [params for _, params in self.adapter.gets]
        self.assertEqual(
            sent,
            [
                {"SUBID": 900000},
                {"tag": "database"},
                {"label": "db-1"},
                {"main_ip": "203.0.113.10"},
            ],
        )

    def test_subscription_is_decoded(self) -> None:
        server = self.service.get_list()[0]

        self.assertEqual(server.subscription_id, 900000)
        self.assertEqual(server.status, "active")
        self.assertEqual(server.label, "db-1")
        self.assertEqual(server.tag, "database")
        self.assertEqual(server.main_ip, "203.0.113.10")
        self.assertEqual(server.region_id, 1)
        self.assertEqual(server.plan_id, 28)
        self.assertEqual(server.os_id, 167)
        self.assertEqual(server.cpu_count, 12)
        self.assertEqual(server.created_at.year, 2017)

    def test_single_object_response_is_wrapped(self) -> None:
        self.adapter.responses["baremetal/list"] = _SERVER

        servers = self.service.get_detail(900000)

        self.assertEqual([s.subscription_id for s in servers], [900000])

    def test_empty_array_returns_empty_list(self) -> None:
        self.adapter.responses["baremetal/list"] = []

        self.assertEqual(self.service.get_by_tag("missing"), [])


class BaremetalMutationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.adapter = _FakeAdapter()
        self.service = BaremetalService(self.adapter, _FakeRegions({}))

    def test_simple_operations_send_integer_ids_and_return_status(self) -> None:
        results = [
            self.service.reboot("42"),
            self.service.reinstall("42"),
            self.service.destroy("42"),
            self.service.set_label("42", "web"),
            self.service.os_change("42", "270"),
            self.service.app_change("42", "1"),
        ]

        self.assertEqual(results, [200] * 6)
        self.assertEqual(
            self.adapter.posts,
            [
                ("baremetal/reboot", {"SUBID": 42}, True),
                ("baremetal/reinstall", {"SUBID": 42}, True),
                ("baremetal/destroy", {"SUBID": 42}, True),
                ("baremetal/label_set", {"SUBID": 42, "label": "web"}, True),
                ("baremetal/os_change", {"SUBID": 42, "OSID": 270}, True),
                ("baremetal/app_change", {"SUBID": 42, "APPID": 1}, True),
            ],
        )

    def test_destroy_can_return_decoded_body(self) -> None:
        self.adapter.responses["baremetal/destroy"] = {}

        result = self.service.destroy(42, want_status_code=False)

        self.assertEqual(result, {})
        self.assertEqual(self.adapter.posts[0][2], False)

    def test_transport_errors_propagate(self) -> None:
        class _FailingAdapter(_FakeAdapter):
            def post(self, path, params=None, want_status_code=False):
                raise ApiException("Invalid server", status_code=412)

        service = BaremetalService(_FailingAdapter(), _FakeRegions({}))

        with self.assertRaises(ApiException) as ctx:
            service.reboot(1)
        self.assertEqual(ctx.exception.status_code, 412)


class BaremetalUserDataTests(unittest.TestCase):
    def test_get_user_data_decodes_base64(self) -> None:
        encoded = base64.b64encode(b"#cloud-config\npackages: [htop]\n").decode("ascii")
        adapter = _FakeAdapter({"baremetal/get_user_data": {"userdata": encoded}})
        service = BaremetalService(adapter, _FakeRegions({}))

        self.assertEqual(service.get_user_data(7), "#cloud-config\npackages: [htop]\n")
        self.assertEqual(adapter.gets[0], ("baremetal/get_user_data", {"SUBID": 7}))

    def test_set_user_data_encodes_text(self) -> None:
        adapter = _FakeAdapter()
        service = BaremetalService(adapter, _FakeRegions({}))

        service.set_user_data(7, "echo hi")

        _, params, want_code = adapter.posts[0]
        self.assertTrue(want_code)
        self.assertEqual(params["userdata"], base64.b64encode(b"echo hi").decode("ascii"))

    def test_set_then_get_returns_original_text(self) -> None:
        adapter = _FakeAdapter()
        service = BaremetalService(adapter, _FakeRegions({}))
        text = "#!/bin/sh\necho 'żółw'\n"

        service.set_user_data(7, text)
        adapter.responses["baremetal/get_user_data"] = {"userdata": adapter.posts[0][1]["userdata"]}

        self.assertEqual(service.get_user_data(7), text)

    def test_binary_user_data_round_trips(self) -> None:
        blob = gzip.compress(b"#cloud-config\npackages: [htop]\n")
        encoded = base64.b64encode(blob).decode("ascii")
        adapter = _FakeAdapter({"baremetal/get_user_data": {"userdata": encoded}})
        service = BaremetalService(adapter, _FakeRegions({}))

        user_data = service.get_user_data(7)
        self.assertEqual(user_data.encode("utf-8", "surrogateescape"), blob)

        service.set_user_data(7, user_data)
        self.assertEqual(adapter.posts[0][1]["userdata"], encoded)

    def test_invalid_base64_from_provider_is_malformed(self) -> None:
        adapter = _FakeAdapter({"baremetal/get_user_data": {"userdata": "not base64!"}})
        service = BaremetalService(adapter, _FakeRegions({}))

        with self.assertRaises(ApiException):
            service.get_user_data(7)


class BaremetalNetworkTests(unittest.TestCase):
    def test_ipv4_list_returns_records_for_subscription(self) -> None:
        adapter = _FakeAdapter(
            {
                "baremetal/list_ipv4": {
                    "900000": [
                        {
                            "ip": "203.0.113.10",
                            "netmask": "255.255.255.0",
                            "gateway": "203.0.113.1",
                            "type": "main_ip",
                            "reverse": "host.example",
                        }
                    ]
                }
            }
        )
        service = BaremetalService(adapter, _FakeRegions({}))

        addresses = service.get_ipv4_list("900000")

        self.assertEqual(len(addresses), 1)
        self.assertEqual(addresses[0].ip, "203.0.113.10")
        self.assertEqual(addresses[0].reverse, "host.example")

    def test_ipv4_list_missing_subscription_is_malformed(self) -> None:
        adapter = _FakeAdapter({"baremetal/list_ipv4": {"1": []}})
        service = BaremetalService(adapter, _FakeRegions({}))

        with self.assertRaises(ApiException):
            service.get_ipv4_list(2)

    def test_ipv6_list_returns_none_when_not_configured(self) -> None:
        adapter = _FakeAdapter({"baremetal/list_ipv6": []})
        service = BaremetalService(adapter, _FakeRegions({}))

        self.assertIsNone(service.get_ipv6_list(900000))

    def test_ipv6_list_returns_records(self) -> None:
        adapter = _FakeAdapter(
            {
                "baremetal/list_ipv6": {
                    "900000": [
                        {
                            "ip": "2001:db8:1000::100",
                            "network": "2001:db8:1000::",
                            "network_size": "64",
                            "type": "main_ip",
                        }
                    ]
                }
            }
        )
        service = BaremetalService(adapter, _FakeRegions({}))

        addresses = service.get_ipv6_list(900000)

        self.assertIsNotNone(addresses)
        self.assertEqual(addresses[0].network_size, 64)

    def test_bandwidth_is_decoded(self) -> None:
        adapter = _FakeAdapter(
            {
                "baremetal/bandwidth": {
                    "incoming_bytes": [["2017-04-01", 91571055], ["2017-04-02", 78355758]],
                    "outgoing_bytes": [["2017-04-01", 3084731]],
                }
            }
        )
        service = BaremetalService(adapter, _FakeRegions({}))

        usage = service.get_bandwidth(1)

        self.assertEqual(usage.incoming[0], (date(2017, 4, 1), 91571055))
        self.assertEqual(len(usage.incoming), 2)
        self.assertEqual(usage.outgoing, [(date(2017, 4, 1), 3084731)])

    def test_change_lists_are_decoded(self) -> None:
        adapter = _FakeAdapter(
            {
                "baremetal/os_change_list": {
                    "127": {"OSID": "127", "name": "CentOS 6 x64", "arch": "x64", "family": "centos", "windows": False, "surcharge": "0.00"}
                },
                "baremetal/app_change_list": {
                    "1": {"APPID": "1", "name": "LEMP", "short_name": "lemp", "deploy_name": "LEMP on CentOS 6 x64", "surcharge": 0}
                },
            }
        )
        service = BaremetalService(adapter, _FakeRegions({}))

        systems = service.get_os_change_list(5)
        apps = service.get_app_change_list(5)

        self.assertEqual((systems[0].os_id, systems[0].family), (127, "centos"))
        self.assertEqual((apps[0].app_id, apps[0].short_name), (1, "lemp"))
        self.assertEqual([params for _, params in adapter.gets], [{"SUBID": 5}, {"SUBID": 5}])


class BaremetalCreateTests(unittest.TestCase):
    def setUp(self) -> None:
        self.adapter = _FakeAdapter({"baremetal/create": {"SUBID": "1312965"}})
        self.regions = _FakeRegions({1: [28, 99]})
        self.service = BaremetalService(self.adapter, self.regions)

    def test_create_returns_integer_subscription_id(self) -> None:
        request = BaremetalCreateRequest(region_id=1, plan_id=99, os_id=270)

        self.assertEqual(self.service.create(request), 1312965)
        path, params, want_code = self.adapter.posts[0]
        self.assertEqual(path, "baremetal/create")
        self.assertEqual(params, {"DCID": 1, "METALPLANID": 99, "OSID": 270})
        self.assertFalse(want_code)

    def test_create_sends_optional_fields_with_wire_names(self) -> None:
        request = BaremetalCreateRequest(
            region_id="1",
            plan_id="28",
            os_id="186",
            script_id=3,
            enable_ipv6=True,
            label="web",
            ssh_key_ids=("abc", "def"),
            app_id=2,
            notify_activate=False,
            hostname="web.example",
            tag="frontend",
        )

        self.service.create(request)

        _, params, _ = self.adapter.posts[0]
        self.assertEqual(
            params,
            {
                "DCID": 1,
                "METALPLANID": 28,
                "OSID": 186,
                "SCRIPTID": 3,
                "enable_ipv6": "yes",
                "label": "web",
                "SSHKEYID": "abc,def",
                "APPID": 2,
                "notify_activate": "no",
                "hostname": "web.example",
                "tag": "frontend",
            },
        )

    def test_plain_user_data_is_encoded(self) -> None:
        self.service.create(BaremetalCreateRequest(region_id=1, plan_id=99, os_id=270, user_data="hello"))

        _, params, _ = self.adapter.posts[0]
        self.assertEqual(params["userdata"], base64.b64encode(b"hello").decode("ascii"))

    def test_base64_user_data_is_sent_unchanged(self) -> None:
        encoded = base64.b64encode(b"#cloud-config\n").decode("ascii")

        self.service.create(BaremetalCreateRequest(region_id=1, plan_id=99, os_id=270, user_data=encoded))

        _, params, _ = self.adapter.posts[0]
        self.assertEqual(params["userdata"], encoded)

    def _sent_user_data(self, user_data: str) -> str:
        self.service.create(BaremetalCreateRequest(region_id=1, plan_id=99, os_id=270, user_data=user_data))
        return self.adapter.posts[-1][1]["userdata"]

    def test_line_wrapped_base64_user_data_is_sent_unchanged(self) -> None:
        encoded = base64.encodebytes(b"#cloud-config\n" + b"runcmd: [\"echo ready\"]\n" * 4).decode("ascii")
        self.assertIn("\n", encoded.rstrip("\n"))

        self.assertEqual(self._sent_user_data(encoded), encoded)

    def test_base64_with_trailing_newline_is_sent_unchanged(self) -> None:
        encoded = base64.b64encode(b"#cloud-config\n").decode("ascii") + "\n"

        self.assertEqual(self._sent_user_data(encoded), encoded)

    def test_unpadded_base64_is_sent_unchanged(self) -> None:
        self.assertEqual(self._sent_user_data("aGk"), "aGk")

    def test_text_that_decodes_as_base64_is_sent_unchanged(self) -> None:
        self.assertEqual(self._sent_user_data("abcd"), "abcd")

    def test_malformed_padding_is_encoded(self) -> None:
        for value in ("aGk==", "a=bc", "abcde"):
            with self.subTest(value=value):
                expected = base64.b64encode(value.encode("ascii")).decode("ascii")
                self.assertEqual(self._sent_user_data(value), expected)

    def test_create_accepts_wire_mapping(self) -> None:
        subscription_id = self.service.create(
            {"DCID": "1", "METALPLANID": "28", "OSID": "270", "enable_ipv6": "yes", "SSHKEYID": "a, b"}
        )

        self.assertEqual(subscription_id, 1312965)
        _, params, _ = self.adapter.posts[0]
        self.assertEqual(params["enable_ipv6"], "yes")
        self.assertEqual(params["SSHKEYID"], "a,b")

    def test_create_mapping_requires_region_plan_and_os(self) -> None:
        with self.assertRaises(RequestValidationError) as ctx:
            self.service.create({"DCID": 1, "METALPLANID": 28})

        self.assertIn("os_id", str(ctx.exception))
        self.assertEqual(self.adapter.posts, [])

    def test_create_mapping_forwards_unknown_keys(self) -> None:
        self.service.create({"DCID": 1, "METALPLANID": 28, "OSID": 270, "FIREWALLGROUPID": "1234abcd"})

        _, params, _ = self.adapter.posts[0]
        self.assertEqual(params, {"DCID": 1, "METALPLANID": 28, "OSID": 270, "FIREWALLGROUPID": "1234abcd"})

    def test_extra_params_do_not_override_fields(self) -> None:
        request = BaremetalCreateRequest(
            region_id=1,
            plan_id=28,
            os_id=270,
            extra_params={"OSID": 1, "reserved_ip_v4": "203.0.113.7"},
        )

        self.service.create(request)

        _, params, _ = self.adapter.posts[0]
        self.assertEqual(params["OSID"], 270)
        self.assertEqual(params["reserved_ip_v4"], "203.0.113.7")

    def test_unavailable_plan_blocks_create(self) -> None:
        with self.assertRaises(PlanUnavailableError) as ctx:
            self.service.create(BaremetalCreateRequest(region_id=1, plan_id=50, os_id=270))

        self.assertEqual((ctx.exception.region_id, ctx.exception.plan_id), (1, 50))
        self.assertEqual(self.adapter.posts, [])

    def test_missing_subid_in_response_is_malformed(self) -> None:
        self.adapter.responses["baremetal/create"] = {}

        with self.assertRaises(ApiException):
            self.service.create(BaremetalCreateRequest(region_id=1, plan_id=99, os_id=270))


class BaremetalAvailabilityTests(unittest.TestCase):
    def setUp(self) -> None:
        self.regions = _FakeRegions({1: [28, 99]})
        self.service = BaremetalService(_FakeAdapter(), self.regions)

    def test_listed_plan_is_available(self) -> None:
        self.assertTrue(self.service.is_available(1, 99))
        self.assertEqual(self.regions.calls, [1])

    def test_string_identifiers_are_coerced(self) -> None:
        self.assertTrue(self.service.is_available("1", "28"))

    def test_unlisted_plan_names_region_and_plan(self) -> None:
        with self.assertRaises(PlanUnavailableError) as ctx:
            self.service.is_available(2, 99)

        message = str(ctx.exception)
        self.assertIn("99", message)
        self.assertIn("region 2", message)
        self.assertIsInstance(ctx.exception, RequestValidationError)


if __name__ == "__main__":  # pragma: no cover - convenience
    unittest.main()
