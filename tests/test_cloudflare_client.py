"""
Cloudflare adapter tests with a mocked transport
"""

import logging

import pytest

from registrar_api.api.cloudflare_client import CloudflareAdapter
from registrar_api.api.exceptions import MissingCredentialsError
from registrar_api.api.models import DnsRecord, ErrorKind
from conftest import make_response


ZONE = {"id": "zone-1", "name": "example.com", "name_servers": ["ada.ns.cloudflare.com", "bob.ns.cloudflare.com"]}


def envelope(result=None, success=True, errors=(), status=200):
    return make_response(
        {"success": success, "errors": list(errors), "messages": [], "result": result},
        status=status
    )


def zone_found():
    return envelope([ZONE])


@pytest.fixture
def adapter(transport, settings):
    return CloudflareAdapter({"api_token": "cf-token", "account_id": "acct-9"}, transport=transport, settings=settings)


def calls(transport):
    """(method, path) for each request made"""
    base = CloudflareAdapter.BASE_URL + "/"
    return [(c.args[0], c.args[1].replace(base, "")) for c in transport.request.call_args_list]


class TestConstruction:

    def test_requires_token(self, transport, settings):
        with pytest.raises(MissingCredentialsError) as exc_info:
            CloudflareAdapter({}, transport=transport, settings=settings)
        assert exc_info.value.missing == ["api_token"]

    def test_bearer_header(self, adapter, transport):
        transport.request.return_value = zone_found()

        adapter.get_domain("example.com")

        assert transport.request.call_args.kwargs["headers"]["Authorization"] == "Bearer cf-token"
        assert transport.request.call_args.kwargs["params"] == {"name": "example.com", "per_page": 1}


class TestRegistrarOperations:

    def test_availability_is_unsupported_but_partitions(self, adapter, transport):
        result = adapter.check_availability(["taken.com", "Free123xyz.com", "bad_domain"])

        assert result.ok is False
        assert result.error_kind == ErrorKind.UNSUPPORTED
        assert result.partition() == {
            "available": [],
            "unavailable": ["taken.com", "free123xyz.com", "bad_domain"],
            "invalid": [],
        }
        transport.request.assert_not_called()

    @pytest.mark.parametrize("call", [
        lambda a: a.register_domain("example.com"),
        lambda a: a.renew_domain("example.com"),
        lambda a: a.transfer_domain("example.com", {"auth_code": "x"}),
        lambda a: a.set_nameservers("example.com", ["ns1.host.net"]),
    ])
    def test_unsupported(self, adapter, transport, call):
        result = call(adapter)

        assert result.ok is False
        assert result.error_kind == ErrorKind.UNSUPPORTED
        transport.request.assert_not_called()


class TestZones:

    def test_get_domain_returns_zone(self, adapter, transport):
        transport.request.return_value = zone_found()

        result = adapter.get_domain("example.com")

        assert result.ok is True
        assert result.raw == ZONE

    def test_zone_not_found(self, adapter, transport):
        transport.request.return_value = envelope([])

        result = adapter.get_domain("missing.com")

        assert result.ok is False
        assert result.error_kind == ErrorKind.PROVIDER
        assert result.error == "Cloudflare zone not found: missing.com"

    def test_get_zone_id(self, adapter, transport):
        transport.request.return_value = zone_found()
        assert adapter.get_zone_id("example.com") == "zone-1"

        transport.request.return_value = envelope([])
        assert adapter.get_zone_id("missing.com") is None

    def test_create_zone_includes_account(self, adapter, transport):
        transport.request.return_value = envelope(ZONE)

        result = adapter.create_zone("example.com")

        assert result.ok is True
        assert result.raw["name_servers"] == ZONE["name_servers"]
        assert transport.request.call_args.kwargs["json"] == {
            "name": "example.com", "jump_start": False, "account": {"id": "acct-9"}
        }

    def test_create_zone_error_envelope(self, adapter, transport):
        transport.request.return_value = envelope(
            None, success=False, errors=[{"code": 1061, "message": "example.com already exists"}], status=400
        )

        result = adapter.create_zone("example.com")

        assert result.ok is False
        assert result.error_kind == ErrorKind.HTTP
        assert result.error == "Cloudflare API error: example.com already exists"

    def test_purge_everything(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope({"id": "zone-1"})]

        result = adapter.purge_cache("example.com")

        assert result.ok is True
        assert calls(transport)[-1] == ("POST", "zones/zone-1/purge_cache")
        assert transport.request.call_args.kwargs["json"] == {"purge_everything": True}

    def test_purge_urls(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope({"id": "zone-1"})]

        adapter.purge_cache("example.com", ["https://example.com/a.css"])

        assert transport.request.call_args.kwargs["json"] == {"files": ["https://example.com/a.css"]}

    def test_set_setting(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope({"id": "always_use_https", "value": "on"})]

        result = adapter.set_setting("example.com", "always_use_https", "on")

        assert result.ok is True
        assert calls(transport)[-1] == ("PATCH", "zones/zone-1/settings/always_use_https")
        assert transport.request.call_args.kwargs["json"] == {"value": "on"}

    def test_get_zone_by_id(self, adapter, transport):
        transport.request.return_value = envelope({**ZONE, "status": "active"})

        result = adapter.get_zone("zone-1")

        assert result.ok is True
        assert result.raw["status"] == "active"
        assert calls(transport) == [("GET", "zones/zone-1")]

    def test_get_zone_unknown_id(self, adapter, transport):
        transport.request.return_value = envelope(
            None, success=False, errors=[{"code": 1001, "message": "Invalid zone identifier"}], status=404
        )

        result = adapter.get_zone("nope")

        assert result.ok is False
        assert result.error_kind == ErrorKind.HTTP
        assert result.error == "Cloudflare API error: Invalid zone identifier"

    def test_toggle_free_features_on(self, adapter, transport):
        transport.request.side_effect = [zone_found()] + [envelope({"value": "on"}) for _ in range(6)]

        result = adapter.toggle_free_features("example.com")

        assert result.ok is True
        assert result.raw["zone_id"] == "zone-1"
        assert len(result.raw["results"]) == 6
        assert calls(transport)[1:] == [
            ("PATCH", "zones/zone-1/settings/always_use_https"),
            ("PATCH", "zones/zone-1/settings/automatic_https_rewrites"),
            ("PATCH", "zones/zone-1/settings/brotli"),
            ("PATCH", "zones/zone-1/settings/rocket_loader"),
            ("PATCH", "zones/zone-1/settings/development_mode"),
            ("PATCH", "zones/zone-1/settings/minify"),
        ]
        assert transport.request.call_args_list[1].kwargs["json"] == {"value": "on"}
        assert transport.request.call_args.kwargs["json"] == {"value": {"css": "on", "js": "on", "html": "on"}}

    def test_toggle_free_features_off_reports_partial_failure(self, adapter, transport):
        refused = envelope(
            None, success=False, errors=[{"code": 1007, "message": "rocket_loader not allowed"}], status=403
        )
        transport.request.side_effect = [
            zone_found(),
            envelope({"value": "off"}),
            envelope({"value": "off"}),
            envelope({"value": "off"}),
            refused,
            envelope({"value": "off"}),
            envelope({"value": {"css": "off", "js": "off", "html": "off"}}),
        ]

        result = adapter.toggle_free_features("example.com", on=False)

        assert result.ok is False
        assert result.error == "Cloudflare API error: rocket_loader not allowed"
        assert transport.request.call_count == 7
        assert transport.request.call_args.kwargs["json"] == {"value": {"css": "off", "js": "off", "html": "off"}}

    def test_toggle_free_features_unknown_zone(self, adapter, transport):
        transport.request.return_value = envelope([])

        result = adapter.toggle_free_features("missing.com")

        assert result.ok is False
        assert result.error == "Cloudflare zone not found: missing.com"
        assert transport.request.call_count == 1


class TestDns:

    def test_get_dns_relative_hosts(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope([
            {"id": "r1", "type": "A", "name": "example.com", "content": "1.2.3.4", "ttl": 1, "proxied": True},
            {"id": "r2", "type": "MX", "name": "example.com", "content": "mx.example.com", "ttl": 300, "priority": 10},
            {"id": "r3", "type": "CNAME", "name": "www.example.com", "content": "example.com", "ttl": 300},
        ])]

        result = adapter.get_dns("example.com")

        assert result.ok is True
        assert result.records == [
            DnsRecord(type="A", host="@", value="1.2.3.4", ttl=1, record_id="r1"),
            DnsRecord(type="MX", host="@", value="mx.example.com", ttl=300, prio=10, record_id="r2"),
            DnsRecord(type="CNAME", host="www", value="example.com", ttl=300, record_id="r3"),
        ]
        assert calls(transport)[1] == ("GET", "zones/zone-1/dns_records")

    def test_success_false_on_200_is_failure(self, adapter, transport):
        transport.request.side_effect = [
            zone_found(),
            envelope(None, success=False, errors=[{"code": 10000, "message": "Authentication error"}]),
        ]

        result = adapter.get_dns("example.com")

        assert result.ok is False
        assert result.error_kind == ErrorKind.PROVIDER
        assert result.error == "Cloudflare API error: Authentication error"
        assert result.records == []

    def test_malformed_body(self, adapter, transport):
        transport.request.return_value = make_response(text="<html>502 Bad Gateway</html>", status=502)

        result = adapter.get_dns("example.com")

        assert result.ok is False
        assert result.error_kind == ErrorKind.PARSE

    def test_upsert_creates_when_missing(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope([]), envelope({"id": "new"})]

        result = adapter.add_dns("example.com", {"type": "A", "host": "www", "value": "1.2.3.4", "proxied": True})

        assert result.ok is True
        assert result.raw == {"id": "new"}
        assert calls(transport)[-1] == ("POST", "zones/zone-1/dns_records")
        assert transport.request.call_args.kwargs["json"] == {
            "type": "A", "name": "www.example.com", "content": "1.2.3.4", "ttl": 3600, "proxied": True
        }

    def test_upsert_patches_when_content_differs(self, adapter, transport):
        existing = {"id": "r1", "type": "A", "name": "www.example.com", "content": "9.9.9.9", "ttl": 3600, "proxied": False}
        transport.request.side_effect = [zone_found(), envelope([existing]), envelope({**existing, "content": "1.2.3.4"})]

        result = adapter.ensure_dns_record("example.com", {"type": "A", "host": "www", "value": "1.2.3.4"})

        assert result.ok is True
        assert calls(transport)[-1] == ("PATCH", "zones/zone-1/dns_records/r1")

    def test_upsert_leaves_identical_record(self, adapter, transport):
        existing = {"id": "r1", "type": "A", "name": "www.example.com", "content": "1.2.3.4", "ttl": 3600, "proxied": False}
        transport.request.side_effect = [zone_found(), envelope([existing])]

        result = adapter.ensure_dns_record("example.com", {"type": "A", "host": "www", "value": "1.2.3.4"})

        assert result.ok is True
        assert result.raw == existing
        assert transport.request.call_count == 2

    def test_set_dns_deletes_then_creates(self, adapter, transport):
        transport.request.side_effect = [
            zone_found(),
            envelope([{"id": "r1"}, {"id": "r2"}]),
            envelope({"id": "r1"}),
            envelope({"id": "r2"}),
            envelope({"id": "r3"}),
        ]

        result = adapter.set_dns("example.com", [{"type": "A", "host": "@", "value": "1.2.3.4"}])

        assert result.ok is True
        assert calls(transport)[2:] == [
            ("DELETE", "zones/zone-1/dns_records/r1"),
            ("DELETE", "zones/zone-1/dns_records/r2"),
            ("POST", "zones/zone-1/dns_records"),
        ]
        assert transport.request.call_args.kwargs["json"]["name"] == "example.com"

    def test_set_dns_empty_list_empties_zone(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope([{"id": "r1"}]), envelope({"id": "r1"})]

        result = adapter.set_dns("example.com", [])

        assert result.ok is True
        assert calls(transport)[-1] == ("DELETE", "zones/zone-1/dns_records/r1")

    def test_del_dns_by_id(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope({"id": "r7"})]

        result = adapter.del_dns("example.com", {"id": "r7"})

        assert result.ok is True
        assert calls(transport)[-1] == ("DELETE", "zones/zone-1/dns_records/r7")

    def test_del_dns_by_match_accepts_fqdn_host(self, adapter, transport):
        transport.request.side_effect = [
            zone_found(),
            envelope([
                {"id": "r1", "type": "TXT", "name": "_acme.example.com", "content": "keep", "ttl": 120},
                {"id": "r2", "type": "TXT", "name": "_acme.example.com", "content": "drop", "ttl": 120},
            ]),
            envelope({"id": "r2"}),
        ]

        result = adapter.del_dns("example.com", {"type": "txt", "host": "_acme.example.com", "value": "drop"})

        assert result.ok is True
        assert transport.request.call_args_list[1].kwargs["params"] == {
            "per_page": 100, "type": "TXT", "name": "_acme.example.com"
        }
        assert calls(transport)[-1] == ("DELETE", "zones/zone-1/dns_records/r2")

    def test_del_dns_no_match(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope([])]

        result = adapter.del_dns("example.com", {"type": "A", "host": "ghost"})

        assert result.ok is False
        assert result.error_kind == ErrorKind.PROVIDER

    def test_del_dns_empty_selector_is_refused(self, adapter, transport):
        result = adapter.del_dns("example.com", {})

        assert result.ok is False
        transport.request.assert_not_called()

    @pytest.mark.parametrize("row", [
        {"id": "r1", "type": "A", "content": "1.2.3.4", "ttl": 1},
        {"id": "r1", "type": "A", "name": "example.com", "content": "1.2.3.4", "ttl": "auto"},
        {"id": "r1", "type": "MX", "name": "example.com", "content": "mx.example.com", "priority": "high"},
        "not-a-row",
    ])
    def test_get_dns_malformed_row(self, adapter, transport, row):
        rows = [{"id": "r0", "type": "A", "name": "www.example.com", "content": "1.2.3.4", "ttl": 1}, row]
        transport.request.side_effect = [zone_found(), envelope(rows)]

        result = adapter.get_dns("example.com")

        assert result.ok is False
        assert result.error_kind == ErrorKind.PARSE
        assert result.raw == rows
        assert result.records == []

    def test_set_dns_row_without_id_stops_before_deleting(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope([{"id": "r1"}, {"type": "A"}])]

        result = adapter.set_dns("example.com", [{"type": "A", "host": "@", "value": "1.2.3.4"}])

        assert result.ok is False
        assert result.error_kind == ErrorKind.PARSE
        assert transport.request.call_count == 2

    def test_del_dns_malformed_row(self, adapter, transport):
        transport.request.side_effect = [zone_found(), envelope([{"id": "r1", "type": "TXT", "content": "x"}])]

        result = adapter.del_dns("example.com", {"type": "TXT", "value": "x"})

        assert result.ok is False
        assert result.error_kind == ErrorKind.PARSE
        assert transport.request.call_count == 2

    def test_full_page_is_flagged(self, adapter, transport, caplog):
        rows = [
            {"id": f"r{i}", "type": "A", "name": f"h{i}.example.com", "content": "1.2.3.4", "ttl": 1}
            for i in range(100)
        ]
        transport.request.side_effect = [zone_found(), envelope(rows)]

        with caplog.at_level(logging.WARNING, logger="registrar_api.api.cloudflare_client"):
            result = adapter.get_dns("example.com")

        assert result.ok is True
        assert len(result.records) == 100
        assert "full page of 100" in caplog.text

    def test_partial_page_is_not_flagged(self, adapter, transport, caplog):
        transport.request.side_effect = [zone_found(), envelope([
            {"id": "r1", "type": "A", "name": "example.com", "content": "1.2.3.4", "ttl": 1}
        ])]

        with caplog.at_level(logging.WARNING, logger="registrar_api.api.cloudflare_client"):
            adapter.get_dns("example.com")

        assert "full page" not in caplog.text


class TestRecordRoundTrip:

    @pytest.mark.parametrize("record", [
        DnsRecord(type="A", host="@", value="203.0.113.10", ttl=300),
        DnsRecord(type="CNAME", host="www", value="example.com", ttl=3600),
        DnsRecord(type="MX", host="@", value="mx1.example.com", ttl=3600, prio=10),
        DnsRecord(type="TXT", host="_acme-challenge", value="token-value", ttl=120),
    ])
    def test_written_fields_parse_back(self, adapter, transport, record):
        transport.request.side_effect = [zone_found(), envelope([]), envelope({"id": "new"})]
        adapter.add_dns("example.com", record)
        sent = transport.request.call_args.kwargs["json"]

        transport.request.side_effect = [zone_found(), envelope([{**sent, "id": "new"}])]
        listed = adapter.get_dns("example.com")

        assert listed.ok is True
        assert [r.model_dump(exclude={"record_id"}) for r in listed.records] == [
            record.model_dump(exclude={"record_id"})
        ]


class TestRaw:

    def test_raw_keeps_envelope(self, adapter, transport):
        transport.request.return_value = make_response(
            {"success": True, "errors": [], "result": {"status": "active"}},
            url="https://api.cloudflare.com/client/v4/user/tokens/verify"
        )

        result = adapter.raw("user/tokens/verify")

        assert result.ok is True
        assert result.raw["result"] == {"status": "active"}
        assert result.endpoint == "https://api.cloudflare.com/client/v4/user/tokens/verify"
