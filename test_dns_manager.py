#!/usr/bin/env python3
"""
Test suite for the DNS record manager

This module tests validators, providers, change analysis and the
application of sync requests against the mock provider.
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch

import dns.exception
import dns.rcode
import dns.resolver
import dns.rrset
import dns.zone

from whois_dns_sync.core.dns_manager import DNSRecordManager
from whois_dns_sync.core.record_manager import RecordManager, normalize_value
from whois_dns_sync.exceptions import DNSOperationError
from whois_dns_sync.providers.bind_provider import BINDProvider, parse_bind_key
from whois_dns_sync.providers.dns_client import DNSClient
from whois_dns_sync.providers.mock_provider import MockDNSProvider
from whois_dns_sync.utils.validators import (
    is_within,
    validate_fqdn,
    validate_ipv4,
    validate_record_value,
)


def record_set(fqdn, record_type, values, ttl=300):
    return {"fqdn": fqdn, "type": record_type, "ttl": ttl, "values": sorted(values)}


def mock_config(records=None):
    return {
        "default_provider": "mock",
        "dns_providers": {"mock": {"records": records or []}},
    }


class TestValidators(unittest.TestCase):
    """Test the validation functions."""

    def test_validate_fqdn_valid(self):
        for fqdn in ["example.kg", "new-dns-example.no.kg", "xn--80ak6aa92e.no.kg", "_dmarc.example.kg"]:
            with self.subTest(fqdn=fqdn):
                self.assertTrue(validate_fqdn(fqdn))

    def test_validate_fqdn_invalid(self):
        for fqdn in ["", "single", "example.kg.", "example..kg", "-example.kg", "a" * 64 + ".kg"]:
            with self.subTest(fqdn=fqdn):
                self.assertFalse(validate_fqdn(fqdn))

    def test_validate_ipv4(self):
        self.assertTrue(validate_ipv4("192.0.2.1"))
        self.assertFalse(validate_ipv4("256.1.2.3"))
        self.assertFalse(validate_ipv4(""))

    def test_validate_record_value(self):
        cases = [
            ("A", "192.0.2.1", True),
            ("A", "2001:db8::1", False),
            ("AAAA", "2001:db8::1", True),
            ("CNAME", "target.example.kg", True),
            ("CNAME", "not a name", False),
            ("MX", "10 mail.example.kg", True),
            ("MX", "mail.example.kg", False),
            ("TXT", "v=spf1 -all", True),
            ("SRV", "0 5 5060 sip.example.kg", False),
            ("A", None, False),
        ]
        for record_type, value, expected in cases:
            with self.subTest(record_type=record_type, value=value):
                self.assertEqual(validate_record_value(record_type, value), expected)

    def test_is_within(self):
        self.assertTrue(is_within("example.no.kg", "example.no.kg"))
        self.assertTrue(is_within("www.Example.no.kg.", "example.no.kg"))
        self.assertFalse(is_within("myexample.no.kg", "example.no.kg"))


class TestMockDNSProvider(unittest.TestCase):
    """Test the mock DNS provider."""

    def setUp(self):
        self.provider = MockDNSProvider()
        self.record = record_set("example.no.kg", "A", ["192.0.2.1"])

    def test_create_and_get_records(self):
        self.provider.create_record("no.kg", self.record)
        self.provider.create_record("no.kg", record_set("www.example.no.kg", "A", ["192.0.2.2"]))
        self.provider.create_record("no.kg", record_set("other.no.kg", "A", ["192.0.2.3"]))

        records = self.provider.get_records("no.kg", "example.no.kg")
        self.assertEqual(
            sorted(r["fqdn"] for r in records), ["example.no.kg", "www.example.no.kg"]
        )

    def test_update_record(self):
        self.provider.create_record("no.kg", self.record)
        self.provider.update_record("no.kg", record_set("example.no.kg", "A", ["192.0.2.9"]))

        self.assertEqual(self.provider.records, [record_set("example.no.kg", "A", ["192.0.2.9"])])

    def test_update_missing_record(self):
        with self.assertRaises(ValueError):
            self.provider.update_record("no.kg", self.record)

    def test_delete_record(self):
        self.provider.create_record("no.kg", self.record)
        self.provider.delete_record("no.kg", self.record)
        self.assertEqual(self.provider.records, [])

        with self.assertRaises(ValueError):
            self.provider.delete_record("no.kg", self.record)

    def test_returned_records_are_copies(self):
        self.provider.create_record("no.kg", self.record)
        self.provider.get_records("no.kg", "example.no.kg")[0]["values"].append("192.0.2.99")
        self.assertEqual(self.provider.records[0]["values"], ["192.0.2.1"])


class TestRecordManager(unittest.TestCase):
    """Test change analysis."""

    def setUp(self):
        self.record_manager = RecordManager(Mock())

    def test_build_desired_records(self):
        whois_data = {
            "domain": "example",
            "sld": "no.kg",
            "records": [
                {"type": "A", "value": "192.0.2.1"},
                {"name": "@", "type": "A", "value": "192.0.2.2", "ttl": 60},
                {"name": "www", "type": "cname", "value": "example.no.kg"},
                {"name": "@", "type": "MX", "value": "10 mail.example.no.kg"},
                {"name": "@", "type": "TXT", "value": "v=spf1 -all"},
                {"name": "bad", "type": "A", "value": "not-an-ip"},
                {"name": "srv", "type": "SRV", "value": "0 5 5060 sip.example.no.kg"},
                "garbage",
            ],
        }

        records = self.record_manager.build_desired_records(whois_data, "example.no.kg")
        by_key = {(r["fqdn"], r["type"]): r for r in records}

        self.assertEqual(len(records), 4)
        self.assertEqual(
            by_key[("example.no.kg", "A")],
            record_set("example.no.kg", "A", ["192.0.2.1", "192.0.2.2"], ttl=60),
        )
        self.assertEqual(by_key[("www.example.no.kg", "CNAME")]["values"], ["example.no.kg."])
        self.assertEqual(by_key[("example.no.kg", "MX")]["values"], ["10 mail.example.no.kg."])
        self.assertEqual(by_key[("example.no.kg", "TXT")]["values"], ['"v=spf1 -all"'])

    def test_build_desired_records_without_records(self):
        self.assertEqual(
            self.record_manager.build_desired_records({"domain": "a", "sld": "kg"}, "a.kg"), []
        )

    def test_normalize_value(self):
        self.assertEqual(normalize_value("AAAA", "2001:0db8:0000::1"), "2001:db8::1")
        self.assertEqual(normalize_value("NS", "NS1.Example.kg."), "ns1.example.kg.")
        self.assertEqual(normalize_value("TXT", '"quoted"'), '"quoted"')

    def test_analyze_changes(self):
        current = [
            record_set("example.no.kg", "A", ["192.0.2.1"]),
            record_set("www.example.no.kg", "A", ["192.0.2.1"]),
            record_set("old.example.no.kg", "A", ["192.0.2.5"]),
            record_set("neighbour.no.kg", "A", ["192.0.2.7"]),
        ]
        desired = [
            record_set("example.no.kg", "A", ["192.0.2.1"]),
            record_set("www.example.no.kg", "A", ["192.0.2.2"]),
            record_set("mail.example.no.kg", "A", ["192.0.2.3"]),
        ]

        changes = self.record_manager.analyze_changes(current, desired, "example.no.kg")

        self.assertEqual([r["fqdn"] for r in changes["creates"]], ["mail.example.no.kg"])
        self.assertEqual([r["fqdn"] for r in changes["updates"]], ["www.example.no.kg"])
        self.assertEqual([r["fqdn"] for r in changes["deletes"]], ["old.example.no.kg"])
        self.assertEqual([r["fqdn"] for r in changes["no_changes"]], ["example.no.kg"])
        self.assertEqual(changes["total_changes"], 3)

    def test_ttl_change_is_an_update(self):
        current = [record_set("example.no.kg", "A", ["192.0.2.1"], ttl=300)]
        desired = [record_set("example.no.kg", "A", ["192.0.2.1"], ttl=60)]

        changes = self.record_manager.analyze_changes(current, desired, "example.no.kg")
        self.assertEqual(len(changes["updates"]), 1)

    def test_records_outside_domain_refused(self):
        desired = [record_set("other.no.kg", "A", ["192.0.2.1"])]
        with self.assertRaises(ValueError):
            self.record_manager.analyze_changes([], desired, "example.no.kg")

    def test_removal_changes(self):
        current = [
            record_set("example.no.kg", "A", ["192.0.2.1"]),
            record_set("www.example.no.kg", "CNAME", ["example.no.kg."]),
            record_set("neighbour.no.kg", "A", ["192.0.2.7"]),
        ]
        changes = self.record_manager.removal_changes(current, "example.no.kg")
        self.assertEqual(changes["total_changes"], 2)


class TestDNSRecordManager(unittest.TestCase):
    """Test sync requests applied to the mock provider."""

    whois_data = {
        "domain": "example",
        "sld": "no.kg",
        "records": [
            {"name": "@", "type": "A", "value": "192.0.2.1"},
            {"name": "www", "type": "A", "value": "192.0.2.2"},
        ],
    }

    def provider(self, manager):
        return manager.dns_client.provider

    def test_pr_merge_registration(self):
        manager = DNSRecordManager(mock_config())

        result = manager.handle_pr_merge("Add example", {**self.whois_data, "operation": "registration"})

        self.assertTrue(result["success"])
        self.assertEqual(result["triggerType"], "pr_merge")
        self.assertEqual(result["operation"], "registration")
        self.assertEqual(result["fqdn"], "example.no.kg")
        self.assertEqual(result["changes"]["total"], 2)
        self.assertEqual(len(self.provider(manager).records), 2)

    def test_registration_of_existing_domain(self):
        manager = DNSRecordManager(mock_config([record_set("example.no.kg", "A", ["192.0.2.9"])]))

        with self.assertRaises(DNSOperationError):
            manager.handle_pr_merge("Add", {**self.whois_data, "operation": "registration"})

    def test_manual_registration_with_force_sync(self):
        manager = DNSRecordManager(mock_config([record_set("example.no.kg", "A", ["192.0.2.9"])]))

        result = manager.handle_manual_sync(
            "Manual DNS Sync",
            self.whois_data,
            {"operation": "registration", "force_sync": True, "triggered_by": "alice"},
        )

        self.assertEqual(result["triggerType"], "manual")
        self.assertEqual(result["triggeredBy"], "alice")
        self.assertTrue(result["forceSync"])
        self.assertEqual(result["changes"]["updated"], ["example.no.kg A"])
        self.assertEqual(result["changes"]["created"], ["www.example.no.kg A"])

    def test_update_of_unregistered_domain(self):
        manager = DNSRecordManager(mock_config())

        with self.assertRaises(DNSOperationError):
            manager.handle_manual_sync(
                "Manual", self.whois_data, {"operation": "update", "force_sync": False}
            )

    def test_auto_uses_operation_from_whois_data(self):
        manager = DNSRecordManager(mock_config())

        result = manager.handle_manual_sync(
            "Manual", {**self.whois_data, "operation": "add"}, {"operation": "auto"}
        )
        self.assertEqual(result["operation"], "registration")

    def test_auto_reconciles(self):
        manager = DNSRecordManager(
            mock_config([record_set("stale.example.no.kg", "A", ["192.0.2.8"])])
        )

        result = manager.handle_pr_merge("Sync", self.whois_data)

        self.assertEqual(result["operation"], "auto")
        self.assertEqual(result["changes"]["deleted"], ["stale.example.no.kg A"])
        self.assertEqual(len(self.provider(manager).records), 2)

    def test_pr_merge_deletion(self):
        manager = DNSRecordManager(
            mock_config(
                [
                    record_set("example.no.kg", "A", ["192.0.2.1"]),
                    record_set("www.example.no.kg", "A", ["192.0.2.2"]),
                    record_set("neighbour.no.kg", "A", ["192.0.2.7"]),
                ]
            )
        )
        original = {"domain": "example", "sld": "no.kg", "owner": "alice"}

        result = manager.handle_pr_merge(
            "Remove example",
            {"domain": "example", "sld": "no.kg", "operation": "delete", "original_data": original},
        )

        self.assertEqual(result["operation"], "remove")
        self.assertEqual(result["originalData"], original)
        self.assertEqual(
            self.provider(manager).records, [record_set("neighbour.no.kg", "A", ["192.0.2.7"])]
        )

    def test_deletion_of_unknown_domain_succeeds(self):
        manager = DNSRecordManager(mock_config())

        result = manager.handle_pr_merge(
            "Remove", {"domain": "example", "sld": "no.kg", "operation": "delete"}
        )
        self.assertEqual(result["changes"]["total"], 0)

    def test_dry_run_applies_nothing(self):
        manager = DNSRecordManager(mock_config(), dry_run=True)

        result = manager.handle_pr_merge("Add", self.whois_data)

        self.assertTrue(result["dryRun"])
        self.assertEqual(result["changes"]["total"], 2)
        self.assertEqual(self.provider(manager).records, [])

    def test_zone_mapping(self):
        config = mock_config()
        config["zones"] = {"no.kg": "kg"}
        manager = DNSRecordManager(config)

        result = manager.handle_pr_merge("Add", self.whois_data)
        self.assertEqual(result["zone"], "kg")

    def test_invalid_requests(self):
        manager = DNSRecordManager(mock_config())

        with self.assertRaises(DNSOperationError):
            manager.handle_manual_sync("Manual", None, {"operation": "remove"})
        with self.assertRaises(DNSOperationError):
            manager.handle_pr_merge("Add", {"domain": "example"})
        with self.assertRaises(DNSOperationError):
            manager.handle_pr_merge("Add", {"domain": "example", "sld": "no.kg", "operation": "custom"})

    def test_provider_failures_are_reported(self):
        manager = DNSRecordManager(mock_config())
        manager.dns_client.provider.create_record = Mock(side_effect=RuntimeError("REFUSED"))

        with self.assertRaises(DNSOperationError) as ctx:
            manager.handle_pr_merge("Add", self.whois_data)
        self.assertIn("REFUSED", str(ctx.exception))


class TestDNSClient(unittest.TestCase):
    """Test provider selection."""

    def test_mock_provider(self):
        self.assertIsInstance(DNSClient(mock_config()).provider, MockDNSProvider)

    def test_unknown_provider_falls_back_to_mock(self):
        client = DNSClient({"default_provider": "route53"})
        self.assertIsInstance(client.provider, MockDNSProvider)

    def test_bind_provider(self):
        client = DNSClient(
            {"default_provider": "bind", "dns_providers": {"bind": {"nameserver": "192.0.2.53", "port": 5353}}}
        )
        self.assertIsInstance(client.provider, BINDProvider)
        self.assertEqual(client.provider.nameserver, "192.0.2.53")
        self.assertEqual(client.provider.port, 5353)


class TestBINDProvider(unittest.TestCase):
    """Test the BIND DNS provider configuration."""

    key_file_content = """
key "update-key" {
    algorithm hmac-sha256;
    secret "c2VjcmV0LXNlY3JldC1zZWNyZXQ=";
};
"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.key_file = os.path.join(self.temp_dir, "update-key.conf")
        with open(self.key_file, "w") as f:
            f.write(self.key_file_content)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_parse_bind_key(self):
        self.assertEqual(
            parse_bind_key(self.key_file_content, "update-key"), "c2VjcmV0LXNlY3JldC1zZWNyZXQ="
        )
        self.assertIsNone(parse_bind_key(self.key_file_content, "other-key"))

    def test_keyring_loaded(self):
        provider = BINDProvider({"key_file": self.key_file, "key_name": "update-key"})
        self.assertIsNotNone(provider.keyring)

    def test_missing_key_file(self):
        provider = BINDProvider(
            {"key_file": os.path.join(self.temp_dir, "missing.conf"), "key_name": "update-key"}
        )
        self.assertIsNone(provider.keyring)

    def test_defaults(self):
        provider = BINDProvider({})
        self.assertEqual(provider.nameserver, "127.0.0.1")
        self.assertEqual(provider.port, 53)
        self.assertIsNone(provider.keyring)


class TestBINDProviderRecords(unittest.TestCase):
    """Test BIND reads and dynamic updates against patched dnspython calls."""

    zone_text = """
no.kg. 3600 IN SOA ns1.no.kg. admin.no.kg. 1 3600 600 86400 300
no.kg. 3600 IN NS ns1.no.kg.
example.no.kg. 300 IN A 192.0.2.10
www.example.no.kg. 300 IN CNAME example.no.kg.
other.no.kg. 300 IN A 192.0.2.20
"""

    def setUp(self):
        self.provider = BINDProvider({"nameserver": "192.0.2.53"})

    def fake_resolve(self, answers):
        def resolve(qname, record_type):
            rrset = answers.get((qname.to_text(), record_type))
            if rrset is None:
                raise dns.resolver.NoAnswer()
            return Mock(rrset=rrset)

        return resolve

    def test_zone_transfer_limited_to_domain(self):
        zone = dns.zone.from_text(self.zone_text, origin="no.kg.", relativize=False)

        with patch("dns.query.xfr", return_value=iter([])), patch(
            "dns.zone.from_xfr", return_value=zone
        ):
            records = self.provider.get_records("no.kg", "example.no.kg")

        self.assertCountEqual(
            records,
            [
                record_set("example.no.kg", "A", ["192.0.2.10"]),
                record_set("www.example.no.kg", "CNAME", ["example.no.kg."]),
            ],
        )

    def test_query_fallback_when_transfer_refused(self):
        answers = {
            ("example.no.kg.", "A"): dns.rrset.from_text(
                "example.no.kg.", 300, "IN", "A", "192.0.2.10"
            ),
        }

        with patch("dns.query.xfr", side_effect=dns.exception.DNSException("refused")):
            with patch.object(
                self.provider.resolver, "resolve", side_effect=self.fake_resolve(answers)
            ):
                records = self.provider.get_records("no.kg", "example.no.kg")

        self.assertEqual(records, [record_set("example.no.kg", "A", ["192.0.2.10"])])

    def test_query_ignores_records_of_cname_target(self):
        answers = {
            ("www.example.no.kg.", "CNAME"): dns.rrset.from_text(
                "www.example.no.kg.", 300, "IN", "CNAME", "host.example.net."
            ),
            ("www.example.no.kg.", "A"): dns.rrset.from_text(
                "host.example.net.", 300, "IN", "A", "192.0.2.30"
            ),
        }

        with patch("dns.query.xfr", side_effect=dns.exception.DNSException("refused")):
            with patch.object(
                self.provider.resolver, "resolve", side_effect=self.fake_resolve(answers)
            ):
                records = self.provider.get_records("no.kg", "www.example.no.kg")

        self.assertEqual(
            records, [record_set("www.example.no.kg", "CNAME", ["host.example.net."])]
        )

    def test_update_sent_to_nameserver(self):
        response = Mock()
        response.rcode.return_value = dns.rcode.NOERROR

        with patch("dns.query.tcp", return_value=response) as tcp:
            self.assertTrue(
                self.provider.create_record(
                    "no.kg", record_set("example.no.kg", "A", ["192.0.2.10"])
                )
            )

        update = tcp.call_args[0][0]
        self.assertEqual(tcp.call_args[0][1], "192.0.2.53")
        self.assertEqual(len(update.update), 1)

    def test_refused_update_raises(self):
        response = Mock()
        response.rcode.return_value = dns.rcode.REFUSED

        with patch("dns.query.tcp", return_value=response):
            with self.assertRaises(RuntimeError) as cm:
                self.provider.delete_record(
                    "no.kg", record_set("example.no.kg", "A", ["192.0.2.10"])
                )

        self.assertIn("REFUSED", str(cm.exception))


if __name__ == "__main__":
    unittest.main(verbosity=2)
