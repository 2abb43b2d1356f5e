# tests/test_certificate.py

"""Tests for the TLS certificate summary."""

import ssl
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from checks.certificate import (
    CertificateSummary,
    default_port,
    get_certificate,
    split_host_port,
    summarize_certificate,
)

PEER_CERT = {
    "subject": ((("commonName", "www.example.org"),),),
    "issuer": (
        (("countryName", "US"),),
        (("organizationName", "DigiCert Inc"),),
        (("commonName", "DigiCert Global G2 TLS RSA SHA256 2020 CA1"),),
    ),
    "notBefore": "Jan 30 00:00:00 2024 GMT",
    "notAfter": "Mar  1 23:59:59 2025 GMT",
    "subjectAltName": (
        ("DNS", "www.example.org"),
        ("DNS", "example.com"),
        ("IP Address", "93.184.215.14"),
    ),
}


class TestSplitHostPort(unittest.TestCase):

    def test_explicit_port(self):
        self.assertEqual(split_host_port("example.com:8443", "https"), ("example.com", 8443))

    def test_default_ports(self):
        self.assertEqual(split_host_port("example.com", "http"), ("example.com", 80))
        self.assertEqual(split_host_port("example.com", "https"), ("example.com", 443))
        self.assertEqual(split_host_port("example.com"), ("example.com", 443))

    def test_ipv6_literal(self):
        self.assertEqual(split_host_port("[::1]:8443", "https"), ("::1", 8443))
        self.assertEqual(split_host_port("[2001:db8::1]", "http"), ("2001:db8::1", 80))

    def test_userinfo_is_dropped(self):
        self.assertEqual(split_host_port("user:pw@example.com:81", "http"), ("example.com", 81))

    def test_invalid_port(self):
        with self.assertRaises(ValueError):
            split_host_port("example.com:https", "https")
        with self.assertRaises(ValueError):
            split_host_port("example.com:70000", "https")

    def test_default_port_for_unknown_scheme(self):
        self.assertEqual(default_port(None), 443)


class TestCertificateSummary(unittest.TestCase):

    def test_summarize(self):
        summary = summarize_certificate(PEER_CERT, "example.org", "93.184.215.14")
        self.assertEqual(summary.domain, "example.org")
        self.assertEqual(summary.ip, "93.184.215.14")
        self.assertEqual(summary.issuer_common_name, "DigiCert Global G2 TLS RSA SHA256 2020 CA1")
        self.assertEqual(summary.subject_common_name, "www.example.org")
        self.assertEqual(summary.subject_alt_names, {"www.example.org", "example.com"})
        self.assertEqual(summary.not_before, datetime(2024, 1, 30, tzinfo=timezone.utc))
        self.assertEqual(summary.not_after, datetime(2025, 3, 1, 23, 59, 59, tzinfo=timezone.utc))
        self.assertIsNone(summary.error)

    def test_get_certificate_uses_dialer(self):
        dialer = MagicMock()
        dialer.dial.return_value = (PEER_CERT, "93.184.215.14")

        summary = get_certificate(dialer, "example.org", 443, timeout=3)

        dialer.dial.assert_called_once_with("example.org", 443, 3)
        self.assertEqual(summary.subject_common_name, "www.example.org")

    def test_handshake_failure_is_recorded(self):
        dialer = MagicMock()
        dialer.dial.side_effect = ssl.SSLError("handshake failure")

        summary = get_certificate(dialer, "example.org", 443)

        self.assertEqual(summary.domain, "example.org")
        self.assertIn("handshake failure", summary.error)
        self.assertIsNone(summary.issuer_common_name)
        self.assertEqual(summary.subject_alt_names, set())

    def test_dial_timeout_is_recorded(self):
        dialer = MagicMock()
        dialer.dial.side_effect = TimeoutError("timed out")
        summary = get_certificate(dialer, "example.org", 80)
        self.assertEqual(summary.error, "timed out")

    def test_empty_certificate(self):
        dialer = MagicMock()
        dialer.dial.return_value = ({}, "127.0.0.1")
        summary = get_certificate(dialer, "example.org", 443)
        self.assertIsNotNone(summary.error)

    def test_to_dict(self):
        d = summarize_certificate(PEER_CERT, "example.org", "93.184.215.14").to_dict()
        self.assertEqual(d["domain_name"], "example.org")
        self.assertEqual(d["sans"], ["example.com", "www.example.org"])
        self.assertEqual(d["not_before"], "2024-01-30T00:00:00+00:00")
        self.assertIsNone(d["error"])

    def test_error_to_dict(self):
        d = CertificateSummary(domain="example.org", error="boom").to_dict()
        self.assertEqual(d["error"], "boom")
        self.assertIsNone(d["issuer"])
        self.assertEqual(d["sans"], [])


if __name__ == "__main__":
    unittest.main()
