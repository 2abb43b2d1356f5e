# tests/test_badges.py

"""Tests for badge derivation."""

import unittest

from checks.badges import BADGE_CATALOG, badge_for, derive_badges
from checks.results import CheckResult, ScoreContribution


def _result(code, passed):
    return CheckResult(code, ScoreContribution(5 if passed else 0, 5), passed, "")


class TestBadges(unittest.TestCase):

    def test_passing_check_gets_its_badge(self):
        self.assertEqual(badge_for("x_frame_options", True).code, "CLICKJACKING_PROTECT")
        self.assertEqual(badge_for("protocol", True).code, "HTTP_SECURE")
        self.assertEqual(badge_for("tls_version", True).code, "LATEST_TLS")

    def test_failing_check_gets_no_badge(self):
        self.assertIsNone(badge_for("x_frame_options", False))

    def test_unknown_check_gets_no_badge(self):
        self.assertIsNone(badge_for("mail_auth", True))

    def test_derive_keeps_catalog_order(self):
        checks = [_result("spf", True), _result("protocol", True), _result("xss_protection", False)]
        codes = [badge.code for badge in derive_badges(checks)]
        self.assertEqual(codes, ["HTTP_SECURE", "EMAIL_SPOOFING_PROTECT"])

    def test_derive_accepts_pairs(self):
        codes = [b.code for b in derive_badges([("x_content_type_options", True), ("dmarc", False)])]
        self.assertEqual(codes, ["NO_SNIFF"])

    def test_badge_codes_are_unique(self):
        codes = [badge.code for badge in BADGE_CATALOG.values()]
        self.assertEqual(len(codes), len(set(codes)))

    def test_to_dict(self):
        d = badge_for("content_security_policy", True).to_dict()
        self.assertEqual(d["code"], "CSP_ENABLED")
        self.assertTrue(d["title"])
        self.assertTrue(d["description"])


if __name__ == "__main__":
    unittest.main()
