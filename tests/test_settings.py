# tests/test_settings.py

import unittest
from unittest.mock import patch

from checks.settings import DEFAULT_CATALOG_PATH, OPEN_BUG_BOUNTY_URL, Settings


class TestSettings(unittest.TestCase):

    @patch.dict("os.environ", {}, clear=True)
    def test_defaults(self):
        settings = Settings.from_env()
        self.assertEqual(settings.http_timeout, 10.0)
        self.assertEqual(settings.tls_timeout, 3.0)
        self.assertEqual(settings.dns_servers, ["1.1.1.1", "8.8.8.8"])
        self.assertEqual(settings.incident_feed_url, OPEN_BUG_BOUNTY_URL)
        self.assertEqual(settings.catalog_path, DEFAULT_CATALOG_PATH)

    @patch.dict("os.environ", {
        "SNIFT_HTTP_TIMEOUT": "2.5",
        "SNIFT_DNS_SERVERS": "9.9.9.9, 149.112.112.112",
        "SNIFT_SERVER_CATALOG": "/tmp/servers.json",
        "SNIFT_USER_AGENT": "test-agent",
    }, clear=True)
    def test_overrides(self):
        settings = Settings.from_env()
        self.assertEqual(settings.http_timeout, 2.5)
        self.assertEqual(settings.dns_servers, ["9.9.9.9", "149.112.112.112"])
        self.assertEqual(settings.catalog_path, "/tmp/servers.json")
        self.assertEqual(settings.user_agent, "test-agent")

    @patch.dict("os.environ", {"SNIFT_DNS_TIMEOUT": "soon"}, clear=True)
    def test_invalid_number_falls_back(self):
        self.assertEqual(Settings.from_env().dns_timeout, 5.0)


if __name__ == "__main__":
    unittest.main()
