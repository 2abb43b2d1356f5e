# tests/test_servers.py

"""Tests for the server-signature catalog."""

import json
import os
import tempfile
import unittest

from checks.errors import CatalogError
from checks.servers import ServerCatalog, ServerDetail
from checks.settings import DEFAULT_CATALOG_PATH


class TestServerCatalog(unittest.TestCase):

    def setUp(self):
        self.catalog = ServerCatalog.from_list([
            {"prefix": "Apache-Coyote", "server_detail": {"name": "Apache Tomcat"}},
            {"prefix": "Apache", "server_detail": {"name": "Apache HTTP Server", "vendor": "ASF"}},
            {"prefix": "nginx", "server_detail": {"name": "nginx"}},
        ])

    def test_prefix_lookup(self):
        detail = self.catalog.lookup("Apache/2.4.57 (Debian)")
        self.assertEqual(detail, ServerDetail("Apache HTTP Server", "ASF", ""))

    def test_first_match_wins(self):
        self.assertEqual(self.catalog.lookup("Apache-Coyote/1.1").name, "Apache Tomcat")

    def test_lookup_is_case_insensitive(self):
        self.assertEqual(self.catalog.lookup("NGINX").name, "nginx")

    def test_unknown_server(self):
        self.assertIsNone(self.catalog.lookup("MyServer/1.0"))
        self.assertIsNone(self.catalog.lookup(None))

    def test_bundled_catalog_loads(self):
        catalog = ServerCatalog.load(DEFAULT_CATALOG_PATH)
        self.assertGreater(len(catalog), 0)
        self.assertEqual(catalog.lookup("cloudflare").name, "Cloudflare")


class TestMalformedCatalog(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "web_servers.json")

    def tearDown(self):
        if os.path.exists(self.path):
            os.remove(self.path)
        os.rmdir(self.tmpdir)

    def _write(self, content):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(content)

    def test_missing_file(self):
        with self.assertRaises(CatalogError):
            ServerCatalog.load(self.path)

    def test_invalid_json(self):
        self._write("{not json")
        with self.assertRaises(CatalogError):
            ServerCatalog.load(self.path)

    def test_not_a_list(self):
        self._write(json.dumps({"prefix": "nginx"}))
        with self.assertRaises(CatalogError):
            ServerCatalog.load(self.path)

    def test_entry_without_detail(self):
        self._write(json.dumps([{"prefix": "nginx"}]))
        with self.assertRaises(CatalogError):
            ServerCatalog.load(self.path)

    def test_empty_prefix(self):
        self._write(json.dumps([{"prefix": "", "server_detail": {"name": "x"}}]))
        with self.assertRaises(CatalogError):
            ServerCatalog.load(self.path)


if __name__ == "__main__":
    unittest.main()
