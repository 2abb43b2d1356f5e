# checks/servers.py

"""
Static server-signature catalog.

Maps the prefix of a ``Server`` response header to descriptive metadata about
the web server software. The catalog is loaded once at process start; a
missing or malformed file is fatal.
"""

import json
import logging
from dataclasses import dataclass

from .errors import CatalogError

logger = logging.getLogger("snift.servers")


@dataclass(frozen=True)
class ServerDetail:
    name: str
    vendor: str = ""
    website: str = ""

    def to_dict(self):
        return {"name": self.name, "vendor": self.vendor, "website": self.website}


class ServerCatalog:
    """Prefix lookup over ``{prefix, server_detail}`` entries."""

    def __init__(self, entries):
        self.entries = list(entries)

    @classmethod
    def load(cls, path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise CatalogError(f"Cannot read server catalog {path}: {e}") from e
        except ValueError as e:
            raise CatalogError(f"Server catalog {path} is not valid JSON: {e}") from e
        catalog = cls.from_list(raw)
        logger.debug("Loaded %d server signatures from %s", len(catalog.entries), path)
        return catalog

    @classmethod
    def from_list(cls, raw):
        if not isinstance(raw, list):
            raise CatalogError("Server catalog must be a JSON list")
        entries = []
        for index, item in enumerate(raw):
            try:
                prefix = item["prefix"]
                detail = item["server_detail"]
                entries.append((prefix, ServerDetail(
                    name=detail["name"],
                    vendor=detail.get("vendor", ""),
                    website=detail.get("website", ""),
                )))
            except (KeyError, TypeError, AttributeError) as e:
                raise CatalogError(f"Malformed server catalog entry #{index}: {item!r}") from e
            if not isinstance(prefix, str) or not prefix:
                raise CatalogError(f"Server catalog entry #{index} has an empty prefix")
        return cls(entries)

    def lookup(self, server):
        """Return the ServerDetail of the first entry whose prefix matches, or None."""
        if not server:
            return None
        server = server.strip().lower()
        for prefix, detail in self.entries:
            if server.startswith(prefix.lower()):
                return detail
        logger.debug("No server signature matches %r", server)
        return None

    def __len__(self):
        return len(self.entries)
