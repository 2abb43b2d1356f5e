# checks/settings.py

"""
Runtime configuration for Snift.

Every value can be overridden through a ``SNIFT_*`` environment variable, e.g.
``SNIFT_DNS_SERVERS=1.1.1.1,8.8.8.8`` or ``SNIFT_HTTP_TIMEOUT=5``.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger("snift.settings")

DEFAULT_CATALOG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "resources",
    "web_servers.json",
)

# Open Bug Bounty search API, returns an XML list of disclosed incidents
OPEN_BUG_BOUNTY_URL = "https://www.openbugbounty.org/api/1/search/"


def _env_float(name, default):
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, value, default)
        return default


def _env_list(name, default):
    value = os.environ.get(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Timeouts, endpoints and file locations used by the default probes."""

    http_timeout: float = 10.0
    tls_timeout: float = 3.0
    dns_timeout: float = 5.0
    incident_timeout: float = 10.0
    dns_servers: list = field(default_factory=lambda: ["1.1.1.1", "8.8.8.8"])
    incident_feed_url: str = OPEN_BUG_BOUNTY_URL
    catalog_path: str = DEFAULT_CATALOG_PATH
    user_agent: str = "Snift/1.0"

    @classmethod
    def from_env(cls):
        defaults = cls()
        return cls(
            http_timeout=_env_float("SNIFT_HTTP_TIMEOUT", defaults.http_timeout),
            tls_timeout=_env_float("SNIFT_TLS_TIMEOUT", defaults.tls_timeout),
            dns_timeout=_env_float("SNIFT_DNS_TIMEOUT", defaults.dns_timeout),
            incident_timeout=_env_float("SNIFT_INCIDENT_TIMEOUT", defaults.incident_timeout),
            dns_servers=_env_list("SNIFT_DNS_SERVERS", defaults.dns_servers),
            incident_feed_url=os.environ.get("SNIFT_INCIDENT_FEED_URL", defaults.incident_feed_url),
            catalog_path=os.environ.get("SNIFT_SERVER_CATALOG", defaults.catalog_path),
            user_agent=os.environ.get("SNIFT_USER_AGENT", defaults.user_agent),
        )
