# checks/probes.py

"""
External collaborators of the score engine.

Each probe is an abstract interface with one default network implementation.
The engine only talks to the interfaces, so tests inject fakes instead of
reaching the network.
"""

import abc
import logging
import socket
import ssl
from dataclasses import dataclass

import dns.exception
import dns.resolver
import httpx
import requests

from .errors import DNSLookupError, IncidentFeedError, ProbeFailure, UnresolvableHost
from .headers import HeaderSet
from .incidents import parse_incident_feed
from .settings import OPEN_BUG_BOUNTY_URL

logger = logging.getLogger("snift.probes")

# Fragments of getaddrinfo() failures across platforms and HTTP stacks
RESOLUTION_ERROR_MARKERS = (
    "name or service not known",
    "nodename nor servname provided",
    "getaddrinfo failed",
    "no address associated with hostname",
    "temporary failure in name resolution",
    "no such host",
)


@dataclass(frozen=True)
class ProbeResponse:
    """What the score engine needs from one HEAD request."""

    headers: HeaderSet
    http_version: str = None
    # None when the request did not run over TLS
    tls_version: str = None
    status_code: int = None


class HttpProber(abc.ABC):
    @abc.abstractmethod
    def head(self, url):
        """Issue a HEAD request and return a ProbeResponse.

        Raises:
            UnresolvableHost: the host name does not resolve.
            ProbeFailure: any other transport failure.
        """


class TLSDialer(abc.ABC):
    @abc.abstractmethod
    def dial(self, host, port, timeout):
        """Complete a TLS handshake and return ``(peer_cert, remote_ip)``.

        ``peer_cert`` uses the dict layout of ``ssl.SSLSocket.getpeercert()``.
        Raises OSError (including ssl.SSLError) on failure.
        """


class DnsResolver(abc.ABC):
    @abc.abstractmethod
    def txt_records(self, name):
        """Return the TXT record strings for ``name``; empty when none exist.

        Raises:
            DNSLookupError: the lookup could not be completed.
        """


class IncidentFeed(abc.ABC):
    @abc.abstractmethod
    def incidents(self, domain):
        """Return the disclosed IncidentRecords for ``domain``.

        Raises:
            IncidentFeedError: the feed could not be fetched or parsed.
        """


def is_name_resolution_error(exc):
    """Walk the exception chain looking for a getaddrinfo() failure."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, socket.gaierror):
            return True
        text = str(exc).lower()
        if any(marker in text for marker in RESOLUTION_ERROR_MARKERS):
            return True
        exc = exc.__cause__ or exc.__context__
    return False


class HttpxProber(HttpProber):
    """HEAD prober that negotiates HTTP/2 and reports the TLS version."""

    def __init__(self, timeout=10.0, user_agent="Snift/1.0"):
        self.timeout = timeout
        self.user_agent = user_agent

    def head(self, url):
        try:
            logger.debug("HEAD %s", url)
            with httpx.Client(
                http2=True,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            ) as client:
                response = client.head(url)
                tls_version = self._tls_version(response)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            if is_name_resolution_error(e):
                logger.warning("Host of %s does not resolve: %s", url, e)
                raise UnresolvableHost(f"Cannot resolve host for {url}") from e
            logger.warning("HEAD %s failed: %s", url, e)
            raise ProbeFailure(f"HEAD {url} failed: {e}") from e

        logger.debug("HEAD %s -> %s %s (%s)", url, response.http_version,
                     response.status_code, tls_version)
        return ProbeResponse(
            headers=HeaderSet(response.headers.multi_items()),
            http_version=response.http_version,
            tls_version=tls_version,
            status_code=response.status_code,
        )

    @staticmethod
    def _tls_version(response):
        if response.url.scheme != "https":
            return None
        stream = response.extensions.get("network_stream")
        ssl_object = stream.get_extra_info("ssl_object") if stream is not None else None
        if ssl_object is None:
            return ""
        return ssl_object.version() or ""


class SocketTLSDialer(TLSDialer):
    """Verifying TLS client built on the standard ``ssl`` module."""

    def dial(self, host, port, timeout):
        context = ssl.create_default_context()
        with socket.create_connection((host, port), timeout=timeout) as sock:
            with context.wrap_socket(sock, server_hostname=host) as tls_sock:
                peer_cert = tls_sock.getpeercert()
                ip = tls_sock.getpeername()[0]
        return peer_cert, ip


class DnsPythonResolver(DnsResolver):
    def __init__(self, nameservers=None, timeout=5.0):
        self.nameservers = list(nameservers or [])
        self.timeout = timeout

    def txt_records(self, name):
        resolver = dns.resolver.Resolver()
        if self.nameservers:
            resolver.nameservers = self.nameservers
        resolver.lifetime = self.timeout
        try:
            logger.debug("Querying TXT for %s", name)
            answers = resolver.resolve(name, "TXT")
        except dns.resolver.NXDOMAIN:
            logger.debug("No TXT records (NXDOMAIN) for %s", name)
            return []
        except dns.resolver.NoAnswer:
            logger.debug("No TXT answer for %s", name)
            return []
        except dns.resolver.Timeout as e:
            logger.warning("TXT query timeout for %s", name)
            raise DNSLookupError(f"TXT query for {name} timed out") from e
        except dns.resolver.NoNameservers as e:
            logger.warning("No nameservers available for TXT query on %s", name)
            raise DNSLookupError(f"No nameservers answered for {name}") from e
        except dns.exception.DNSException as e:
            logger.error("Unexpected error querying TXT for %s: %s", name, e)
            raise DNSLookupError(f"TXT query for {name} failed: {e}") from e

        records = []
        for rdata in answers:
            # Long TXT records are split into several character-strings
            records.append(b"".join(rdata.strings).decode("utf-8", errors="replace"))
        logger.debug("Found %d TXT records for %s", len(records), name)
        return records


class OpenBugBountyFeed(IncidentFeed):
    def __init__(self, url=OPEN_BUG_BOUNTY_URL, timeout=10.0, user_agent="Snift/1.0"):
        self.url = url
        self.timeout = timeout
        self.user_agent = user_agent

    def incidents(self, domain):
        try:
            logger.debug("Querying incident feed for %s", domain)
            resp = requests.get(
                self.url,
                params={"domain": domain},
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            resp.raise_for_status()
        except requests.exceptions.Timeout as e:
            logger.warning("Incident feed timeout for %s", domain)
            raise IncidentFeedError(f"Incident feed timed out for {domain}") from e
        except requests.exceptions.RequestException as e:
            logger.warning("Incident feed request failed for %s: %s", domain, e)
            raise IncidentFeedError(f"Incident feed request failed: {e}") from e

        incidents = parse_incident_feed(resp.content)
        logger.debug("Incident feed returned %d incidents for %s", len(incidents), domain)
        return incidents
