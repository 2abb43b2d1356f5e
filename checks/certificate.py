# checks/certificate.py

"""
TLS certificate summary.

Dials the target with a TLS client and extracts the leaf certificate's
issuer, subject, subject alternative names and validity window. A failed
dial or handshake is itself a finding: it is recorded in ``error`` and never
raised to the caller.
"""

import logging
import ssl
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger("snift.certificate")

TIMEOUT_SECONDS = 3

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
}
DEFAULT_PORT = 443


@dataclass
class CertificateSummary:
    domain: str
    ip: str = None
    issuer_common_name: str = None
    subject_common_name: str = None
    subject_alt_names: set = field(default_factory=set)
    not_before: datetime = None
    not_after: datetime = None
    error: str = None

    def to_dict(self):
        return {
            "domain_name": self.domain,
            "ip_address": self.ip,
            "issuer": self.issuer_common_name,
            "common_name": self.subject_common_name,
            "sans": sorted(self.subject_alt_names),
            "not_before": self.not_before.isoformat() if self.not_before else None,
            "not_after": self.not_after.isoformat() if self.not_after else None,
            "error": self.error,
        }

    def __str__(self):
        if self.error:
            return f"Certificate for {self.domain}: {self.error}"
        return (
            f"Certificate for {self.domain} ({self.ip})\n"
            f"Issuer: {self.issuer_common_name}\n"
            f"Common Name: {self.subject_common_name}\n"
            f"SANs: {', '.join(sorted(self.subject_alt_names))}\n"
            f"Valid: {self.not_before} -> {self.not_after}"
        )


def default_port(scheme):
    return DEFAULT_PORTS.get((scheme or "").lower(), DEFAULT_PORT)


def split_host_port(authority, scheme=None):
    """Split ``host[:port]`` into ``(host, port)``.

    Bracketed IPv6 literals are supported. Without an explicit port the
    scheme's standard port is used.
    """
    authority = authority.rsplit("@", 1)[-1]
    if authority.startswith("["):
        host, _, rest = authority[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
    elif authority.count(":") == 1:
        host, _, port = authority.partition(":")
    else:
        host, port = authority, ""

    if not port:
        return host, default_port(scheme)
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"invalid port {port!r} in {authority!r}")
    return host, int(port)


def _name_field(name, key="commonName"):
    """Pull one attribute out of the nested tuples returned by getpeercert()."""
    for rdn in name or ():
        for attr, value in rdn:
            if attr == key:
                return value
    return None


def _cert_time(value):
    if not value:
        return None
    return datetime.fromtimestamp(ssl.cert_time_to_seconds(value), tz=timezone.utc)


def summarize_certificate(peer_cert, domain, ip=None):
    """Build a CertificateSummary from a decoded ``getpeercert()`` dict."""
    sans = {value for kind, value in peer_cert.get("subjectAltName", ()) if kind == "DNS"}
    return CertificateSummary(
        domain=domain,
        ip=ip,
        issuer_common_name=_name_field(peer_cert.get("issuer")),
        subject_common_name=_name_field(peer_cert.get("subject")),
        subject_alt_names=sans,
        not_before=_cert_time(peer_cert.get("notBefore")),
        not_after=_cert_time(peer_cert.get("notAfter")),
    )


def get_certificate(dialer, host, port, timeout=TIMEOUT_SECONDS):
    """Dial ``host:port`` and summarize the leaf certificate.

    Args:
        dialer: a TLSDialer returning ``(peer_cert, ip)``.
    """
    try:
        logger.debug("Dialing %s:%s for certificate", host, port)
        peer_cert, ip = dialer.dial(host, port, timeout)
    except (OSError, ssl.SSLError) as e:
        logger.warning("TLS dial to %s:%s failed: %s", host, port, e)
        return CertificateSummary(domain=host, error=str(e) or e.__class__.__name__)

    if not peer_cert:
        return CertificateSummary(domain=host, error="Peer presented no certificate")

    try:
        return summarize_certificate(peer_cert, host, ip)
    except (ValueError, TypeError) as e:
        logger.warning("Could not decode certificate for %s: %s", host, e)
        return CertificateSummary(domain=host, error=f"Malformed certificate: {e}")
