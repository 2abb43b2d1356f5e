# checks/scoring.py

"""
Score aggregation engine.

Runs the HEAD, TLS, DNS and incident-feed probes concurrently, scores each
one independently and sums the ``(achieved, maximum)`` pairs into a single
score normalized to ``[0, 1]``:

    normalized = ceil(achieved_total * 100 / max_total) / 100

Only the HEAD probe is load-bearing. If it fails the whole computation fails;
the other probes degrade to an error message or a 0/0 contribution.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from .badges import derive_badges
from .certificate import get_certificate, split_host_port
from .errors import DNSLookupError, IncidentFeedError, InvalidURL, ScoreInvariantError
from .headers import HeaderScore
from .incidents import score_incidents
from .mail import apex_domain, get_mail_auth_facts, score_mail_auth
from .probes import DnsPythonResolver, HttpxProber, OpenBugBountyFeed, SocketTLSDialer
from .protocol import score_protocol
from .results import CheckResult, ScoreContribution
from .servers import ServerCatalog
from .settings import Settings

logger = logging.getLogger("snift.scoring")

SUPPORTED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class Target:
    url: str
    scheme: str
    host: str
    port: int


@dataclass(frozen=True)
class OverallScore:
    normalized: float
    achieved_total: int
    max_total: int
    messages: tuple = ()

    def to_dict(self):
        return {
            "score": self.normalized,
            "achieved": self.achieved_total,
            "maximum": self.max_total,
            "messages": list(self.messages),
        }


@dataclass
class ScoreReport:
    url: str
    domain: str
    overall: OverallScore
    checks: list = field(default_factory=list)
    badges: list = field(default_factory=list)
    certificate: object = None
    server: object = None
    incidents: list = field(default_factory=list)
    xss_report_url: str = None
    http_version: str = None
    tls_version: str = None

    def to_dict(self):
        return {
            "URL": self.url,
            "DOMAIN": self.domain,
            "SCORE": self.overall.normalized,
            "ACHIEVED_SCORE": self.overall.achieved_total,
            "MAXIMUM_SCORE": self.overall.max_total,
            "MESSAGES": list(self.overall.messages),
            "BADGES": [badge.to_dict() for badge in self.badges],
            "SCORE_BREAKDOWN": [check.to_dict() for check in self.checks],
            "CERTIFICATE": self.certificate.to_dict() if self.certificate else None,
            "SERVER": self.server.to_dict() if self.server else None,
            "INCIDENTS": [incident.to_dict() for incident in self.incidents],
            "XSS_REPORT_URL": self.xss_report_url,
            "HTTP_VERSION": self.http_version,
            "TLS_VERSION": self.tls_version,
        }


def parse_target(url):
    """Validate ``url`` and split it into scheme, host and port.

    Raises:
        InvalidURL: no http(s) scheme, no host, or a malformed port.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURL("URL is empty")
    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidURL(f"Cannot parse URL {url!r}: {e}") from e

    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise InvalidURL(f"Unsupported or missing scheme in {url!r}")
    if not parts.netloc:
        raise InvalidURL(f"Missing host in {url!r}")
    try:
        host, port = split_host_port(parts.netloc, scheme)
    except ValueError as e:
        raise InvalidURL(str(e)) from e
    if not host:
        raise InvalidURL(f"Missing host in {url!r}")
    return Target(url=url, scheme=scheme, host=host.lower(), port=port)


def normalize_score(achieved, maximum):
    """Round ``achieved / maximum`` up to two decimals using exact integer math."""
    if maximum <= 0:
        raise ScoreInvariantError("maximum achievable score is zero")
    return -(-achieved * 100 // maximum) / 100


def aggregate(checks):
    """Sum CheckResults into an OverallScore."""
    total = ScoreContribution()
    messages = []
    for check in checks:
        total = total + check.contribution
        if check.message:
            messages.append(check.message)
    return OverallScore(
        normalized=normalize_score(total.achieved, total.maximum),
        achieved_total=total.achieved,
        max_total=total.maximum,
        messages=tuple(messages),
    )


class ScoreEngine:
    """Computes the security score of one URL per call; holds no per-request state.

    Args:
        prober: HttpProber used for the HEAD request.
        dialer: TLSDialer used for the certificate summary.
        resolver: DnsResolver used for SPF and DMARC lookups.
        feed: IncidentFeed used for disclosed incidents.
        catalog: ServerCatalog; loaded from ``settings.catalog_path`` when omitted.
        settings: Settings; read from the environment when omitted.
    """

    def __init__(self, prober=None, dialer=None, resolver=None, feed=None,
                 catalog=None, settings=None):
        self.settings = settings or Settings.from_env()
        self.prober = prober or HttpxProber(self.settings.http_timeout, self.settings.user_agent)
        self.dialer = dialer or SocketTLSDialer()
        self.resolver = resolver or DnsPythonResolver(self.settings.dns_servers, self.settings.dns_timeout)
        self.feed = feed or OpenBugBountyFeed(
            self.settings.incident_feed_url,
            self.settings.incident_timeout,
            self.settings.user_agent,
        )
        self.catalog = catalog if catalog is not None else ServerCatalog.load(self.settings.catalog_path)

    async def compute_score(self, url):
        """Score ``url``.

        Raises:
            InvalidURL: before any probe is issued.
            UnresolvableHost: the HEAD probe could not resolve the host.
            ProbeFailure: the HEAD probe failed for another reason.
        """
        target = parse_target(url)
        loop = asyncio.get_running_loop()

        # Cancelling this gather leaves running executor threads to their own timeouts
        results = await asyncio.gather(
            loop.run_in_executor(None, self.prober.head, target.url),
            loop.run_in_executor(None, self._certificate, target),
            loop.run_in_executor(None, self._mail_checks, target.host),
            loop.run_in_executor(None, self._incident_checks, target.host),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        probe, certificate, mail_checks, (incident_check, incidents) = results

        header_score = HeaderScore(probe.headers, probe.http_version, probe.tls_version)
        checks = [score_protocol(target.scheme), *header_score.checks, *mail_checks, incident_check]
        overall = aggregate(checks)
        logger.info("Final score for %s is %d out of %d (%.2f)", target.url,
                    overall.achieved_total, overall.max_total, overall.normalized)

        return ScoreReport(
            url=target.url,
            domain=target.host,
            overall=overall,
            checks=checks,
            badges=derive_badges(checks),
            certificate=certificate,
            server=self.catalog.lookup(header_score.server),
            incidents=incidents,
            xss_report_url=header_score.xss_report_url,
            http_version=header_score.http_version or None,
            tls_version=probe.tls_version,
        )

    def compute_score_sync(self, url):
        return asyncio.run(self.compute_score(url))

    def _certificate(self, target):
        return get_certificate(self.dialer, target.host, target.port, self.settings.tls_timeout)

    def _mail_checks(self, host):
        try:
            facts = get_mail_auth_facts(self.resolver, host)
        except DNSLookupError as e:
            logger.warning("Mail configuration lookup failed for %s: %s", host, e)
            return [CheckResult(
                "mail_auth", ScoreContribution(0, 0), False,
                f"Mail server configuration could not be determined: {e}",
            )]
        return score_mail_auth(facts)

    def _incident_checks(self, host):
        domain = apex_domain(host)
        try:
            incidents = self.feed.incidents(domain)
        except IncidentFeedError as e:
            logger.warning("Incident history unavailable for %s: %s", domain, e)
            return CheckResult(
                "incidents", ScoreContribution(0, 0), False,
                f"Incident history could not be retrieved: {e}",
            ), []
        return score_incidents(incidents), incidents
