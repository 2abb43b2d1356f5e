# checks/headers.py

"""
HTTP response header scoring.

Seven security headers are scored out of 5 points each, followed by the
negotiated HTTP version (5 points) and, when the probe ran over TLS, the
negotiated TLS version (5 points).
"""

import logging
from collections.abc import Mapping

from requests.structures import CaseInsensitiveDict

from .results import CheckResult, ScoreContribution

logger = logging.getLogger("snift.headers")

XSS_HEADER = "X-XSS-Protection"
XFRAME_HEADER = "X-Frame-Options"
HSTS_HEADER = "Strict-Transport-Security"
CSP_HEADER = "Content-Security-Policy"
PKP_HEADER = "Public-Key-Pins"
RP_HEADER = "Referrer-Policy"
XCONTENT_TYPE_HEADER = "X-Content-Type-Options"
SERVER_HEADER = "Server"

CHECK_POINTS = 5

REFERRER_POLICY_STRICT = "no-referrer"
REFERRER_POLICY_GOOD = {
    "no-referrer-when-downgrade",
    "origin",
    "origin-when-cross-origin",
    "same-origin",
    "strict-origin",
    "strict-origin-when-cross-origin",
}
REFERRER_POLICY_UNSAFE = "unsafe-url"

HTTP_VERSION_SCORES = {
    "HTTP/2.0": 5,
    "HTTP/1.1": 2,
}

TLS_VERSION_SCORES = {
    "TLS1.2": 5,
    "TLS1.1": 3,
    "TLS1.0": 1,
    # ssl.SSLSocket.version() reports TLS 1.0 as "TLSv1"
    "TLS1": 1,
}


class HeaderSet(Mapping):
    """Read-only, case-insensitive view of the response headers.

    Repeated headers are folded into one value joined with ``","``.
    """

    def __init__(self, headers=()):
        store = CaseInsensitiveDict()
        items = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in items:
            value = str(value)
            if name in store:
                store[name] = f"{store[name]},{value}"
            else:
                store[name] = value
        self._store = store

    def __getitem__(self, name):
        return self._store[name]

    def __iter__(self):
        return iter(self._store)

    def __len__(self):
        return len(self._store)

    def __repr__(self):
        return f"HeaderSet({dict(self._store.items())!r})"


def get_xss_score(value):
    """Return ``(score, report_url)`` for an X-XSS-Protection value."""
    value = value.strip()
    score = 0
    if value == "0":
        score = 0
    elif value.startswith("1"):
        score = 5

    report_url = None
    parts = value.split("report=")
    if len(parts) == 2:
        report_url = parts[1].strip().rstrip(";").strip() or None
    return score, report_url


def get_xframe_score(value):
    value = value.strip().lower()
    if value in ("deny", "sameorigin"):
        return 5
    if value.startswith("allow-from"):
        return 4
    return 1


def get_hsts_score(value):
    value = value.strip().lower()
    if not value.startswith("max-age"):
        return 0
    if "includesubdomains" in value or "preload" in value:
        return 5
    return 4


def get_referrer_policy_score(value):
    value = value.strip().lower()
    if value == REFERRER_POLICY_STRICT:
        return 5
    if value in REFERRER_POLICY_GOOD:
        return 4
    if value == REFERRER_POLICY_UNSAFE:
        return 2
    return 0


def get_xcontent_type_score(value):
    return 5 if value.strip().lower() == "nosniff" else 0


def normalize_http_version(version):
    version = (version or "").strip().upper()
    if version == "HTTP/2":
        return "HTTP/2.0"
    return version


def normalize_tls_version(version):
    """Turn ``TLSv1.2``, ``TLS 1.2`` or ``tls1.2`` into ``TLS1.2``."""
    version = (version or "").strip().upper().replace(" ", "")
    if version.startswith("TLSV"):
        version = "TLS" + version[4:]
    return version


def get_http_version_score(version):
    return HTTP_VERSION_SCORES.get(normalize_http_version(version), 0)


def get_tls_version_score(version):
    return TLS_VERSION_SCORES.get(normalize_tls_version(version), 0)


def _check(code, score, passed, message):
    return CheckResult(code, ScoreContribution(score, CHECK_POINTS), passed, message)


class HeaderScore:
    """Scores one HEAD probe response.

    Args:
        headers: HeaderSet (or any mapping) of response headers.
        http_version: protocol string reported by the HTTP client.
        tls_version: negotiated TLS version, ``None`` when the probe did not
            run over TLS.
    """

    def __init__(self, headers, http_version=None, tls_version=None):
        if not isinstance(headers, HeaderSet):
            headers = HeaderSet(headers)
        self.headers = headers
        self.http_version = normalize_http_version(http_version)
        self.tls_version = tls_version
        self.xss_report_url = None
        self.server = headers.get(SERVER_HEADER)
        self.checks = self._score()
        logger.debug("Header score %d/%d (%s, %s)", self.contribution.achieved,
                     self.contribution.maximum, self.http_version, tls_version)

    def _score(self):
        return [
            self._score_xss(),
            self._score_xframe(),
            self._score_hsts(),
            self._score_csp(),
            self._score_pkp(),
            self._score_referrer_policy(),
            self._score_xcontent_type(),
            self._score_http_version(),
            self._score_tls_version(),
        ]

    def _score_xss(self):
        value = self.headers.get(XSS_HEADER)
        if value is None:
            return _check("xss_protection", 1, False, "X-XSS-Protection header is not set.")
        score, self.xss_report_url = get_xss_score(value)
        if score == 5:
            return _check("xss_protection", 5, True, "Reflected XSS filtering is enabled.")
        return _check("xss_protection", score, False, "Reflected XSS filtering is disabled.")

    def _score_xframe(self):
        value = self.headers.get(XFRAME_HEADER)
        if value is None:
            return _check("x_frame_options", 1, False, "X-Frame-Options header is not set; the site can be framed.")
        score = get_xframe_score(value)
        if score == 5:
            return _check("x_frame_options", 5, True, f"Framing is restricted ({value.strip()}).")
        if score == 4:
            return _check("x_frame_options", 4, False, "Framing is allowed from a specific origin only.")
        return _check("x_frame_options", score, False, f"Unrecognised X-Frame-Options value: {value.strip()}")

    def _score_hsts(self):
        value = self.headers.get(HSTS_HEADER)
        if value is None:
            return _check("strict_transport_security", 2, False, "Strict-Transport-Security header is not set.")
        score = get_hsts_score(value)
        if score == 5:
            return _check("strict_transport_security", 5, True, "HSTS is enforced including subdomains or preload.")
        if score == 4:
            return _check("strict_transport_security", 4, True, "HSTS is enforced for this host only.")
        return _check("strict_transport_security", 0, False, "Strict-Transport-Security header has no max-age.")

    def _score_csp(self):
        if CSP_HEADER in self.headers:
            return _check("content_security_policy", 5, True, "A Content-Security-Policy is published.")
        return _check("content_security_policy", 3, False, "No Content-Security-Policy is published.")

    def _score_pkp(self):
        if PKP_HEADER in self.headers:
            return _check("public_key_pins", 5, True, "Public key pinning is configured.")
        return _check("public_key_pins", 3, False, "Public key pinning is not configured.")

    def _score_referrer_policy(self):
        value = self.headers.get(RP_HEADER)
        if value is None:
            return _check("referrer_policy", 2, False, "Referrer-Policy header is not set.")
        score = get_referrer_policy_score(value)
        if score >= 4:
            return _check("referrer_policy", score, True, f"Referrer-Policy limits referrer leakage ({value.strip()}).")
        if score == 2:
            return _check("referrer_policy", 2, False, "Referrer-Policy unsafe-url leaks full URLs.")
        return _check("referrer_policy", 0, False, f"Unrecognised Referrer-Policy value: {value.strip()}")

    def _score_xcontent_type(self):
        value = self.headers.get(XCONTENT_TYPE_HEADER)
        if value is None:
            return _check("x_content_type_options", 0, False, "X-Content-Type-Options header is not set.")
        score = get_xcontent_type_score(value)
        if score == 5:
            return _check("x_content_type_options", 5, True, "MIME type sniffing is disabled.")
        return _check("x_content_type_options", 0, False, f"Unrecognised X-Content-Type-Options value: {value.strip()}")

    def _score_http_version(self):
        score = get_http_version_score(self.http_version)
        version = self.http_version or "unknown"
        return _check("http_version", score, score == 5, f"Served over {version}.")

    def _score_tls_version(self):
        if self.tls_version is None:
            return CheckResult("tls_version", ScoreContribution(0, 0), False, "Connection is not encrypted with TLS.")
        score = get_tls_version_score(self.tls_version)
        version = self.tls_version or "an unknown TLS version"
        return _check("tls_version", score, score == 5, f"Negotiated {version}.")

    @property
    def contribution(self):
        total = ScoreContribution()
        for check in self.checks:
            total = total + check.contribution
        return total

    def to_dict(self):
        return {
            "HEADER_CHECKS": [check.to_dict() for check in self.checks],
            "HEADER_SCORE": self.contribution.achieved,
            "HEADER_MAX_SCORE": self.contribution.maximum,
            "HTTP_VERSION": self.http_version or None,
            "TLS_VERSION": self.tls_version,
            "XSS_REPORT_URL": self.xss_report_url,
        }

    def __str__(self):
        lines = [f"Header Score: {self.contribution.achieved}/{self.contribution.maximum}"]
        for check in self.checks:
            lines.append(f"  {check.code}: {check.achieved}/{check.maximum} {check.message}")
        return "\n".join(lines)
