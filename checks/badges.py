# checks/badges.py

"""
Badge catalog.

Each passing check maps to exactly one badge. Failing or inapplicable checks
produce no badge.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Badge:
    code: str
    title: str
    description: str

    def to_dict(self):
        return {"code": self.code, "title": self.title, "description": self.description}


# check code -> badge, in display order
BADGE_CATALOG = {
    "protocol": Badge(
        "HTTP_SECURE",
        "Encrypted HTTPS Connection",
        "This site is encrypted and is less prone to Man-in-the-Middle attacks(MITM) and Eavesdropping Attacks",
    ),
    "xss_protection": Badge(
        "XSS_PROTECT",
        "Prevention from reflected Cross-Site Scripting (XSS) Attacks",
        "This site is less prone to from reflected cross-site scripting (XSS) attacks",
    ),
    "x_frame_options": Badge(
        "CLICKJACKING_PROTECT",
        "Protection from Cross-Site Click Jacking Attacks",
        "The content from this site cannot be embedded into other sites and is protected from cross-site Clickjacking",
    ),
    "strict_transport_security": Badge(
        "HTTPS_ONLY",
        "Enforces HTTPS-Only Site Access",
        "This site can only be accessed via HTTPS",
    ),
    "content_security_policy": Badge(
        "CSP_ENABLED",
        "Protection against Cross Site Scripting (XSS), Data Injection and Packet Sniffing attacks",
        "This site has is relatively secure against Cross Site Scripting (XSS), Data Injection and Packet Sniffing attacks",
    ),
    "public_key_pins": Badge(
        "PUBLIC_KEY_PINNING_ENABLED",
        "Prevention against Man-in-the-Middle attacks(MITM) using forged certificates",
        "This site has a decreased risk of Man-in-the-Middle attacks(MITM) with forged certificates",
    ),
    "referrer_policy": Badge(
        "ENSURE_PRIVACY",
        "Enforces a Referrer Policy to avoid leaking sensitive user information from being shared.",
        "This site has a Referrer Policy that may help protect user privacy",
    ),
    "x_content_type_options": Badge(
        "NO_SNIFF",
        "Prevention from media-type (MIME) sniffing",
        "This site prevents the browser from media type (MIME) sniffing",
    ),
    "http_version": Badge(
        "LATEST_HTTP",
        "Uses the latest version of the HTTP Protocol",
        "This site uses the latest HyperText Transfer Protocol(HTTP) supporting better performance and security standards",
    ),
    "tls_version": Badge(
        "LATEST_TLS",
        "Uses the latest version of the TLS Protocol",
        "This site uses the latest Transport Layer Security(TLS) supporting better performance and security standards",
    ),
    "spf": Badge(
        "EMAIL_SPOOFING_PROTECT",
        "Prevention from Email Spoofing by having a valid Sender Policy Framework Record",
        "This site has a valid Sender Policy Framework(SPF) record that reduces the risk of forged emails being sent on behalf of this domain",
    ),
    "dmarc": Badge(
        "DMARC_ENABLED",
        "Publishes a DMARC policy for its mail domain",
        "This site tells receiving mail servers how to handle messages that fail SPF or DKIM alignment",
    ),
    "incidents": Badge(
        "SERIOUS_SECURITY",
        "Fixes disclosed vulnerabilities promptly",
        "Every security incident disclosed for this site was fixed within 30 days of being reported",
    ),
}


def badge_for(check_code, passed):
    """Return the badge for a check outcome, or None when it did not pass."""
    if not passed:
        return None
    return BADGE_CATALOG.get(check_code)


def derive_badges(checks):
    """Return the badges earned by ``checks``, in catalog order.

    Args:
        checks: iterable of CheckResult (or ``(code, passed)`` pairs).
    """
    passed = set()
    for check in checks:
        code, ok = (check.code, check.passed) if hasattr(check, "code") else check
        if ok:
            passed.add(code)
    return [badge for code, badge in BADGE_CATALOG.items() if code in passed]
