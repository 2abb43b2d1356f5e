# checks/mail.py

"""
Mail-authentication scoring (SPF and DMARC).

SPF: every apex TXT record ending in an ``all`` qualifier is scored out of 5
(``-all`` 5, ``~all`` 3, ``?all`` 2, ``+all`` 0). Records without a qualifier
do not count, so a domain without SPF has a maximum of 0 for this check.

DMARC: a single ``_dmarc.<domain>`` record starting with ``v=DMARC`` scores
5/5, anything else 0/5.
"""

import logging
from dataclasses import dataclass, field

from .results import CheckResult, ScoreContribution

logger = logging.getLogger("snift.mail")

SPF_QUALIFIER_SCORES = (
    ("-all", 5),
    ("~all", 3),
    ("?all", 2),
    ("+all", 0),
)
SPF_RECORD_POINTS = 5
DMARC_POINTS = 5
DMARC_PREFIX = "v=DMARC"


@dataclass
class MailAuthFacts:
    spf_records: list = field(default_factory=list)
    dmarc_record: str = None

    def to_dict(self):
        return {"SPF_RECORDS": list(self.spf_records), "DMARC": self.dmarc_record}


def apex_domain(host):
    """Strip a leading ``www.`` from the host name."""
    host = (host or "").strip().rstrip(".").lower()
    if host.startswith("www."):
        host = host[len("www."):]
    return host


def get_spf_record_score(record):
    """Return the points for one TXT record, or None when it has no ``all`` qualifier."""
    record = record.strip().lower()
    for qualifier, points in SPF_QUALIFIER_SCORES:
        if record.endswith(qualifier):
            return points
    return None


def score_spf(records):
    achieved = 0
    maximum = 0
    strict = False
    for record in records:
        points = get_spf_record_score(record)
        if points is None:
            continue
        achieved += points
        maximum += SPF_RECORD_POINTS
        strict = strict or points >= 3

    if maximum == 0:
        message = "No SPF record with an `all` mechanism found."
    elif strict:
        message = f"SPF rejects or soft-fails unauthorised senders ({maximum // SPF_RECORD_POINTS} record(s))."
    else:
        message = "SPF does not fail unauthorised senders (?all or +all)."
    return CheckResult("spf", ScoreContribution(achieved, maximum), strict, message)


def select_dmarc_record(records):
    """Return the single ``v=DMARC`` record, or None when there are none or several."""
    candidates = [r.strip() for r in records if r.strip().startswith(DMARC_PREFIX)]
    if len(candidates) > 1:
        logger.warning("Found %d DMARC records, treating policy as malformed", len(candidates))
        return None
    return candidates[0] if candidates else None


def score_dmarc(record):
    if record and record.strip().startswith(DMARC_PREFIX):
        return CheckResult(
            "dmarc", ScoreContribution(DMARC_POINTS, DMARC_POINTS), True,
            "A DMARC policy is published.",
        )
    return CheckResult(
        "dmarc", ScoreContribution(0, DMARC_POINTS), False,
        "No valid DMARC record found.",
    )


def score_mail_auth(facts):
    return [score_spf(facts.spf_records), score_dmarc(facts.dmarc_record)]


def get_mail_auth_facts(resolver, host):
    """Look up SPF and DMARC TXT records for the apex of ``host``.

    Raises:
        DNSLookupError: when a lookup times out or no nameserver answers.
    """
    domain = apex_domain(host)
    logger.debug("Querying TXT records for %s and _dmarc.%s", domain, domain)
    spf_records = resolver.txt_records(domain)
    dmarc_record = select_dmarc_record(resolver.txt_records(f"_dmarc.{domain}"))
    return MailAuthFacts(spf_records=spf_records, dmarc_record=dmarc_record)
