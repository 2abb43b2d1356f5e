# checks/incidents.py

"""
Historical incident scoring.

Every disclosed incident is worth 10 points. Fixed incidents earn 10 points
when remediated within 720 hours (30 days) of the report and 5 points when
remediation took longer; unfixed incidents earn nothing. A domain with no
disclosed incidents contributes 0/0.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

from .errors import IncidentFeedError
from .results import CheckResult, ScoreContribution

logger = logging.getLogger("snift.incidents")

# 30 days -> 30 * 24 = 720 hours
MAX_INCIDENT_RESPONSE_TIME = timedelta(hours=720)
INCIDENT_POINTS = 10
SLOW_FIX_POINTS = 5

TRUE_VALUES = {"1", "true", "yes"}


@dataclass(frozen=True)
class IncidentRecord:
    reported_date: datetime = None
    fixed_date: datetime = None
    fixed: bool = False
    url: str = None
    type: str = None

    @property
    def response_time(self):
        if not self.fixed or self.reported_date is None or self.fixed_date is None:
            return None
        return self.fixed_date - self.reported_date

    def to_dict(self):
        return {
            "reported_date": self.reported_date.isoformat() if self.reported_date else None,
            "fixed_date": self.fixed_date.isoformat() if self.fixed_date else None,
            "fixed": self.fixed,
            "url": self.url,
            "type": self.type,
        }


def parse_feed_date(value):
    """Parse an RFC 1123 date (``Mon, 02 Jan 2006 15:04:05 -0700``) into UTC."""
    if not value or not value.strip():
        return None
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError):
        logger.debug("Unparseable incident date %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_incident_feed(xml_text):
    """Parse the Open Bug Bounty search XML into IncidentRecords, in feed order."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise IncidentFeedError(f"Malformed incident feed: {e}") from e

    incidents = []
    for item in root.iter("item"):
        incidents.append(IncidentRecord(
            reported_date=parse_feed_date(item.findtext("reporteddate")),
            fixed_date=parse_feed_date(item.findtext("fixeddate")),
            fixed=(item.findtext("fixed") or "").strip().lower() in TRUE_VALUES,
            url=(item.findtext("url") or "").strip() or None,
            type=(item.findtext("type") or "").strip() or None,
        ))
    return incidents


def get_incident_points(incident):
    if not incident.fixed:
        return 0
    response_time = incident.response_time
    # Unmeasurable remediation time counts as a fast fix
    if response_time is not None and response_time > MAX_INCIDENT_RESPONSE_TIME:
        return SLOW_FIX_POINTS
    return INCIDENT_POINTS


def score_incidents(incidents):
    incidents = list(incidents)
    if not incidents:
        return CheckResult(
            "incidents", ScoreContribution(0, 0), False,
            "No security incidents have been disclosed.",
        )

    achieved = sum(get_incident_points(i) for i in incidents)
    maximum = INCIDENT_POINTS * len(incidents)
    fixed = sum(1 for i in incidents if i.fixed)
    message = f"{fixed} of {len(incidents)} disclosed incident(s) fixed."
    return CheckResult(
        "incidents", ScoreContribution(achieved, maximum), achieved == maximum, message
    )
