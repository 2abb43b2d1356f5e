# checks/protocol.py

from .results import CheckResult, ScoreContribution

PROTOCOL_CHECK = "protocol"

HTTPS_MESSAGE = "From the protocol level, Website is secure."
HTTP_MESSAGE = (
    "Website is unencrypted and hence subjective to Man-in-the-Middle "
    "attacks(MITM) and Eavesdropping Attacks."
)
UNKNOWN_PROTOCOL_MESSAGE = "Protocol Not Found"


def score_protocol(scheme):
    """Score the URL scheme: https 5/5, http 0/5, anything else 0/0."""
    scheme = (scheme or "").strip().lower()
    if scheme == "https":
        return CheckResult(PROTOCOL_CHECK, ScoreContribution(5, 5), True, HTTPS_MESSAGE)
    if scheme == "http":
        return CheckResult(PROTOCOL_CHECK, ScoreContribution(0, 5), False, HTTP_MESSAGE)
    # An unknown scheme neither raises nor lowers the achievable ceiling
    return CheckResult(PROTOCOL_CHECK, ScoreContribution(0, 0), False, UNKNOWN_PROTOCOL_MESSAGE)
