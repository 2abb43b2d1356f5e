# checks/errors.py

"""Exceptions raised by the score engine and its probes."""


class SniftError(Exception):
    """Base class for every error raised by Snift."""


class InvalidURL(SniftError):
    """The target could not be parsed into a scheme and host."""


class UnresolvableHost(SniftError):
    """The primary HEAD probe failed because the host name does not resolve."""


class ProbeFailure(SniftError):
    """The primary HEAD probe failed for any other reason."""


class DNSLookupError(SniftError):
    """A TXT lookup failed for a reason other than a missing record."""


class IncidentFeedError(SniftError):
    """The incident-disclosure feed could not be fetched or parsed."""


class CatalogError(SniftError):
    """The server-signature catalog is missing or malformed."""


class ScoreInvariantError(SniftError):
    """The aggregated maximum score is zero, so no score can be normalized."""
