class RiskHealthError(Exception):
    """Base class for every error raised by riskhealth."""


class RiskSourceError(RiskHealthError):
    """The risk register could not be read or holds an invalid record."""


class BenchmarkConfigError(RiskHealthError):
    """A category benchmark file is missing, malformed or incomplete."""
