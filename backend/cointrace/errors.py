"""Exception hierarchy for CoinTrace collaborators"""


class CoinTraceError(Exception):
    pass


class UpstreamError(CoinTraceError):
    """An explorer or price API failed or returned an unusable payload."""


class FetchCancelledError(CoinTraceError):
    """A paginated fetch was superseded before it completed."""
