"""Custom exception hierarchy for the Market Edge application.

All domain-specific exceptions inherit from DataFetchError, which carries
contextual information about what went wrong while talking to a vendor or
the shared cache. None of these escape the aggregator: they exist so that
adapters can signal "try the next provider" with a typed reason.
"""


class DataFetchError(Exception):
    """Base exception for all data-fetching failures.

    Attributes:
        symbol: The instrument symbol involved in the failure.
        source: The vendor or backend that failed (e.g., "Finnhub", "redis").
        http_status: The HTTP status code, if the failure was HTTP-related.
    """

    def __init__(
        self,
        message: str,
        *,
        symbol: str,
        source: str,
        http_status: int | None = None,
    ) -> None:
        self.symbol = symbol
        self.source = source
        self.http_status = http_status
        super().__init__(message)


class TickerNotFoundError(DataFetchError):
    """Raised when a vendor has no data for the requested symbol."""


class DataSourceUnavailableError(DataFetchError):
    """Raised when a vendor is unreachable or returning errors."""


class ProviderTimeoutError(DataFetchError):
    """Raised when a vendor request exceeds its HTTP timeout."""
