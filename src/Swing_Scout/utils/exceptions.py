"""Custom exception hierarchy for the Swing Scout application.

Data-retrieval failures inherit from DataFetchError, which carries
contextual information about what went wrong. ConfigurationError is kept
separate because it is fatal at startup rather than per-symbol.
"""


class DataFetchError(Exception):
    """Base exception for all data-fetching failures.

    Attributes:
        ticker: The ticker symbol involved in the failure.
        source: The data source that failed (e.g., "polygon").
        http_status: The HTTP status code, if the failure was HTTP-related.
    """

    def __init__(
        self,
        message: str,
        *,
        ticker: str,
        source: str,
        http_status: int | None = None,
    ) -> None:
        self.ticker = ticker
        self.source = source
        self.http_status = http_status
        super().__init__(message)


class TickerNotFoundError(DataFetchError):
    """Raised when a ticker symbol does not exist in the data source."""


class DataSourceUnavailableError(DataFetchError):
    """Raised when a data source is unreachable or returning errors."""


class RateLimitExceededError(DataFetchError):
    """Raised when the data source rate limit has been hit.

    ``retry_after`` holds the server-provided delay in seconds, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        ticker: str,
        source: str,
        http_status: int | None = None,
        retry_after: float | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(message, ticker=ticker, source=source, http_status=http_status)


class ConfigurationError(Exception):
    """Raised when a required setting (e.g. a provider credential) is missing."""

    def __init__(self, message: str, *, setting: str) -> None:
        self.setting = setting
        super().__init__(message)
