"""
Error Taxonomy

Every failure the aggregation layer can produce derives from CoinPeekError.

    CoinPeekError
    ├── FetchError            - a single outbound request failed
    │   ├── NetworkError      - connection-level failure
    │   ├── RequestTimeout    - no response within the timeout
    │   └── HttpError         - non-2xx status
    ├── InvalidDataError      - payload failed shape/value validation
    └── AggregationError      - no fresh and no cached data available

FetchError subclasses are caught by the provider chain and the price
aggregator and turned into fallbacks. Only InvalidDataError and
AggregationError reach the orchestrator, and only when the cache is empty.
"""

from typing import Optional


class CoinPeekError(Exception):
    """Base class for all aggregation-layer errors."""


class FetchError(CoinPeekError):
    """A single timed fetch failed."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NetworkError(FetchError):
    """Connection-level failure (DNS, refused, reset, ...)."""


class RequestTimeout(FetchError):
    """No response arrived within the configured timeout."""

    def __init__(self, timeout_ms: int, url: Optional[str] = None):
        super().__init__(f"Request timeout after {timeout_ms}ms", url)
        self.timeout_ms = timeout_ms


class HttpError(FetchError):
    """Provider answered with a non-2xx status."""

    def __init__(self, status: int, reason: str = "", url: Optional[str] = None):
        message = f"HTTP {status}: {reason}" if reason else f"HTTP {status}"
        super().__init__(message, url)
        self.status = status


class InvalidDataError(CoinPeekError):
    """Payload failed shape or value validation."""


class AggregationError(CoinPeekError):
    """Neither fresh nor cached data is available."""
