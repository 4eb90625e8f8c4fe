from .breaker import CircuitBreakerRegistry
from .client import UsitcClient
from .errors import (
    CircuitOpenError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamParseError,
    UpstreamTimeoutError,
)
from .url_builder import UrlBuilder

__all__ = [
    "CircuitBreakerRegistry",
    "CircuitOpenError",
    "UpstreamError",
    "UpstreamHTTPError",
    "UpstreamParseError",
    "UpstreamTimeoutError",
    "UrlBuilder",
    "UsitcClient",
]
