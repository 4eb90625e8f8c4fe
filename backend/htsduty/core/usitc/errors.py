class UpstreamError(Exception):
    """Base class for failures talking to the USITC API."""


class UpstreamHTTPError(UpstreamError):
    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}" + (f": {message}" if message else ""))


class UpstreamTimeoutError(UpstreamError):
    """The call's time budget ran out; the request was cancelled, not retried."""

    def __init__(self, url: str, timeout_s: float):
        self.url = url
        self.timeout_s = timeout_s
        super().__init__(f"Timed out after {timeout_s:g}s: {url}")


class UpstreamParseError(UpstreamError):
    """A 2xx response whose body wasn't JSON (usually an HTML error page)."""

    def __init__(self, url: str, content_type: str | None = None):
        self.url = url
        self.content_type = content_type
        super().__init__(f"Non-JSON response ({content_type or 'unknown type'}) from {url}")


class CircuitOpenError(UpstreamError):
    """Raised instead of attempting I/O against a known-bad endpoint."""

    def __init__(self, breaker_id: str, retry_in_s: float | None = None):
        self.breaker_id = breaker_id
        self.retry_in_s = retry_in_s
        detail = f", retry in {retry_in_s:.1f}s" if retry_in_s is not None else ""
        super().__init__(f"Circuit open for {breaker_id}{detail}")
