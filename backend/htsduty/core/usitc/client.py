import asyncio
import logging
import random
from typing import Any

import httpx

from htsduty.config import settings
from .breaker import CircuitBreakerRegistry
from .errors import (
    UpstreamHTTPError,
    UpstreamParseError,
    UpstreamTimeoutError,
)
from .url_builder import UrlBuilder

logger = logging.getLogger(__name__)


class UsitcClient:
    """Resilient client for the USITC HTS RestStop API.

    Handles:
    - Per-call time budget (asyncio.wait_for cancels the in-flight request)
    - Retry on 429 (honoring Retry-After), 5xx and transport errors
    - Exponential backoff with jitter
    - Per-endpoint circuit breaking
    - Proxy-aware URL construction via a pluggable UrlBuilder
    """

    def __init__(
        self,
        breakers: CircuitBreakerRegistry | None = None,
        url_builder: UrlBuilder | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_s: float | None = None,
        max_retries: int | None = None,
        backoff_base_s: float | None = None,
    ):
        self.breakers = breakers or CircuitBreakerRegistry(
            settings.BREAKER_FAILURE_THRESHOLD, settings.BREAKER_COOL_DOWN_S
        )
        self.urls = url_builder or UrlBuilder(proxy_base_url=settings.USITC_PROXY_BASE_URL)
        self.timeout_s = timeout_s or settings.REQUEST_TIMEOUT_S
        self.max_retries = settings.MAX_RETRIES if max_retries is None else max_retries
        self.backoff_base_s = (
            settings.BACKOFF_BASE_S if backoff_base_s is None else backoff_base_s
        )
        # The time budget is enforced by wait_for, not by httpx.
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=None,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "UsitcClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Endpoints ────────────────────────────────────────────────

    async def search(self, keyword: str, timeout_s: float | None = None) -> Any:
        """Keyword search. Returns the decoded JSON payload."""
        return await self.get_json(UrlBuilder.search_path(keyword), "search", timeout_s)

    async def export_list(
        self, code_from: str, code_to: str, timeout_s: float | None = None
    ) -> Any:
        """All lines in a 10-digit code range. Returns the decoded JSON payload."""
        return await self.get_json(
            UrlBuilder.export_list_path(code_from, code_to), "exportList", timeout_s
        )

    async def get_json(self, path: str, endpoint: str, timeout_s: float | None = None) -> Any:
        url = self.urls.build(path)
        breaker_id = f"{self.urls.breaker_prefix}:{endpoint}"
        response = await self.fetch_with_policy(url, timeout_s, breaker_id)

        if not response.is_success:
            raise UpstreamHTTPError(response.status_code, response.text[:200])
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamParseError(url, response.headers.get("content-type")) from e

    # ── Fetch policy ─────────────────────────────────────────────

    async def fetch_with_policy(
        self, url: str, timeout_s: float | None = None, breaker_id: str | None = None
    ) -> httpx.Response:
        """GET url under the retry policy and the endpoint's circuit breaker.

        Raises CircuitOpenError without I/O while the breaker is open,
        UpstreamTimeoutError when the budget runs out, and the last
        UpstreamHTTPError / httpx.TransportError once retries are exhausted.
        """
        breaker_id = breaker_id or url
        budget = timeout_s or self.timeout_s
        self.breakers.before_attempt(breaker_id)

        try:
            return await asyncio.wait_for(self._attempts(url, breaker_id), budget)
        except asyncio.TimeoutError:
            self.breakers.record_failure(breaker_id)
            logger.warning(f"Request to {url} timed out after {budget:g}s")
            raise UpstreamTimeoutError(url, budget) from None
        except asyncio.CancelledError:
            self.breakers.release(breaker_id)
            raise

    async def _attempts(self, url: str, breaker_id: str) -> httpx.Response:
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            final = attempt == self.max_retries
            try:
                response = await self._http.get(url)
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    f"Request to {url} failed (attempt {attempt + 1}): {e!r}"
                )
                if not final:
                    await asyncio.sleep(self._backoff(attempt + 1, 0.8, 0.8))
                continue

            if response.status_code == 429:
                last_error = UpstreamHTTPError(429, "Too Many Requests")
                if final:
                    break
                wait = self._retry_after(response)
                logger.warning(
                    f"Rate limited on {url} (attempt {attempt + 1}). Waiting {wait:.2f}s"
                )
                await asyncio.sleep(wait)
                continue

            if response.status_code >= 500:
                last_error = UpstreamHTTPError(response.status_code, response.text[:200])
                logger.warning(
                    f"Upstream {response.status_code} from {url} (attempt {attempt + 1})"
                )
                if not final:
                    await asyncio.sleep(self._backoff(attempt + 1, 1.0, 0.6))
                continue

            self.breakers.record_success(breaker_id)
            return response

        self.breakers.record_failure(breaker_id)
        raise last_error or UpstreamHTTPError(0, "Exhausted all retry attempts")

    def _backoff(self, attempt: int, scale: float, jitter: float) -> float:
        base = self.backoff_base_s
        return scale * base * 2 ** attempt + random.random() * jitter * base

    def _retry_after(self, response: httpx.Response) -> float:
        try:
            seconds = float(response.headers.get("Retry-After", "0"))
        except ValueError:
            seconds = 0.0
        if seconds > 0:
            return seconds
        base = self.backoff_base_s
        return 2 * base + random.random() * 2 * base
