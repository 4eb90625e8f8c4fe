"""Per-endpoint circuit breakers for the USITC API.

closed ──(N consecutive failures)──> open ──(cool-down elapsed)──> half_open
half_open ──(trial succeeds)──> closed
half_open ──(trial fails)──> open, cool-down restarts

While open, calls are rejected without touching the network. Half-open
admits exactly one trial call; others are rejected until it settles.
"""

import logging
import threading
import time
from typing import Callable, Literal

from .errors import CircuitOpenError

logger = logging.getLogger(__name__)

BreakerStatus = Literal["closed", "open", "half_open"]


class CircuitBreakerState:
    __slots__ = ("consecutive_failures", "state", "opened_at", "trial_in_flight")

    def __init__(self):
        self.consecutive_failures = 0
        self.state: BreakerStatus = "closed"
        self.opened_at: float | None = None
        self.trial_in_flight = False

    def snapshot(self) -> dict:
        return {
            "consecutive_failures": self.consecutive_failures,
            "state": self.state,
            "opened_at": self.opened_at,
        }


class CircuitBreakerRegistry:
    """Breaker state keyed by endpoint id, created on first use."""

    def __init__(
        self,
        failure_threshold: int = 3,
        cool_down_s: float = 20.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.cool_down_s = cool_down_s
        self.clock = clock
        self._breakers: dict[str, CircuitBreakerState] = {}
        self._lock = threading.Lock()

    def _get(self, breaker_id: str) -> CircuitBreakerState:
        breaker = self._breakers.get(breaker_id)
        if breaker is None:
            breaker = CircuitBreakerState()
            self._breakers[breaker_id] = breaker
        return breaker

    def state(self, breaker_id: str) -> dict:
        with self._lock:
            return self._get(breaker_id).snapshot()

    def before_attempt(self, breaker_id: str) -> None:
        """Admit or reject a call. Raises CircuitOpenError on rejection."""
        with self._lock:
            b = self._get(breaker_id)
            if b.state == "closed":
                return

            if b.state == "half_open":
                if b.trial_in_flight:
                    raise CircuitOpenError(breaker_id)
                b.trial_in_flight = True
                return

            elapsed = self.clock() - (b.opened_at or 0.0)
            if elapsed < self.cool_down_s:
                raise CircuitOpenError(breaker_id, self.cool_down_s - elapsed)

            b.state = "half_open"
            b.trial_in_flight = True
            logger.info(f"Circuit {breaker_id} half-open: allowing one trial call")

    def record_success(self, breaker_id: str) -> None:
        with self._lock:
            b = self._get(breaker_id)
            if b.state != "closed":
                logger.info(f"Circuit {breaker_id} closed after successful trial")
            b.consecutive_failures = 0
            b.state = "closed"
            b.opened_at = None
            b.trial_in_flight = False

    def record_failure(self, breaker_id: str) -> None:
        with self._lock:
            b = self._get(breaker_id)
            b.consecutive_failures += 1
            b.trial_in_flight = False
            if b.state == "half_open" or (
                b.state == "closed" and b.consecutive_failures >= self.failure_threshold
            ):
                b.state = "open"
                b.opened_at = self.clock()
                logger.warning(
                    f"Circuit {breaker_id} open after {b.consecutive_failures} "
                    f"consecutive failures; cooling down {self.cool_down_s}s"
                )

    def release(self, breaker_id: str) -> None:
        """Drop a half-open trial that ended without a verdict (cancelled)."""
        with self._lock:
            self._get(breaker_id).trial_in_flight = False

    def reset(self) -> None:
        with self._lock:
            self._breakers.clear()
