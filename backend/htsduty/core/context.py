"""Resolver context: the long-lived state shared across searches.

Owns the LRU cache and the circuit breaker table. The HTTP app uses one
lazily created process-wide context; tests build their own.
"""

import time
from typing import Callable

from htsduty.config import settings
from htsduty.core.cache import LRUCache
from htsduty.core.usitc.breaker import CircuitBreakerRegistry


class ResolverContext:
    def __init__(
        self,
        cache_max_entries: int | None = None,
        breaker_failure_threshold: int | None = None,
        breaker_cool_down_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cache = LRUCache(cache_max_entries or settings.CACHE_MAX_ENTRIES)
        self.breakers = CircuitBreakerRegistry(
            failure_threshold=breaker_failure_threshold or settings.BREAKER_FAILURE_THRESHOLD,
            cool_down_s=(
                settings.BREAKER_COOL_DOWN_S
                if breaker_cool_down_s is None
                else breaker_cool_down_s
            ),
            clock=clock,
        )

    def reset(self) -> None:
        """Forget all cached results and breaker history."""
        self.cache.clear()
        self.breakers.reset()


_default_context: ResolverContext | None = None


def get_default_context() -> ResolverContext:
    global _default_context
    if _default_context is None:
        _default_context = ResolverContext()
    return _default_context
