"""Search orchestrator: query in, ranked tariff lines out.

Expands the query, fans out one USITC search per variant (plus a numeric
range lookup for code-like queries), merges whatever came back, then
normalizes, filters, ranks, dedupes and paginates. Individual upstream
failures only cost recall and show up as warnings. When nothing fresh
comes back, the last good result for the same query is served from the
cache and flagged degraded. Only a total failure with an empty cache
reaches the caller as an error.
"""

import asyncio
import json
import logging
import re

import httpx

from htsduty.core.context import ResolverContext, get_default_context
from htsduty.core.normalization.pipeline import (
    TariffItemNormalizer,
    digits_only,
    unwrap_records,
)
from htsduty.core.usitc import UpstreamError, UsitcClient
from htsduty.schemas.tariff import (
    NormalizedTariffItem,
    SearchMeta,
    SearchOptions,
    SearchResult,
)
from .expander import expand_query
from .ranker import DEFAULT_WEIGHTS, RankingWeights, score_item

logger = logging.getLogger(__name__)


class SearchFailedError(Exception):
    """Every upstream path failed and there was nothing cached to fall back on."""

    def __init__(self, query: str, reason: str = ""):
        self.query = query
        self.reason = reason
        super().__init__(f'HTS search failed for "{query}"' + (f": {reason}" if reason else ""))


# ── Helpers ──────────────────────────────────────────────────────

def looks_numeric(query: str) -> bool:
    """6+ digits once dots and spaces are stripped, e.g. "6404.11"."""
    return bool(re.search(r"\d", query)) and len(digits_only(query)) >= 6


def numeric_range(query: str) -> tuple[str, str]:
    """10-digit [from, to] bounds covering every line under a code prefix."""
    d = digits_only(query)[:10]
    return d.ljust(10, "0"), d.ljust(10, "9")


def make_cache_key(prefix: str, payload: dict) -> str:
    return f"{prefix}:{json.dumps(payload, sort_keys=True)}"


def search_cache_key(query: str, options: SearchOptions) -> str:
    # Pagination stays out of the key so every page shares one cached superset.
    return make_cache_key(
        "q",
        {
            "q": " ".join(query.lower().split()),
            "ten_digit_only": options.ten_digit_only,
            "chapter": options.chapter,
            "fuzzy_edits_cap": options.fuzzy_edits_cap,
        },
    )


def dedupe(items: list[NormalizedTariffItem]) -> list[NormalizedTariffItem]:
    """Drop repeats of (code10, description), keeping the first occurrence."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for it in items:
        key = (it.code10, it.description.lower())
        if key in seen:
            continue
        seen.add(key)
        unique.append(it)
    return unique


def paginate(items: list, limit: int, offset: int) -> list:
    limit = max(1, limit)
    offset = max(0, offset)
    return items[offset:offset + limit]


# ── Engine ───────────────────────────────────────────────────────

class HtsSearchEngine:
    """Resolve free-text or numeric queries to ranked HTS lines."""

    def __init__(
        self,
        client: UsitcClient | None = None,
        context: ResolverContext | None = None,
        normalizer: TariffItemNormalizer | None = None,
        weights: RankingWeights | None = None,
    ):
        self.context = context or get_default_context()
        self.client = client or UsitcClient(breakers=self.context.breakers)
        self.normalizer = normalizer or TariffItemNormalizer()
        self.weights = weights or DEFAULT_WEIGHTS

    async def aclose(self) -> None:
        await self.client.aclose()

    async def search(self, query: str, options: SearchOptions | None = None) -> SearchResult:
        """Search the HTS for a keyword or code prefix."""
        options = options or SearchOptions()
        key = search_cache_key(query, options)
        cached: SearchResult | None = self.context.cache.get(key)
        expanded = expand_query(query)
        warnings: list[str] = []

        try:
            records, successes = await self._fetch_records(
                query, expanded, options.timeout_s, warnings
            )

            if not records:
                if cached is not None:
                    return self._degraded(cached, options, warnings)
                if successes == 0:
                    raise SearchFailedError(query, "; ".join(warnings) or "no upstream response")

            ranked = self._rank(query, expanded, records, options, warnings)
            full = SearchResult(
                items=ranked,
                meta=SearchMeta(
                    query=query,
                    expanded_queries=expanded,
                    total_found=len(ranked),
                    warnings=list(warnings),
                ),
            )
            if ranked:
                # Cached copy is private; callers may mutate what they get back.
                self.context.cache.set(key, full.model_copy(deep=True))

            logger.info(
                f"Search '{query}': {len(records)} raw → {len(ranked)} ranked "
                f"({len(expanded)} variants, {len(warnings)} warnings)"
            )
            return full.model_copy(
                update={"items": paginate(ranked, options.limit, options.offset)}
            )

        except SearchFailedError as e:
            logger.error(str(e))
            raise
        except Exception as e:
            if cached is not None:
                warnings.append(str(e) or type(e).__name__)
                return self._degraded(cached, options, warnings)
            logger.error(f"HTS search failed for '{query}': {e}")
            raise SearchFailedError(query, str(e)) from e

    async def get_by_code(
        self, code: str, timeout_s: float | None = None
    ) -> list[NormalizedTariffItem]:
        """All lines under a code prefix (6-10 digits, dots allowed).

        Prefers the exportList range endpoint and falls back to keyword
        search on the digits. Both failing propagates the error.
        """
        digits = digits_only(code)[:10]
        if not digits:
            raise ValueError(f"No digits in code {code!r}")

        key = make_cache_key("code", {"code": digits})
        cached = self.context.cache.get(key)
        if cached is not None:
            return [it.model_copy(deep=True) for it in cached]

        code_from, code_to = numeric_range(digits)
        try:
            payload = await self.client.export_list(code_from, code_to, timeout_s)
        except (UpstreamError, httpx.TransportError) as e:
            logger.warning(f"exportList failed for {digits} ({e}); falling back to search")
            payload = await self.client.search(digits, timeout_s)

        items = dedupe([
            it for it in self._normalize_all(unwrap_records(payload), [])
            if it.code10.startswith(digits)
        ])
        if items:
            self.context.cache.set(key, [it.model_copy(deep=True) for it in items])
        return items

    # ── Internals ────────────────────────────────────────────────

    async def _fetch_records(
        self,
        query: str,
        expanded: list[str],
        timeout_s: float | None,
        warnings: list[str],
    ) -> tuple[list[dict], int]:
        """Run the fan-out and numeric fast path together, settling all.

        Returns the merged records and the number of calls that succeeded.
        """
        calls = [self.client.search(q, timeout_s) for q in expanded]
        labels = [f'Search degraded for "{q}"' for q in expanded]

        if looks_numeric(query):
            code_from, code_to = numeric_range(query)
            calls.append(self.client.export_list(code_from, code_to, timeout_s))
            labels.append(f"exportList fallback failed ({code_from}-{code_to})")

        results = await asyncio.gather(*calls, return_exceptions=True)

        records: list[dict] = []
        successes = 0
        for label, result in zip(labels, results):
            if isinstance(result, Exception):
                message = f"{label}: {result}"
                logger.warning(message)
                warnings.append(message)
                continue
            if isinstance(result, BaseException):
                raise result
            successes += 1
            records.extend(unwrap_records(result))
        return records, successes

    def _normalize_all(self, records: list[dict], warnings: list[str]) -> list[NormalizedTariffItem]:
        items = []
        errors = 0
        for r in records:
            try:
                items.append(self.normalizer.normalize(r))
            except ValueError as e:
                errors += 1
                logger.warning(f"Normalization error: {e}")
        if errors:
            warnings.append(f"Skipped {errors} malformed record(s)")
        return items

    def _rank(
        self,
        query: str,
        expanded: list[str],
        records: list[dict],
        options: SearchOptions,
        warnings: list[str],
    ) -> list[NormalizedTariffItem]:
        items = [
            it for it in self._normalize_all(records, warnings)
            if (not options.ten_digit_only or it.is_ten_digit)
            and (options.chapter is None or it.chapter == options.chapter)
        ]

        expanded_tokens = [q.split() for q in expanded]
        scored: list[tuple[float, NormalizedTariffItem]] = [
            (
                score_item(
                    it,
                    query,
                    expanded_tokens,
                    fuzzy_edits_cap=options.fuzzy_edits_cap,
                    chapter_boosts=options.chapter_boosts,
                    weights=self.weights,
                ),
                it,
            )
            for it in items
        ]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return dedupe([it for _, it in scored])

    def _degraded(
        self, cached: SearchResult, options: SearchOptions, warnings: list[str]
    ) -> SearchResult:
        logger.warning(
            f"Serving degraded cached results for '{cached.meta.query}' "
            f"({len(warnings)} upstream warnings)"
        )
        meta = cached.meta.model_copy(
            deep=True,
            update={
                "degraded": True,
                "used_cache": True,
                "warnings": [
                    *cached.meta.warnings,
                    *warnings,
                    "Live USITC data unavailable; showing cached results.",
                ],
            }
        )
        return SearchResult(
            items=[
                it.model_copy(deep=True)
                for it in paginate(cached.items, options.limit, options.offset)
            ],
            meta=meta,
        )
