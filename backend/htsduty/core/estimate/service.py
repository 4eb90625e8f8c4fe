"""Duty estimation: resolve a product or code to an HTS line and price it.

Resolution order:
1. Code-like input -> lines under that code prefix (exportList)
2. Keyword input -> ranked search; top hit chosen, runners-up returned
3. Local HS dictionary (heading only, no rate)
4. Nothing found
"""

import logging

import httpx

from htsduty.core.duty.calculator import compute_duty
from htsduty.core.normalization.pipeline import format_code, to_code10
from htsduty.core.search.engine import HtsSearchEngine, SearchFailedError, looks_numeric
from htsduty.core.usitc import UpstreamError
from htsduty.data.hs_dictionary import lookup_hs
from htsduty.schemas.tariff import (
    EstimateBreakdown,
    EstimateLine,
    EstimateRequest,
    EstimateResult,
    NormalizedTariffItem,
    SearchOptions,
)

logger = logging.getLogger(__name__)

MAX_ALTERNATES = 5


def first_advalorem(item: NormalizedTariffItem) -> float | None:
    for c in item.components:
        if c.kind == "percentage":
            return c.value
    return None


def to_line(item: NormalizedTariffItem) -> EstimateLine:
    return EstimateLine(
        hs_code=item.code10,
        hs_code_formatted=item.display_code,
        description=item.description,
        rate=first_advalorem(item),
        rate_type=item.rate_type,
    )


class EstimateService:
    """Estimate the import duty for one product line."""

    def __init__(self, engine: HtsSearchEngine):
        self.engine = engine

    async def estimate(self, req: EstimateRequest) -> EstimateResult:
        text = req.input.strip()
        if not text:
            raise ValueError("Provide 'input' (keyword or HS code)")

        notes: list[str] = []
        chosen: NormalizedTariffItem | None = None
        alternates: list[NormalizedTariffItem] = []
        degraded = False
        resolution = "none"

        if looks_numeric(text):
            try:
                items = await self.engine.get_by_code(text)
            except (UpstreamError, httpx.TransportError) as e:
                logger.warning(f"Code lookup for {text} failed: {e}")
                notes.append(f"USITC lookup failed: {e}")
                items = []
            if items:
                chosen = next((it for it in items if it.is_ten_digit), items[0])
                resolution = "numeric"
        else:
            try:
                result = await self.engine.search(text, SearchOptions(limit=MAX_ALTERNATES + 1))
            except SearchFailedError as e:
                notes.append(str(e))
                result = None
            if result and result.items:
                chosen, *alternates = result.items
                degraded = result.meta.degraded
                resolution = "hts"

        breakdown = dict(
            product=text,
            country=req.country,
            price=req.price,
            qty=req.qty,
            weight_kg=req.weight_kg,
        )

        if chosen is None:
            hit = lookup_hs(text)
            if hit is None:
                notes.append("No HTS or dictionary match found.")
                return EstimateResult(
                    duty=None,
                    resolution="none",
                    breakdown=EstimateBreakdown(**breakdown),
                    notes=notes,
                )
            code10 = to_code10(hit["code"])
            notes.append(
                "Matched a heading from the local dictionary only; "
                "no General rate of duty is available for it."
            )
            return EstimateResult(
                duty=None,
                resolution="dict",
                breakdown=EstimateBreakdown(
                    **breakdown,
                    hs_code=code10,
                    hs_code_formatted=format_code(code10),
                    description=hit["description"],
                ),
                notes=notes,
            )

        duty = None
        if not chosen.components:
            if chosen.raw_rate_text:
                notes.append(f"HTS General (raw): {chosen.raw_rate_text}")
            notes.append("No parseable General rate of duty for this line.")
        else:
            duty = compute_duty(
                chosen.components,
                unit_price_usd=req.price,
                quantity=req.qty,
                weight_kg=req.weight_kg,
                notes=notes,
            )

        if chosen.rate_type in ("specific", "compound"):
            notes.append(
                "This line includes specific or compound duties. Provide quantity "
                "and/or weight (kg) for the most accurate total."
            )
        if degraded:
            notes.append("USITC was unreachable; the line was resolved from cached results.")

        line = to_line(chosen)
        return EstimateResult(
            duty=duty,
            rate=line.rate,
            rate_type=chosen.rate_type,
            components=chosen.components,
            resolution=resolution,
            breakdown=EstimateBreakdown(**breakdown, **line.model_dump()),
            alternates=[to_line(a) for a in alternates[:MAX_ALTERNATES]],
            notes=notes,
            degraded=degraded,
        )
