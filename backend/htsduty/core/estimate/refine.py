"""HS6 refinement: suggest 10-digit statistical lines under a 6-digit heading."""

import logging
import re

import httpx

from htsduty.core.search.engine import HtsSearchEngine
from htsduty.core.usitc import UpstreamError
from htsduty.schemas.tariff import RefineCandidate

logger = logging.getLogger(__name__)


def validate_hs6(text: str | None) -> str | None:
    """Coerce user input to a 6-digit heading, or None if it can't be."""
    digits = re.sub(r"\D", "", text or "")
    if len(digits) == 6:
        return digits
    if len(digits) == 4:
        return digits + "00"
    if len(digits) > 6:
        return digits[:6]
    return None


def calculate_confidence(hs6: str, code10: str) -> int:
    """0-100 score for how likely a child line is the intended one."""
    if not code10.startswith(hs6):
        return 0

    suffix = code10[6:]
    if suffix == "0000":
        return 95
    if suffix == "0001":
        return 90
    if suffix == "0002":
        return 85
    if re.fullmatch(r"0+", suffix):
        return 80
    if re.fullmatch(r"\d{4}", suffix):
        return 75
    return max(50, 100 - int(suffix or "0") % 50)


async def find_refine_candidates(
    engine: HtsSearchEngine, hs6: str, limit: int = 6
) -> list[RefineCandidate]:
    """Ten-digit children of an HS6 heading, most likely first."""
    if not re.fullmatch(r"\d{6}", hs6 or ""):
        raise ValueError("Invalid HS6 code")

    try:
        items = await engine.get_by_code(hs6)
    except (UpstreamError, httpx.TransportError) as e:
        logger.warning(f"Refine lookup for {hs6} failed: {e}")
        return []

    seen: set[str] = set()
    candidates = []
    for it in items:
        if not it.is_ten_digit or it.code10 in seen:
            continue
        seen.add(it.code10)
        candidates.append(
            RefineCandidate(
                code10=it.code10,
                description=it.description or "Unknown",
                confidence=calculate_confidence(hs6, it.code10),
            )
        )

    candidates.sort(key=lambda c: (-c.confidence, c.code10))
    return candidates[:limit]
