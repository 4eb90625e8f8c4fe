"""HTS lookup routes: keyword search, code prefix listing, HS6 refinement."""

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query

from htsduty.api.deps import get_engine
from htsduty.config import settings
from htsduty.core.estimate import find_refine_candidates, validate_hs6
from htsduty.core.normalization.pipeline import digits_only
from htsduty.core.search import HtsSearchEngine, SearchFailedError
from htsduty.core.usitc import UpstreamError
from htsduty.schemas.tariff import SearchOptions, SearchResult

router = APIRouter(prefix="/hs", tags=["HTS Lookup"])


@router.get("/search", response_model=SearchResult)
async def search_hts(
    q: str = Query(..., min_length=1, description="Keyword or HTS code prefix"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    ten_digit_only: bool = Query(default=False, description="Only 10-digit statistical lines"),
    chapter: int | None = Query(default=None, ge=1, le=99),
    fuzzy: int = Query(default=1, ge=0, le=1, description="Max edits for fuzzy token match"),
    engine: HtsSearchEngine = Depends(get_engine),
):
    """Ranked HTS lines for a product description or code."""
    options = SearchOptions(
        limit=limit,
        offset=offset,
        ten_digit_only=ten_digit_only,
        chapter=chapter,
        fuzzy_edits_cap=fuzzy,
    )
    try:
        return await engine.search(q, options)
    except SearchFailedError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/code/{code}")
async def lines_for_code(code: str, engine: HtsSearchEngine = Depends(get_engine)):
    """Every line under a 6-10 digit code prefix."""
    digits = digits_only(code)
    if len(digits) < 6:
        raise HTTPException(status_code=400, detail="Code must have at least 6 digits")

    try:
        items = await engine.get_by_code(digits)
    except (UpstreamError, httpx.TransportError) as e:
        raise HTTPException(status_code=502, detail=f"USITC lookup failed: {e}")

    return {
        "code": digits[:10],
        "count": len(items),
        "items": items,
    }


@router.get("/refine")
async def refine_hs6(
    hs6: str = Query(..., description="6-digit heading (4 digits are padded)"),
    limit: int = Query(default=6, ge=1, le=20),
    engine: HtsSearchEngine = Depends(get_engine),
):
    """Ten-digit candidates under an HS6 heading, most likely first."""
    heading = validate_hs6(hs6)
    if heading is None:
        raise HTTPException(status_code=400, detail="Invalid HS6 code")

    candidates = await find_refine_candidates(engine, heading, limit=limit)
    return {
        "hs6": heading,
        "candidates": candidates,
    }
