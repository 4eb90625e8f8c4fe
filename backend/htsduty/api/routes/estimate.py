"""Duty routes: estimate a landed duty and parse raw rate text."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from htsduty.api.deps import get_estimator
from htsduty.core.duty import parse_rate
from htsduty.core.estimate import EstimateService
from htsduty.schemas.tariff import EstimateRequest, EstimateResult, RateParseRequest

router = APIRouter(tags=["Duty"])


async def _run(service: EstimateService, req: EstimateRequest) -> EstimateResult:
    try:
        return await service.estimate(req)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/estimate", response_model=EstimateResult)
async def estimate_duty(req: EstimateRequest, service: EstimateService = Depends(get_estimator)):
    """Resolve the product to an HTS line and compute the General duty."""
    return await _run(service, req)


@router.get("/estimate", response_model=EstimateResult)
async def estimate_duty_query(
    input: str = Query(..., description="Keyword or HTS code"),
    price: float = Query(default=0.0, ge=0, allow_inf_nan=False, description="Unit price in USD"),
    country: str = Query(default="China"),
    qty: Optional[float] = Query(default=None, gt=0, allow_inf_nan=False),
    weight_kg: Optional[float] = Query(default=None, gt=0, allow_inf_nan=False),
    service: EstimateService = Depends(get_estimator),
):
    req = EstimateRequest(
        input=input, price=price, country=country, qty=qty, weight_kg=weight_kg
    )
    return await _run(service, req)


@router.post("/rates/parse")
async def parse_rate_text(req: RateParseRequest):
    """Parse a General rate string such as "2.5% + 10¢/kg"."""
    parsed = parse_rate(req.text)
    if parsed is None:
        return {"parsed": None}
    return parsed
