"""Shared FastAPI dependencies."""

import logging

from fastapi import Depends

from htsduty.core.estimate import EstimateService
from htsduty.core.search import HtsSearchEngine

logger = logging.getLogger(__name__)

# One engine per process; it shares the default resolver context
_engine: HtsSearchEngine | None = None


def get_engine() -> HtsSearchEngine:
    global _engine
    if _engine is None:
        _engine = HtsSearchEngine()
        logger.info("HTS search engine initialized")
    return _engine


async def close_engine() -> None:
    global _engine
    if _engine is not None:
        await _engine.aclose()
        _engine = None


def get_estimator(engine: HtsSearchEngine = Depends(get_engine)) -> EstimateService:
    return EstimateService(engine)
