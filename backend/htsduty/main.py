"""HTS Duty Resolver: FastAPI Application.

Turns product descriptions and partial HTS codes into ranked US tariff
lines and General-rate duty estimates, backed by the USITC HTS REST API.

Upstream calls go through a retrying, breaker-guarded client. When USITC
is down the last good search results are served and flagged degraded.
"""

import logging

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from htsduty.api.deps import close_engine
from htsduty.api.routes import estimate, hs
from htsduty.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"{settings.APP_NAME} {settings.APP_VERSION} starting (upstream {settings.USITC_BASE_URL})"
    )
    yield
    await close_engine()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "HTS classification search and import duty estimation over the "
        "USITC Harmonized Tariff Schedule."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(hs.router, prefix="/api/v1")
app.include_router(estimate.router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "operational",
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}
