"""
Cloakgate — campaign link cloaking with an audit trail.
Main application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.redirect import router as redirect_router
from app.api.campaigns import router as campaigns_router
from app.middleware.security import SecurityHeadersMiddleware
from app.config import get_settings

import structlog

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer() if get_settings().debug else structlog.processors.JSONRenderer(),
    ],
)

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("cloakgate_starting", base_url=settings.base_url,
                geo_ip_fallback=settings.geo_ip_fallback_enabled,
                reporting_enabled=bool(settings.reporting_api_key))
    yield
    logger.info("cloakgate_shutting_down")


app = FastAPI(
    title="Cloakgate",
    description="Per-visitor campaign link routing with a four-layer classification pipeline.",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if get_settings().debug else None,
    redoc_url="/redoc" if get_settings().debug else None,
    openapi_url="/openapi.json" if get_settings().debug else None,
)

# Security + cache headers on every response
app.add_middleware(SecurityHeadersMiddleware)

# --- Routes ---
app.include_router(redirect_router)
app.include_router(campaigns_router)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "cloakgate", "version": VERSION}
