"""
Redirect endpoint — /r/{slug} (and legacy /go/{slug})

Flow:
  1. Copy the request facts out of the framework request
  2. Two-tier campaign lookup (entry domain + slug, else unbound slug)
     → 404 when nothing active resolves; nothing is logged
  3. Four detection layers + first-match decision policy
  4. Access-log write (bounded, failure never reaches the visitor)
  5. 302 to safe_page_url when blocked, destination_url otherwise

Always a temporary redirect: the same slug resolves differently per visitor.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.geo import IpGeoLocator
from app.core.request_facts import facts_from_request
from app.core.resolver import InvalidRedirectTarget, RedirectResolver
from app.models.database import get_db
from app.models.store import SqlAccessLogStore, SqlCampaignStore

import structlog

logger = structlog.get_logger()
router = APIRouter()


def get_resolver(db: AsyncSession = Depends(get_db)) -> RedirectResolver:
    """FastAPI dependency — resolver wired to the request's DB session."""
    settings = get_settings()
    return RedirectResolver(
        campaigns=SqlCampaignStore(db),
        access_logs=SqlAccessLogStore(db),
        geo_locator=IpGeoLocator() if settings.geo_ip_fallback_enabled else None,
        log_write_timeout=settings.access_log_write_timeout_seconds,
    )


@router.get("/r/{slug}")
@router.get("/go/{slug}")
async def redirect_campaign(
    request: Request,
    slug: str,
    resolver: RedirectResolver = Depends(get_resolver),
):
    facts = facts_from_request(request, slug)

    try:
        outcome = await resolver.resolve(facts)
    except InvalidRedirectTarget:
        raise HTTPException(status_code=502, detail="Campaign target misconfigured")

    if outcome is None:
        raise HTTPException(status_code=404, detail="Campaign not found")

    return RedirectResponse(url=outcome.location, status_code=302)
