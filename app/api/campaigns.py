"""
Reporting API — read-only views over the access log.

  GET /api/countries                  country picker data (public)
  GET /api/campaigns/{id}/logs        newest first, ?limit= (default 100)
  GET /api/campaigns/{id}/stats       {total, blocked, humans}
  GET /api/stats?user_id=             per-owner totals

Everything except /api/countries requires the reporting key.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.geo import AVAILABLE_COUNTRIES
from app.middleware.auth import require_reporting_key
from app.models.database import get_db
from app.models.store import SqlAccessLogStore, SqlCampaignStore

import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/api", tags=["reporting"])


class CountryResponse(BaseModel):
    code: str
    name: str


class AccessLogResponse(BaseModel):
    id: UUID
    campaign_id: UUID
    user_agent: str | None
    ip_address: str | None
    referer: str | None
    country: str | None
    device_type: str | None
    is_bot: bool | None
    bot_reason: str | None
    was_blocked: bool | None
    block_reason: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class CampaignStatsResponse(BaseModel):
    total: int
    blocked: int
    humans: int


class UserStatsResponse(BaseModel):
    total_campaigns: int
    total_clicks: int
    blocked_clicks: int
    human_visitors: int


async def _require_campaign(campaign_id: str, db: AsyncSession):
    campaign = await SqlCampaignStore(db).get_campaign(campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.get("/countries", response_model=list[CountryResponse])
async def list_countries():
    return AVAILABLE_COUNTRIES


@router.get(
    "/campaigns/{campaign_id}/logs",
    response_model=list[AccessLogResponse],
    dependencies=[Depends(require_reporting_key)],
)
async def campaign_logs(
    campaign_id: str,
    limit: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    settings = get_settings()
    campaign = await _require_campaign(campaign_id, db)

    limit = min(limit or settings.access_log_default_limit, settings.access_log_max_limit)
    return await SqlAccessLogStore(db).get_access_logs(campaign.id, limit)


@router.get(
    "/campaigns/{campaign_id}/stats",
    response_model=CampaignStatsResponse,
    dependencies=[Depends(require_reporting_key)],
)
async def campaign_stats(campaign_id: str, db: AsyncSession = Depends(get_db)):
    campaign = await _require_campaign(campaign_id, db)
    return await SqlAccessLogStore(db).get_campaign_stats(campaign.id)


@router.get(
    "/stats",
    response_model=UserStatsResponse,
    dependencies=[Depends(require_reporting_key)],
)
async def user_stats(user_id: str = Query(..., min_length=1), db: AsyncSession = Depends(get_db)):
    return await SqlAccessLogStore(db).get_user_stats(user_id)
