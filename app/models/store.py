"""
SQLAlchemy-backed stores.

  - CampaignStore: read-only campaign configuration for the resolver
  - AccessLogStore: append-only audit rows + reporting queries
"""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_log import AccessLogEntry
from app.core.request_facts import normalize_entry_domain
from app.models.tables import AccessLog, Campaign, Domain


def _as_uuid(value) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class SqlCampaignStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_campaign_by_slug_and_domain(self, slug: str, domain: str) -> Campaign | None:
        stmt = (
            select(Campaign)
            .join(Domain, Campaign.domain_id == Domain.id)
            .where(
                Campaign.slug == slug,
                Domain.entry_domain == normalize_entry_domain(domain),
            )
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_campaign_by_slug(self, slug: str) -> Campaign | None:
        # Unbound (global) campaign first — it is the only one the resolver may use
        stmt = (
            select(Campaign)
            .where(Campaign.slug == slug)
            .order_by(Campaign.domain_id.is_(None).desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_campaign(self, campaign_id) -> Campaign | None:
        cid = _as_uuid(campaign_id)
        if cid is None:
            return None
        result = await self.db.execute(select(Campaign).where(Campaign.id == cid))
        return result.scalar_one_or_none()


class SqlAccessLogStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, entry: AccessLogEntry) -> None:
        row = entry.to_dict()
        row["campaign_id"] = _as_uuid(entry.campaign_id)
        self.db.add(AccessLog(**row))
        await self.db.commit()

    async def get_access_logs(self, campaign_id, limit: int = 100) -> list[AccessLog]:
        stmt = (
            select(AccessLog)
            .where(AccessLog.campaign_id == _as_uuid(campaign_id))
            .order_by(AccessLog.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_campaign_stats(self, campaign_id) -> dict[str, int]:
        stmt = select(
            func.count().label("total"),
            func.count().filter(AccessLog.was_blocked.is_(True)).label("blocked"),
            func.count().filter(AccessLog.is_bot.is_(False)).label("humans"),
        ).select_from(AccessLog).where(AccessLog.campaign_id == _as_uuid(campaign_id))
        row = (await self.db.execute(stmt)).one()
        return {
            "total": int(row.total or 0),
            "blocked": int(row.blocked or 0),
            "humans": int(row.humans or 0),
        }

    async def get_user_stats(self, user_id: str) -> dict[str, int]:
        campaign_count = await self.db.execute(
            select(func.count()).select_from(Campaign).where(Campaign.user_id == user_id)
        )
        total_campaigns = int(campaign_count.scalar() or 0)
        if total_campaigns == 0:
            return {"total_campaigns": 0, "total_clicks": 0, "blocked_clicks": 0, "human_visitors": 0}

        stmt = (
            select(
                func.count().label("total"),
                func.count().filter(AccessLog.was_blocked.is_(True)).label("blocked"),
                func.count().filter(AccessLog.is_bot.is_(False)).label("humans"),
            )
            .select_from(AccessLog)
            .join(Campaign, AccessLog.campaign_id == Campaign.id)
            .where(Campaign.user_id == user_id)
        )
        row = (await self.db.execute(stmt)).one()
        return {
            "total_campaigns": total_campaigns,
            "total_clicks": int(row.total or 0),
            "blocked_clicks": int(row.blocked or 0),
            "human_visitors": int(row.humans or 0),
        }
