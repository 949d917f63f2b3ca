"""Tests for the SQLAlchemy stores and the slug uniqueness indexes."""

import asyncio
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from sqlalchemy.dialects import postgresql

from app.core.access_log import AccessLogEntry
from app.models.store import SqlAccessLogStore, SqlCampaignStore
from app.models.tables import AccessLog, Campaign
from conftest import make_campaign


def _db_returning(campaign):
    result = MagicMock()
    result.scalar_one_or_none.return_value = campaign
    db = AsyncMock()
    db.execute = AsyncMock(return_value=result)
    db.add = MagicMock()
    return db


def _executed(db):
    stmt = db.execute.await_args.args[0]
    compiled = stmt.compile(dialect=postgresql.dialect())
    return str(compiled), compiled.params


class TestSqlCampaignStore:
    def test_domain_lookup_joins_on_normalised_entry_domain(self):
        campaign = make_campaign()
        db = _db_returning(campaign)

        found = asyncio.run(SqlCampaignStore(db).get_campaign_by_slug_and_domain("promo", "WWW.Shop.Example.com:443"))

        assert found is campaign
        sql, params = _executed(db)
        assert "JOIN domains ON campaigns.domain_id = domains.id" in sql
        assert "domains.entry_domain =" in sql
        assert "shop.example.com" in params.values()
        assert "promo" in params.values()

    def test_global_lookup_prefers_unbound_campaign(self):
        db = _db_returning(None)

        assert asyncio.run(SqlCampaignStore(db).get_campaign_by_slug("promo")) is None

        sql, params = _executed(db)
        assert "JOIN" not in sql
        assert "ORDER BY campaigns.domain_id IS NULL DESC" in sql
        assert "LIMIT" in sql
        assert "promo" in params.values()

    def test_get_campaign_rejects_malformed_id_without_query(self):
        db = _db_returning(None)

        assert asyncio.run(SqlCampaignStore(db).get_campaign("not-a-uuid")) is None
        db.execute.assert_not_awaited()


class TestSqlAccessLogStore:
    def test_append_maps_entry_onto_row_and_commits(self):
        campaign_id = uuid4()
        entry = AccessLogEntry(
            campaign_id=str(campaign_id),
            user_agent="curl/8.0",
            ip_address="203.0.113.9",
            referer=None,
            country="BR",
            device_type="desktop",
            is_bot=True,
            bot_reason="cURL",
            was_blocked=True,
            block_reason="Layer 1 (Bot): cURL",
        )
        db = _db_returning(None)

        asyncio.run(SqlAccessLogStore(db).append(entry))

        db.add.assert_called_once()
        row = db.add.call_args.args[0]
        assert isinstance(row, AccessLog)
        assert row.campaign_id == campaign_id
        assert row.ip_address == "203.0.113.9"
        assert row.country == "BR"
        assert row.device_type == "desktop"
        assert row.is_bot is True
        assert row.bot_reason == "cURL"
        assert row.was_blocked is True
        assert row.block_reason == "Layer 1 (Bot): cURL"
        db.commit.assert_awaited_once()


class TestSlugIndexes:
    def _index(self, name):
        return next(ix for ix in Campaign.__table__.indexes if ix.name == name)

    def test_slug_unique_per_domain(self):
        ix = self._index("uq_campaigns_slug_domain")
        assert ix.unique is True
        assert [c.name for c in ix.columns] == ["slug", "domain_id"]

    def test_slug_unique_among_unbound_campaigns(self):
        ix = self._index("uq_campaigns_slug_global")
        assert ix.unique is True
        assert [c.name for c in ix.columns] == ["slug"]
        assert str(ix.dialect_options["postgresql"]["where"]) == "domain_id IS NULL"
