"""Pytest configuration."""

import asyncio
import os
from uuid import uuid4

import pytest

# Ensure test environment
os.environ.setdefault("CG_DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("CG_DEBUG", "true")
os.environ.setdefault("CG_REPORTING_API_KEY", "test-reporting-key")
os.environ.setdefault("CG_GEO_IP_FALLBACK_ENABLED", "false")


# ---------------------------------------------------------------------------
# User agents
# ---------------------------------------------------------------------------

CHROME_DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
IPHONE_SAFARI_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_2 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Mobile/15E148 Safari/604.1"
)
INSTAGRAM_IOS_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_2 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Mobile/15E148 Instagram 312.0.0.32.112 (iPhone15,2; iOS 17_2; en_US)"
)


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------

def make_campaign(**overrides):
    """Transient Campaign row with every policy field populated."""
    from app.models.tables import Campaign

    fields = dict(
        id=uuid4(),
        user_id="user-1",
        domain_id=None,
        name="Spring promo",
        slug="promo",
        destination_url="https://offer.example.com/landing",
        safe_page_url="https://safe.example.com/",
        is_active=True,
        block_bots=True,
        block_desktop=False,
        blocked_countries=[],
        enable_origin_lock=False,
    )
    fields.update(overrides)
    return Campaign(**fields)


class InMemoryCampaignStore:
    def __init__(self, campaigns=None, domains=None):
        self.campaigns = list(campaigns or [])
        self.domains = dict(domains or {})  # entry_domain → domain id

    async def get_campaign_by_slug_and_domain(self, slug, domain):
        domain_id = self.domains.get(domain)
        if domain_id is None:
            return None
        for c in self.campaigns:
            if c.slug == slug and c.domain_id == domain_id:
                return c
        return None

    async def get_campaign_by_slug(self, slug):
        matches = [c for c in self.campaigns if c.slug == slug]
        matches.sort(key=lambda c: c.domain_id is not None)
        return matches[0] if matches else None


class InMemoryAccessLogStore:
    def __init__(self):
        self.entries = []

    async def append(self, entry):
        self.entries.append(entry)


class FailingAccessLogStore:
    async def append(self, entry):
        raise RuntimeError("database unavailable")


class SlowAccessLogStore:
    def __init__(self, delay: float):
        self.delay = delay

    async def append(self, entry):
        await asyncio.sleep(self.delay)


@pytest.fixture
def campaign_factory():
    return make_campaign


@pytest.fixture
def log_store():
    return InMemoryAccessLogStore()
