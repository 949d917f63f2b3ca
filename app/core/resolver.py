"""
Redirect resolver — campaign lookup + classification pipeline.

Flow:
  1. Two-tier campaign lookup for (host, slug)
       a. campaign bound to slug AND the normalised entry domain
       b. else campaign by slug, only if it has no domain binding
     Inactive or missing → None (caller answers 404, nothing is logged)
  2. Run the four detectors against the request
  3. Apply the first-match decision policy
  4. Record one access-log entry (bounded, fails open)
  5. Return safe_page_url if blocked, else destination_url

Stores and the optional geo locator are injected; the resolver only reads
campaign configuration and holds no state between requests.
"""

from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlsplit

from app.core.access_log import (
    AccessLogEntry,
    AccessLogRecorder,
    AccessLogStore,
    build_access_log_entry,
)
from app.core.bot_detection import BotDetection, detect_bot
from app.core.decision import Decision, decide
from app.core.device_detection import DeviceDetection, detect_device
from app.core.geo import GeoResult, IpGeoLocator, resolve_country, should_block_by_country
from app.core.origin_lock import OriginLockResult, detect_origin_lock, should_block_by_origin
from app.core.request_facts import RequestFacts, normalize_entry_domain
from app.core.verdict import LayerVerdict

import structlog

logger = structlog.get_logger()


class CampaignStore(Protocol):
    async def get_campaign_by_slug_and_domain(self, slug: str, domain: str) -> Any | None: ...

    async def get_campaign_by_slug(self, slug: str) -> Any | None: ...


class InvalidRedirectTarget(Exception):
    """The campaign's chosen target is empty or not an absolute http(s) URL."""

    def __init__(self, campaign_id, target: str | None):
        self.campaign_id = campaign_id
        self.target = target
        super().__init__(f"campaign {campaign_id} has no valid redirect target: {target!r}")


@dataclass(frozen=True)
class Classification:
    bot: BotDetection
    device: DeviceDetection
    geo: GeoResult
    geo_verdict: LayerVerdict
    origin: OriginLockResult
    origin_verdict: LayerVerdict
    decision: Decision


@dataclass(frozen=True)
class RedirectOutcome:
    campaign: Any
    classification: Classification
    entry: AccessLogEntry
    location: str
    logged: bool

    @property
    def blocked(self) -> bool:
        return self.classification.decision.blocked


def _valid_target(url: str | None) -> bool:
    if not url or not url.strip():
        return False
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


class RedirectResolver:
    def __init__(
        self,
        campaigns: CampaignStore,
        access_logs: AccessLogStore,
        geo_locator: IpGeoLocator | None = None,
        log_write_timeout: float = 2.0,
    ):
        self.campaigns = campaigns
        self.recorder = AccessLogRecorder(access_logs, timeout=log_write_timeout)
        self.geo_locator = geo_locator

    async def find_campaign(self, host: str, slug: str):
        """Two-tier lookup. Domain-bound campaigns are never reachable via another host."""
        domain = normalize_entry_domain(host)

        campaign = None
        if domain:
            campaign = await self.campaigns.get_campaign_by_slug_and_domain(slug, domain)

        if campaign is None:
            candidate = await self.campaigns.get_campaign_by_slug(slug)
            if candidate is not None and not candidate.domain_id:
                campaign = candidate

        if campaign is None or not campaign.is_active:
            return None
        return campaign

    async def classify(self, campaign, facts: RequestFacts) -> Classification:
        bot = detect_bot(facts.user_agent)
        device = detect_device(facts.user_agent)

        geo = await resolve_country(facts.headers, facts.client_ip, self.geo_locator)
        geo_verdict = should_block_by_country(geo.country, campaign.blocked_countries)

        origin = detect_origin_lock(facts.full_url, facts.user_agent)
        origin_verdict = should_block_by_origin(origin, bool(campaign.enable_origin_lock))

        decision = decide(campaign, bot, device, geo_verdict, origin_verdict)
        return Classification(
            bot=bot,
            device=device,
            geo=geo,
            geo_verdict=geo_verdict,
            origin=origin,
            origin_verdict=origin_verdict,
            decision=decision,
        )

    async def resolve(self, facts: RequestFacts) -> RedirectOutcome | None:
        campaign = await self.find_campaign(facts.host, facts.slug)
        if campaign is None:
            logger.info("campaign_not_found", slug=facts.slug, domain=facts.entry_domain)
            return None

        result = await self.classify(campaign, facts)
        decision = result.decision

        entry = build_access_log_entry(campaign.id, facts, result.bot, result.device, result.geo, decision)
        logged = await self.recorder.record(entry)

        logger.info("redirect_decided",
                    campaign_id=str(campaign.id),
                    slug=facts.slug,
                    blocked=decision.blocked,
                    layer=decision.layer,
                    reason=decision.reason,
                    bot=result.bot.is_bot,
                    device=result.device.device_type.value,
                    country=result.geo.country,
                    ad_click_id=result.origin.has_ad_click_id,
                    in_app=result.origin.in_app_browser_name)

        target = campaign.safe_page_url if decision.blocked else campaign.destination_url
        if not _valid_target(target):
            logger.error("redirect_target_invalid", campaign_id=str(campaign.id),
                         blocked=decision.blocked)
            raise InvalidRedirectTarget(campaign.id, target)

        return RedirectOutcome(
            campaign=campaign,
            classification=result,
            entry=entry,
            location=target.strip(),
            logged=logged,
        )
