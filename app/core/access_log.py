"""
Access log — one append-only audit row per resolved, active-campaign request.

The entry is shaped here; persisting it belongs to the AccessLogStore. The
recorder bounds the write and never lets a storage failure reach the
visitor: a missing audit row is acceptable, a failed redirect is not.
"""

import asyncio
from dataclasses import asdict, dataclass
from typing import Protocol
from uuid import UUID

from app.core.bot_detection import BotDetection
from app.core.decision import Decision
from app.core.device_detection import DeviceDetection
from app.core.geo import GeoResult
from app.core.request_facts import RequestFacts

import structlog

logger = structlog.get_logger()

# Column widths of access_logs
_MAX_REASON = 255
_MAX_IP = 45


@dataclass(frozen=True)
class AccessLogEntry:
    campaign_id: str
    user_agent: str | None
    ip_address: str | None
    referer: str | None
    country: str | None
    device_type: str
    is_bot: bool
    bot_reason: str | None
    was_blocked: bool
    block_reason: str | None

    def to_dict(self) -> dict:
        return asdict(self)


class AccessLogStore(Protocol):
    async def append(self, entry: AccessLogEntry) -> None: ...


def _clip(value: str | None, limit: int) -> str | None:
    return value[:limit] if value else value


def build_access_log_entry(
    campaign_id: UUID | str,
    facts: RequestFacts,
    bot: BotDetection,
    device: DeviceDetection,
    geo: GeoResult,
    decision: Decision,
) -> AccessLogEntry:
    return AccessLogEntry(
        campaign_id=str(campaign_id),
        user_agent=facts.user_agent,
        ip_address=_clip(facts.client_ip, _MAX_IP),
        referer=facts.referer,
        country=geo.country[:2] if geo.country else None,
        device_type=device.device_type.value,
        is_bot=bot.is_bot,
        bot_reason=_clip(bot.reason, _MAX_REASON),
        was_blocked=decision.blocked,
        block_reason=_clip(decision.reason, _MAX_REASON),
    )


class AccessLogRecorder:
    def __init__(self, store: AccessLogStore, timeout: float):
        self.store = store
        self.timeout = timeout

    async def record(self, entry: AccessLogEntry) -> bool:
        """Append the entry. Returns False (and logs) if the write failed."""
        try:
            await asyncio.wait_for(self.store.append(entry), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("access_log_write_failed", campaign_id=entry.campaign_id,
                         error="timeout", timeout=self.timeout)
            return False
        except Exception as e:
            logger.error("access_log_write_failed", campaign_id=entry.campaign_id,
                         error=str(e), error_type=type(e).__name__)
            return False
        return True
