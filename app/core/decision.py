"""
Decision policy — first true layer wins.

Fixed precedence (cheapest / most certain signal first):
  1. Bot         — campaign.block_bots and bot.is_bot
  2. Device      — campaign.block_desktop and device.is_desktop
  3. Geo         — country verdict
  4. Origin lock — origin verdict

Layers are never weighted or combined; only the winning layer's reason is
recorded. The reason prefixes are stored in the access log and must stay
stable for consistency with historical rows.
"""

from dataclasses import dataclass
from typing import Protocol

from app.core.bot_detection import BotDetection
from app.core.device_detection import DeviceDetection, should_block_device
from app.core.verdict import LayerVerdict


class BlockPolicy(Protocol):
    block_bots: bool
    block_desktop: bool


@dataclass(frozen=True)
class Decision:
    blocked: bool
    reason: str | None = None
    layer: int | None = None  # 1-based index of the winning layer


ALLOWED = Decision(blocked=False)


def decide(
    campaign: BlockPolicy,
    bot: BotDetection,
    device: DeviceDetection,
    geo_verdict: LayerVerdict,
    origin_verdict: LayerVerdict,
) -> Decision:
    if campaign.block_bots and bot.is_bot:
        return Decision(blocked=True, reason=f"Layer 1 (Bot): {bot.reason}", layer=1)

    device_verdict = should_block_device(device, bool(campaign.block_desktop))
    if device_verdict.should_block:
        return Decision(blocked=True, reason=f"Layer 2 (Device): {device_verdict.reason}", layer=2)

    if geo_verdict.should_block:
        return Decision(blocked=True, reason=f"Layer 3 (Geo): {geo_verdict.reason}", layer=3)

    if origin_verdict.should_block:
        return Decision(blocked=True, reason=f"Layer 4 (Origin Lock): {origin_verdict.reason}", layer=4)

    return ALLOWED
