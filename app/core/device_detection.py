"""
Device detection — Layer 2.

Precedence (first match wins):
  1. Missing UA            → unknown
  2. In-app social browser → mobile (these UAs often carry desktop tokens)
  3. Tablet signatures     → tablet
  4. Mobile signatures     → mobile
  5. Generic "mobile"      → mobile
  6. Desktop OS signatures → desktop
  7. Nothing matched       → desktop (automated clients rarely carry tokens)
"""

from dataclasses import dataclass
from enum import Enum

from app.core.signatures import (
    DESKTOP_PATTERNS,
    DEVICE_IN_APP_PATTERNS,
    GENERIC_MOBILE_TOKEN,
    MOBILE_PATTERNS,
    TABLET_PATTERNS,
    any_match,
)
from app.core.verdict import ALLOW, LayerVerdict


class DeviceType(str, Enum):
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DeviceDetection:
    device_type: DeviceType
    reason: str

    @property
    def is_mobile(self) -> bool:
        # Tablets are treated as mobile for blocking purposes
        return self.device_type in (DeviceType.MOBILE, DeviceType.TABLET)

    @property
    def is_tablet(self) -> bool:
        return self.device_type == DeviceType.TABLET

    @property
    def is_desktop(self) -> bool:
        return self.device_type == DeviceType.DESKTOP


def detect_device(user_agent: str | None) -> DeviceDetection:
    if not user_agent or not user_agent.strip():
        return DeviceDetection(DeviceType.UNKNOWN, "Missing User-Agent")

    if any_match(DEVICE_IN_APP_PATTERNS, user_agent):
        return DeviceDetection(DeviceType.MOBILE, "In-App Browser (Social Media App)")

    # Tablets before phones: several tablets also match phone patterns
    if any_match(TABLET_PATTERNS, user_agent):
        return DeviceDetection(DeviceType.TABLET, "Tablet Device")

    if any_match(MOBILE_PATTERNS, user_agent):
        return DeviceDetection(DeviceType.MOBILE, "Mobile Device")

    if GENERIC_MOBILE_TOKEN.search(user_agent):
        return DeviceDetection(DeviceType.MOBILE, "Mobile Browser")

    if any_match(DESKTOP_PATTERNS, user_agent):
        return DeviceDetection(DeviceType.DESKTOP, "Desktop Browser")

    return DeviceDetection(DeviceType.DESKTOP, "Unknown (Defaulting to Desktop)")


def should_block_device(detection: DeviceDetection, block_desktop: bool) -> LayerVerdict:
    """Block desktops when the campaign asks for it."""
    if block_desktop and detection.is_desktop:
        return LayerVerdict(should_block=True, reason=f"Desktop Blocked: {detection.reason}")
    return ALLOW
