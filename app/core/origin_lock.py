"""
Origin lock — Layer 4.

Hybrid OR-gate: a click is legitimate if EITHER
  a) the URL (query string or fragment) carries the ad-network click id
     (fbclid), OR
  b) the User-Agent is a Meta-family in-app browser.

Neither → organic/direct traffic on a campaign link, which is what manual
inspection by a competitor or a scraper looks like.
"""

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from app.core.signatures import AD_CLICK_ID_PARAM, ORIGIN_IN_APP_SIGNATURES, first_match
from app.core.verdict import ALLOW, LayerVerdict

_AD_CLICK_ID_RE = re.compile(rf"(?:^|[?&;]){re.escape(AD_CLICK_ID_PARAM)}=")


@dataclass(frozen=True)
class OriginLockResult:
    is_legitimate: bool
    has_ad_click_id: bool
    is_in_app_browser: bool
    in_app_browser_name: str | None
    reason: str


def _has_ad_click_id(url: str) -> bool:
    """Look for the click id in the query string and in the fragment."""
    if not url:
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        # Unparseable URL: fall back to a plain substring probe
        return f"{AD_CLICK_ID_PARAM}=" in url
    return bool(_AD_CLICK_ID_RE.search(parts.query) or _AD_CLICK_ID_RE.search(parts.fragment))


def _detect_in_app_browser(user_agent: str | None) -> str | None:
    if not user_agent:
        return None
    signature = first_match(ORIGIN_IN_APP_SIGNATURES, user_agent)
    return signature.label if signature else None


def detect_origin_lock(full_url: str, user_agent: str | None) -> OriginLockResult:
    has_click_id = _has_ad_click_id(full_url)
    in_app_name = _detect_in_app_browser(user_agent)
    in_app = in_app_name is not None

    if has_click_id:
        return OriginLockResult(
            is_legitimate=True,
            has_ad_click_id=True,
            is_in_app_browser=in_app,
            in_app_browser_name=in_app_name,
            reason=f"Legitimate click: {AD_CLICK_ID_PARAM} present",
        )

    if in_app:
        return OriginLockResult(
            is_legitimate=True,
            has_ad_click_id=False,
            is_in_app_browser=True,
            in_app_browser_name=in_app_name,
            reason=f"Legitimate click: in-app browser ({in_app_name})",
        )

    return OriginLockResult(
        is_legitimate=False,
        has_ad_click_id=False,
        is_in_app_browser=False,
        in_app_browser_name=None,
        reason=f"Direct access without ad trace (no {AD_CLICK_ID_PARAM}, outside in-app browser)",
    )


def should_block_by_origin(result: OriginLockResult, enabled: bool) -> LayerVerdict:
    if not enabled or result.is_legitimate:
        return ALLOW
    return LayerVerdict(should_block=True, reason=result.reason)
