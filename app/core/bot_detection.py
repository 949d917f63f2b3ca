"""
Bot detection — Layer 1.

Classifies a User-Agent string as automated or not. Strict first-match
order:
  1. Missing / blank UA                      → bot (high)
  2. Known automation signature table        → bot (high), label is the reason
  3. Suspicious minimal UAs                  → bot (medium)
  4. UA shorter than 20 chars                → bot (medium)
  5. No browser-engine and no mobile-OS token → bot (medium)
  6. Otherwise                               → human (low)

Pure function of the UA string; malformed input degrades to a verdict,
never an exception.
"""

from dataclasses import dataclass
from enum import Enum

from app.core.signatures import (
    BOT_SIGNATURES,
    BROWSER_ENGINE_TOKENS,
    MIN_USER_AGENT_LENGTH,
    MOBILE_OS_TOKENS,
    SUSPICIOUS_SIGNATURES,
    first_match,
)


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class BotDetection:
    is_bot: bool
    reason: str | None
    confidence: Confidence


def detect_bot(user_agent: str | None) -> BotDetection:
    """Classify a User-Agent string as bot / non-bot."""
    if not user_agent or not user_agent.strip():
        return BotDetection(is_bot=True, reason="Missing User-Agent", confidence=Confidence.HIGH)

    signature = first_match(BOT_SIGNATURES, user_agent)
    if signature:
        return BotDetection(is_bot=True, reason=signature.label, confidence=Confidence.HIGH)

    signature = first_match(SUSPICIOUS_SIGNATURES, user_agent)
    if signature:
        return BotDetection(is_bot=True, reason=signature.label, confidence=Confidence.MEDIUM)

    # --- Heuristics ---
    if len(user_agent) < MIN_USER_AGENT_LENGTH:
        return BotDetection(
            is_bot=True,
            reason="Suspiciously Short User-Agent",
            confidence=Confidence.MEDIUM,
        )

    if not BROWSER_ENGINE_TOKENS.search(user_agent) and not MOBILE_OS_TOKENS.search(user_agent):
        return BotDetection(is_bot=True, reason="No Browser Signature", confidence=Confidence.MEDIUM)

    return BotDetection(is_bot=False, reason=None, confidence=Confidence.LOW)
