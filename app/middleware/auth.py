"""
Reporting API authentication.

Access logs and stats are operator data. A single reporting key, configured
via CG_REPORTING_API_KEY, guards every /api/campaigns/* and /api/stats read:
  - Sent in the X-API-Key header
  - Compared in constant time
  - Unset key → reporting endpoints answer 404 (feature disabled)

The redirect path itself is public and never authenticated.
"""

import hmac

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from app.config import get_settings

import structlog

logger = structlog.get_logger()

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_reporting_key(api_key: str | None = Security(api_key_header)) -> None:
    """Require the reporting API key."""
    expected = get_settings().reporting_api_key
    if not expected:
        raise HTTPException(status_code=404, detail="Not found")

    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API key. Include X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not hmac.compare_digest(api_key.encode(), expected.encode()):
        logger.warning("reporting_key_rejected")
        raise HTTPException(
            status_code=401,
            detail="Invalid API key.",
            headers={"WWW-Authenticate": "ApiKey"},
        )
