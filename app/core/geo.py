"""
Geo detection — Layer 3.

The country signal is taken from the trusted edge first:
  1. Platform edge header (x-vercel-ip-country by default)
  2. CDN header (cf-ipcountry by default)
  3. Optional third-party IP → country lookup (ip-api.com contract)

The lookup is bounded by a short timeout and fails open: any error yields
an unknown country, and an unknown country never blocks.
"""

import asyncio
import ipaddress
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from app.config import get_settings
from app.core.verdict import ALLOW, LayerVerdict

import structlog

logger = structlog.get_logger()


COUNTRY_NAMES: dict[str, str] = {
    "BR": "Brazil",
    "US": "United States",
    "PT": "Portugal",
    "ES": "Spain",
    "AR": "Argentina",
    "MX": "Mexico",
    "CO": "Colombia",
    "CL": "Chile",
    "PE": "Peru",
    "VE": "Venezuela",
    "EC": "Ecuador",
    "UY": "Uruguay",
    "PY": "Paraguay",
    "BO": "Bolivia",
    "GB": "United Kingdom",
    "DE": "Germany",
    "FR": "France",
    "IT": "Italy",
    "CA": "Canada",
    "AU": "Australia",
    "JP": "Japan",
    "CN": "China",
    "IN": "India",
    "RU": "Russia",
    "ZA": "South Africa",
    "NG": "Nigeria",
    "EG": "Egypt",
    "AO": "Angola",
    "MZ": "Mozambique",
    "CV": "Cape Verde",
    "GW": "Guinea-Bissau",
    "ST": "São Tomé and Príncipe",
    "TL": "Timor-Leste",
}

AVAILABLE_COUNTRIES: list[dict[str, str]] = [
    {"code": code, "name": name} for code, name in COUNTRY_NAMES.items()
]


@dataclass(frozen=True)
class GeoResult:
    country: str | None = None
    country_name: str | None = None


UNKNOWN = GeoResult()


def get_country_name(code: str) -> str:
    code = code.upper()
    return COUNTRY_NAMES.get(code, code)


def _from_code(code: str) -> GeoResult:
    code = code.strip().upper()
    return GeoResult(country=code, country_name=get_country_name(code))


def detect_country_from_headers(headers: Mapping[str, str]) -> GeoResult:
    """Read the country from trusted edge headers (lower-cased names)."""
    settings = get_settings()
    for name in (settings.geo_primary_header, settings.geo_secondary_header):
        value = headers.get(name.lower())
        if value and value.strip():
            return _from_code(value)
    return UNKNOWN


def _is_public_ip(ip: str) -> bool:
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return not (addr.is_private or addr.is_loopback or addr.is_link_local
                or addr.is_reserved or addr.is_unspecified)


class IpGeoLocator:
    """
    Third-party IP → country fallback.
    Never raises — a slow or broken provider must not delay the redirect.
    """

    def __init__(
        self,
        url_template: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.url_template = url_template or settings.geo_ip_lookup_url
        self.timeout = timeout if timeout is not None else settings.geo_ip_lookup_timeout_seconds
        self._transport = transport

    async def lookup(self, ip: str | None) -> GeoResult:
        if not ip or not _is_public_ip(ip):
            return UNKNOWN

        url = self.url_template.format(ip=ip)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                # httpx times each phase separately; cap the whole request too
                resp = await asyncio.wait_for(client.get(url), self.timeout)
            if resp.status_code != 200:
                logger.warning("geo_lookup_failed", ip=ip, status=resp.status_code)
                return UNKNOWN
            data = resp.json()
        except asyncio.TimeoutError:
            logger.warning("geo_lookup_failed", ip=ip, error="timeout", timeout=self.timeout)
            return UNKNOWN
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("geo_lookup_failed", ip=ip, error=str(e))
            return UNKNOWN

        if not isinstance(data, dict) or data.get("status") != "success" or not data.get("countryCode"):
            return UNKNOWN

        code = str(data["countryCode"]).upper()
        return GeoResult(country=code, country_name=data.get("country") or get_country_name(code))


async def resolve_country(
    headers: Mapping[str, str],
    ip: str | None = None,
    locator: IpGeoLocator | None = None,
) -> GeoResult:
    """Edge headers first, optional IP lookup second, else unknown."""
    result = detect_country_from_headers(headers)
    if result.country or locator is None:
        return result
    return await locator.lookup(ip)


def should_block_by_country(
    detected_country: str | None,
    blocked_countries: list[str] | None,
) -> LayerVerdict:
    """Exact, case-insensitive membership. Unknown country never blocks."""
    if not blocked_countries or not detected_country:
        return ALLOW

    code = detected_country.upper()
    if code in {c.upper() for c in blocked_countries}:
        return LayerVerdict(
            should_block=True,
            reason=f"Country blocked: {get_country_name(code)} ({code})",
        )
    return ALLOW
