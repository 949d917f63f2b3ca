"""
Inbound request facts — the fixed set of request values the pipeline reads.

Keeps the detectors decoupled from any web framework: the API layer copies
what it needs out of the Starlette request once, and everything downstream
works on this struct.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field


def normalize_entry_domain(value: str) -> str:
    """Host → entry domain: drop port, lowercase, strip a leading www."""
    domain = (value or "").strip().split(":")[0].lower()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


@dataclass(frozen=True)
class RequestFacts:
    host: str
    slug: str
    user_agent: str = ""
    referer: str | None = None
    forwarded_for: str | None = None
    real_ip: str | None = None
    peer_ip: str | None = None
    full_url: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)  # lower-cased names

    @property
    def client_ip(self) -> str:
        """First hop of x-forwarded-for, else x-real-ip, else the socket peer."""
        if self.forwarded_for:
            first = self.forwarded_for.split(",")[0].strip()
            if first:
                return first
        if self.real_ip and self.real_ip.strip():
            return self.real_ip.strip()
        return self.peer_ip or "unknown"

    @property
    def entry_domain(self) -> str:
        return normalize_entry_domain(self.host)


def facts_from_request(request, slug: str) -> RequestFacts:
    """Build RequestFacts from a Starlette/FastAPI request."""
    headers = {k.lower(): v for k, v in request.headers.items()}
    host = headers.get("host", "")

    full_url = f"https://{host}{request.url.path}"
    if request.url.query:
        full_url = f"{full_url}?{request.url.query}"

    return RequestFacts(
        host=host,
        slug=slug,
        user_agent=headers.get("user-agent", ""),
        referer=headers.get("referer"),
        forwarded_for=headers.get("x-forwarded-for"),
        real_ip=headers.get("x-real-ip"),
        peer_ip=request.client.host if request.client else None,
        full_url=full_url,
        headers=headers,
    )
