"""Tests for request fact extraction."""

import pytest
from starlette.requests import Request

from app.core.request_facts import RequestFacts, facts_from_request, normalize_entry_domain


def _facts(**overrides):
    fields = dict(host="promo.example.com", slug="promo")
    fields.update(overrides)
    return RequestFacts(**fields)


class TestClientIp:
    def test_first_forwarded_hop(self):
        f = _facts(forwarded_for=" 203.0.113.7 , 10.0.0.1", real_ip="198.51.100.2", peer_ip="10.0.0.9")
        assert f.client_ip == "203.0.113.7"

    def test_real_ip_fallback(self):
        assert _facts(real_ip="198.51.100.2", peer_ip="10.0.0.9").client_ip == "198.51.100.2"

    def test_peer_fallback(self):
        assert _facts(peer_ip="10.0.0.9").client_ip == "10.0.0.9"

    def test_unknown(self):
        assert _facts().client_ip == "unknown"


@pytest.mark.parametrize("host, domain", [
    ("promo.example.com", "promo.example.com"),
    ("WWW.Promo.Example.com", "promo.example.com"),
    ("www.promo.example.com:8443", "promo.example.com"),
    ("", ""),
])
def test_normalize_entry_domain(host, domain):
    assert normalize_entry_domain(host) == domain
    assert _facts(host=host).entry_domain == domain


def test_facts_from_starlette_request():
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "https",
        "path": "/r/promo",
        "query_string": b"utm_source=fb&fbclid=IwAR0",
        "headers": [
            (b"host", b"www.promo.example.com"),
            (b"user-agent", b"curl/8.0"),
            (b"referer", b"https://l.facebook.com/"),
            (b"x-forwarded-for", b"203.0.113.7, 10.0.0.1"),
            (b"cf-ipcountry", b"BR"),
        ],
        "client": ("10.0.0.1", 51234),
        "server": ("www.promo.example.com", 443),
    }
    f = facts_from_request(Request(scope), "promo")
    assert f.slug == "promo"
    assert f.user_agent == "curl/8.0"
    assert f.referer == "https://l.facebook.com/"
    assert f.client_ip == "203.0.113.7"
    assert f.peer_ip == "10.0.0.1"
    assert f.entry_domain == "promo.example.com"
    assert f.full_url == "https://www.promo.example.com/r/promo?utm_source=fb&fbclid=IwAR0"
    assert f.headers["cf-ipcountry"] == "BR"
