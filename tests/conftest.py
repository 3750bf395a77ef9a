"""Shared fixtures: an in-process fake of the Zetascan provider."""

import dns.message
import dns.rrset
import httpx
import pytest

from zetascan.client import ZetascanClient
from zetascan.config import init_config

BLACKLISTED = {
    "baddomain.org": "127.0.0.2",
    "127.9.9.1": "127.0.1.2",
    "127.9.9.2": "127.1.0.4",
    "127.9.9.3": "127.0.0.10",
}
WHITELISTED = {"okdomain.org": "127.8.0.1"}
CLEAN = {"127.9.9.4"}

DNS_SERVER = "192.0.2.53"
FORBIDDEN_KEY = "revoked-key"


def _http_response(item: str) -> httpx.Response:
    if item in BLACKLISTED:
        return httpx.Response(200, text="OK", headers={
            "x-zetascan-items": item,
            "x-zetascan-score": "1",
            "x-zetascan-webscore": "0.6",
            "x-zetascan-sources": "DBL;RED;GREY",
            "x-zetascan-wl": "null",
            "x-zetascan-success": "success",
        })
    if item in WHITELISTED:
        return httpx.Response(200, text="OK", headers={
            "x-zetascan-items": item,
            "x-zetascan-score": "-0.1",
            "x-zetascan-webscore": "-0.1",
            "x-zetascan-sources": "WHITE",
            "x-zetascan-wl": "white",
            "x-zetascan-success": "success",
        })
    return httpx.Response(204)


def _text_response(item: str) -> httpx.Response:
    if item in BLACKLISTED:
        return httpx.Response(200, text=f"{item}:true,false,,0.95,0.6,xbl,sbl")
    if item in WHITELISTED:
        return httpx.Response(200, text=f"{item}:false,true,,-0.1,-0.1,white")
    return httpx.Response(200, text=f"{item}:false,false,,0,0")


def _json_response(item: str) -> httpx.Response:
    result = {
        "item": item,
        "found": item in BLACKLISTED,
        "score": 0.95 if item in BLACKLISTED else 0,
        "webscore": 0.6 if item in BLACKLISTED else 0,
        "fromSubnet": False,
        "sources": ["xbl"] if item in BLACKLISTED else [],
        "wl": item in WHITELISTED,
        "wldata": "",
    }
    if item in BLACKLISTED:
        result["extended"] = {
            "ASNum": "64496",
            "route": "192.0.2.0/24",
            "country": "ZZ",
            "domain": item,
            "state": "",
            "time": "1500970900",
            "reason": {"class": "spam", "rule": "r1", "type": "ip"},
        }
    return httpx.Response(200, json={
        "results": [result],
        "executionTime": 2,
        "status": "success",
    })


RESPONDERS = {
    "http": _http_response,
    "text": _text_response,
    "json": _json_response,
    "jsonx": _json_response,
}


def provider_handler(request: httpx.Request) -> httpx.Response:
    """Answer /{version}/check/{method}/{item} like the real service."""
    parts = request.url.path.strip("/").split("/")

    if len(parts) != 4 or parts[0] != "v2" or parts[1] != "check" or parts[2] not in RESPONDERS:
        return httpx.Response(404)

    if request.url.params.get("key") == FORBIDDEN_KEY:
        return httpx.Response(403)

    return RESPONDERS[parts[2]](parts[3])


def provider_exchange(query, where, timeout=None, port=53):
    """Answer DNSBL questions like the zone server."""
    question = query.question[0]
    name = question.name.to_text(omit_final_dot=True)
    response = dns.message.make_response(query)

    address = BLACKLISTED.get(name) or WHITELISTED.get(name)
    if address:
        response.answer.append(dns.rrset.from_text(question.name, 300, "IN", "A", address))

    return response


@pytest.fixture
def http_client():
    """HTTP client wired to the fake provider."""
    with httpx.Client(transport=httpx.MockTransport(provider_handler)) as client:
        yield client


@pytest.fixture
def make_client(http_client):
    """Factory building a ZetascanClient for a method against the fake provider."""
    def factory(method: str = "http", **overrides) -> ZetascanClient:
        if method == "dns":
            overrides.setdefault("host", DNS_SERVER)
        config = init_config(method=method, **overrides)
        return ZetascanClient(config, http_client=http_client, dns_exchange=provider_exchange)

    return factory
