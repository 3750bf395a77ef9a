"""Format parser turning provider responses into NormalizedResult records.

Each transport speaks its own wire format:

- ``http``: signals live in ``x-zetascan-*`` response headers
- ``text``: one ``item:found,wl,wldata,score,webscore,source...`` line
- ``json`` / ``jsonx``: a ``{"results": [...]}`` document
- ``dns``: DNSBL answers in the 127.0.0.0/8 block

Only the first item of a response is consulted.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List

import httpx

from .errors import DecodeFailure, TransportFailure
from .models import DnsCategory, ExtendedInfo, NormalizedResult, Reason, Transport

logger = logging.getLogger(__name__)

# The http format has no whitelist header, scores at or below this are whitelisted
WHITELIST_SCORE_THRESHOLD = -0.1

HEADER_ITEMS = "x-zetascan-items"
HEADER_SCORE = "x-zetascan-score"
HEADER_WEBSCORE = "x-zetascan-webscore"
HEADER_SOURCES = "x-zetascan-sources"
HEADER_WL = "x-zetascan-wl"
HEADER_SUCCESS = "x-zetascan-success"
HEADER_STATUS = "x-zetascan-status"

# Item ends at the colon that precedes the two boolean fields (IPv6 safe)
_TEXT_RECORD = re.compile(
    r"^(?P<item>.*?):(?P<fields>(?:true|false),(?:true|false)(?:,.*)?)$",
    re.IGNORECASE,
)

_DNS_PREFIXES = (
    ("127.0.0.", DnsCategory.SPAMHAUS),
    ("127.0.1.", DnsCategory.SPAMHAUS_ABUSE),
    ("127.1.0.", DnsCategory.URIBL),
    ("127.8.0.", DnsCategory.DNSWL),
)


def _parse_float(value: Any, field: str, lenient: bool) -> float:
    """
    Parse a numeric field.

    A missing or blank value is zero. An unparsable value is zero in lenient
    mode and a DecodeFailure otherwise.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        if lenient:
            logger.debug(f"Ignoring unparsable {field} value {value!r}")
            return 0.0
        raise DecodeFailure(f"Invalid {field} value: {value!r}")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _json_bool(value: Any, field: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeFailure(f"Invalid JSON response: {field} is not a boolean: {value!r}")
    return value


def _json_number(value: Any, field: str) -> float:
    if value is None:
        return 0.0
    # bool is an int subclass but never a valid number on the wire
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeFailure(f"Invalid JSON response: {field} is not a number: {value!r}")
    return float(value)


def _split_sources(value: str, separator: str) -> List[str]:
    return [source.strip() for source in value.split(separator) if source.strip()]


def parse_http_headers(
    headers: "httpx.Headers | Dict[str, str]",
    status_code: int,
    item: str = "",
    lenient: bool = True
) -> NormalizedResult:
    """
    Build a result from the ``http`` transport's response headers.

    Args:
        headers: Response headers (case-insensitive mapping)
        status_code: HTTP status, 204 means nothing matched
        item: Queried item, used when the response does not echo it
        lenient: Default unparsable scores to zero instead of failing

    Returns:
        NormalizedResult with ``wl`` inferred from the score
    """
    headers = httpx.Headers(headers)

    result = NormalizedResult(
        item=headers.get(HEADER_ITEMS, "").strip() or item,
        transport=Transport.HTTP,
    )
    result.score = _parse_float(headers.get(HEADER_SCORE), "score", lenient)
    result.web_score = _parse_float(headers.get(HEADER_WEBSCORE), "webscore", lenient)
    result.sources = _split_sources(headers.get(HEADER_SOURCES, ""), ";")

    wl_data = headers.get(HEADER_WL, "")
    result.wl_data = "" if wl_data.lower() == "null" else wl_data
    result.status = headers.get(HEADER_SUCCESS) or headers.get(HEADER_STATUS, "")

    # No content: nothing matched, whatever the score headers say
    if status_code == httpx.codes.NO_CONTENT:
        return result

    result.wl = result.score <= WHITELIST_SCORE_THRESHOLD

    if result.wl:
        result.found = False
    else:
        result.found = result.score > 0

    return result


def parse_text(body: str, item: str = "", lenient: bool = True) -> NormalizedResult:
    """
    Build a result from a ``text`` transport body.

    Format: ``item:found,wl,wldata,score[,webscore,source...]``. When the body
    holds several space separated entries only the first is used.

    Args:
        body: Response body
        item: Queried item, used when the entry's item is blank
        lenient: Default unparsable scores to zero instead of failing

    Returns:
        NormalizedResult

    Raises:
        DecodeFailure: If the entry lacks the item separator or the two flags
    """
    entries = body.split()
    entry = entries[0] if entries else ""

    match = _TEXT_RECORD.match(entry)
    if not match:
        raise DecodeFailure(f"Invalid text response: {body[:200]!r}")

    fields = match.group("fields").split(",")

    result = NormalizedResult(item=match.group("item") or item, transport=Transport.TEXT)
    result.found = _as_bool(fields[0])
    result.wl = _as_bool(fields[1])

    if len(fields) > 2:
        result.wl_data = fields[2]
    if len(fields) > 3:
        result.score = _parse_float(fields[3], "score", lenient)
    if len(fields) > 4:
        result.web_score = _parse_float(fields[4], "webscore", lenient)
    if len(fields) > 5:
        result.sources = [source for source in fields[5:] if source]

    return result


def _extended_from_json(data: Any) -> ExtendedInfo:
    if not isinstance(data, dict):
        return ExtendedInfo()

    reason = data.get("reason")
    if not isinstance(reason, dict):
        reason = {}

    return ExtendedInfo(
        asnum=_as_str(data.get("ASNum")),
        route=_as_str(data.get("route")),
        country=_as_str(data.get("country")),
        domain=_as_str(data.get("domain")),
        state=_as_str(data.get("state")),
        time=_as_str(data.get("time")),
        reason=Reason(
            class_=_as_str(reason.get("class")),
            rule=_as_str(reason.get("rule")),
            type=_as_str(reason.get("type")),
            name=_as_str(reason.get("name")),
            source=_as_str(reason.get("source")),
            port=_as_str(reason.get("port")),
            sourceport=_as_str(reason.get("sourceport")),
            destination=_as_str(reason.get("destination")),
        ),
    )


def parse_json(
    body: "str | bytes",
    item: str = "",
    transport: Transport = Transport.JSON
) -> NormalizedResult:
    """
    Build a result from a ``json`` / ``jsonx`` transport body.

    The provider's ``found`` and ``wl`` flags are trusted as-is. Typed fields
    must carry their JSON type; only a missing field defaults to zero.

    Args:
        body: Response body
        item: Queried item, used when the result does not echo it
        transport: JSON or JSONX, recorded as provenance

    Returns:
        NormalizedResult, zero valued when ``results`` is empty

    Raises:
        DecodeFailure: If the body is not a JSON object with a results list,
            or a flag or number field has the wrong type
    """
    try:
        document = json.loads(body)
    except ValueError as e:
        raise DecodeFailure(f"Invalid JSON response: {e}") from e

    if not isinstance(document, dict):
        raise DecodeFailure("Invalid JSON response: expected an object")

    results = document.get("results") or []
    if not isinstance(results, list):
        raise DecodeFailure("Invalid JSON response: results is not a list")

    entry = results[0] if results else {}
    if not isinstance(entry, dict):
        raise DecodeFailure("Invalid JSON response: result is not an object")

    sources = entry.get("sources") or []
    if isinstance(sources, str):
        sources = [sources]

    return NormalizedResult(
        item=_as_str(entry.get("item")) or item,
        found=_json_bool(entry.get("found"), "found"),
        score=_json_number(entry.get("score"), "score"),
        web_score=_json_number(entry.get("webscore"), "webscore"),
        from_subnet=_json_bool(entry.get("fromSubnet"), "fromSubnet"),
        sources=[_as_str(source) for source in sources],
        wl=_json_bool(entry.get("wl"), "wl"),
        wl_data=_as_str(entry.get("wldata")),
        extended=_extended_from_json(entry.get("extended")),
        execution_time=int(_json_number(document.get("executionTime"), "executionTime")),
        status=_as_str(document.get("status")),
        transport=transport,
    )


def classify_dns_address(address: str) -> DnsCategory:
    """
    Map a DNSBL answer to its category.

    Args:
        address: IP address returned by the zone server

    Returns:
        DnsCategory for the address prefix
    """
    for prefix, category in _DNS_PREFIXES:
        if address.startswith(prefix):
            return category
    if address.startswith("127."):
        return DnsCategory.GENERIC
    return DnsCategory.UNKNOWN


def parse_dns(addresses: Iterable[str], item: str = "") -> NormalizedResult:
    """
    Build a result from DNSBL answers.

    Any 127.* answer outside the 127.8.0.* whitelist block is a blacklist hit.
    Score, whitelist and sources are not available over DNS; the raw answers
    and their categories are kept on the record instead.

    Args:
        addresses: Addresses from the answer section
        item: Queried item

    Returns:
        NormalizedResult
    """
    result = NormalizedResult(item=item, transport=Transport.DNS)

    for address in addresses:
        category = classify_dns_address(address)
        result.return_codes.append(address)
        result.categories.append(category)

        if category not in (DnsCategory.DNSWL, DnsCategory.UNKNOWN):
            result.found = True

    return result


def parse_response(
    response: httpx.Response,
    declared_format: str,
    item: str = "",
    lenient: bool = True
) -> NormalizedResult:
    """
    Parse an HTTP response according to the transport that requested it.

    Args:
        response: Response from the check endpoint
        declared_format: http, text, json or jsonx
        item: Queried item
        lenient: Default unparsable header and text numbers to zero instead
            of failing

    Returns:
        NormalizedResult; zero valued for an unknown format

    Raises:
        TransportFailure: If the body cannot be read
        DecodeFailure: If the body cannot be decoded
    """
    try:
        response.read()
    except (httpx.HTTPError, httpx.StreamError) as e:
        raise TransportFailure(f"Failed to read response body: {e}") from e

    fmt = declared_format.lower()

    if fmt == Transport.HTTP.value:
        return parse_http_headers(response.headers, response.status_code, item, lenient)

    if fmt in (Transport.TEXT.value, Transport.JSON.value, Transport.JSONX.value):
        # Empty body: nothing matched
        if response.status_code == httpx.codes.NO_CONTENT or not response.content.strip():
            return NormalizedResult(item=item, transport=Transport(fmt))

        if fmt == Transport.TEXT.value:
            return parse_text(response.text, item, lenient)
        return parse_json(response.content, item, Transport(fmt))

    logger.warning(f"Unknown response format {declared_format!r}, returning an empty result")
    return NormalizedResult(item=item)
