"""DNSBL lookups against the Zetascan zone server with bounded retries."""

import logging
from typing import Callable, List, Optional

import dns.exception
import dns.message
import dns.query
import dns.rdatatype
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_none,
)
from tenacity.wait import wait_base

from .errors import TransportFailure

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
DEFAULT_TIMEOUT = 2.0

_ADDRESS_TYPES = (dns.rdatatype.A, dns.rdatatype.AAAA)

Exchange = Callable[..., dns.message.Message]


def build_query(name: str, record_type: str = "A") -> dns.message.Message:
    """
    Build a recursive DNS question for ``name``.

    Args:
        name: Domain or IP to ask about
        record_type: Record type (A by default)

    Returns:
        Query message with the RD flag set
    """
    return dns.message.make_query(name, record_type)


def extract_addresses(response: dns.message.Message) -> List[str]:
    """Return the A/AAAA addresses from a response's answer section."""
    addresses = []
    for rrset in response.answer:
        if rrset.rdtype not in _ADDRESS_TYPES:
            continue
        for rdata in rrset:
            addresses.append(rdata.address)
    return addresses


def _log_retry(retry_state: RetryCallState) -> None:
    logger.debug(
        f"DNS query timed out (attempt {retry_state.attempt_number}), retrying"
    )


def query_dns(
    name: str,
    nameserver: str,
    port: int = 53,
    record_type: str = "A",
    attempts: int = DEFAULT_ATTEMPTS,
    timeout: float = DEFAULT_TIMEOUT,
    exchange: Optional[Exchange] = None,
    wait: Optional[wait_base] = None
) -> List[str]:
    """
    Query the zone server, retrying only when the exchange times out.

    Zone servers are often rate limited or congested, so a timeout is not a
    negative answer. Any other failure ends the lookup immediately.

    Args:
        name: Domain or IP to look up
        nameserver: Zone server IP address
        port: Zone server port
        record_type: Record type to ask for
        attempts: Total attempts allowed, including the first
        timeout: Per-attempt timeout in seconds
        exchange: Callable sending the query, ``dns.query.udp`` by default
        wait: Tenacity wait strategy between attempts (none by default)

    Returns:
        Addresses from the answer section (empty when not listed)

    Raises:
        ValueError: If attempts is below 1
        TransportFailure: If the name cannot be queried, on a non-timeout
            failure or when every attempt timed out
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    exchange = exchange or dns.query.udp

    try:
        query = build_query(name, record_type)
    except dns.exception.DNSException as e:
        raise TransportFailure(f"Invalid DNS question {name!r}: {e}") from e

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait or wait_none(),
        retry=retry_if_exception_type(dns.exception.Timeout),
        before_sleep=_log_retry,
        reraise=True,
    )

    try:
        response = retrying(exchange, query, nameserver, timeout=timeout, port=port)
    except dns.exception.Timeout as e:
        raise TransportFailure(
            f"DNS query for {name} timed out after {attempts} attempt(s)"
        ) from e
    except (dns.exception.DNSException, OSError) as e:
        raise TransportFailure(f"DNS query for {name} failed: {e}") from e

    return extract_addresses(response)
