"""Zetascan reputation client: picks the transport and issues the lookup."""

import logging
from typing import TYPE_CHECKING, List, Optional, Tuple
from urllib.parse import quote

import dns.exception
import dns.resolver
import httpx

from . import __version__
from .config import ApiConfig, init_config
from .dns_query import Exchange, query_dns
from .errors import ForbiddenError, MalformedRequestError, TransportFailure
from .models import NormalizedResult
from .parser import parse_dns, parse_response
from .utils import is_ip_address, normalize_item

if TYPE_CHECKING:
    from .verify import VerificationResult

logger = logging.getLogger(__name__)


class ZetascanClient:
    """
    Synchronous client for Zetascan reputation lookups.

    Features:
    - http, text, json and jsonx lookups over HTTP(S)
    - DNSBL lookups against the zone server with timeout retries
    - One NormalizedResult per lookup, whatever the transport
    """

    def __init__(
        self,
        config: Optional[ApiConfig] = None,
        http_client: Optional[httpx.Client] = None,
        dns_exchange: Optional[Exchange] = None
    ):
        self.config = config or init_config()
        self.dns_exchange = dns_exchange

        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(
            headers={"User-Agent": f"zetascan-python/{__version__}"}
        )

    def __enter__(self) -> "ZetascanClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self.client.close()

    def build_url(self, item: str) -> str:
        """
        Build the check URL for an item.

        Args:
            item: Normalized domain or IP

        Returns:
            ``{protocol}://{host}/{version}/check/{method}/{item}``, with the
            API key as ``key`` query parameter when one is configured
        """
        config = self.config
        url = (
            f"{config.protocol}://{config.host}/{config.version}"
            f"/check/{config.method}/{quote(item, safe='')}"
        )

        if config.api_key:
            url += "?" + str(httpx.QueryParams({"key": config.api_key}))

        return url

    def query(self, item: str) -> NormalizedResult:
        """
        Look up the reputation of a domain or IP.

        Args:
            item: Domain or IP address

        Returns:
            NormalizedResult for the item

        Raises:
            MalformedRequestError: The provider answered 404
            ForbiddenError: The provider answered 403
            TransportFailure: Network, DNS or unexpected HTTP failure
            DecodeFailure: The response body could not be decoded
        """
        item = normalize_item(item)

        if self.config.method == "dns":
            return self.query_dns(item)
        return self.query_http(item)

    def query_http(self, item: str) -> NormalizedResult:
        """Look up an item over HTTP with the configured response format."""
        url = self.build_url(item)
        # Never log or report the key
        safe_url = url.split("?", 1)[0]

        logger.debug(f"Requesting {self.config.method} reputation for {item}")

        try:
            with self.client.stream("GET", url) as response:
                if response.status_code == httpx.codes.NOT_FOUND:
                    raise MalformedRequestError(safe_url)

                if response.status_code == httpx.codes.FORBIDDEN:
                    raise ForbiddenError(safe_url)

                if response.is_error:
                    raise TransportFailure(
                        f"HTTP {response.status_code} from {safe_url}"
                    )

                return parse_response(
                    response,
                    self.config.method,
                    item,
                    lenient=self.config.lenient_numeric_parsing,
                )

        except httpx.HTTPError as e:
            logger.warning(f"Request failed for {item}: {e}")
            raise TransportFailure(f"Request for {item} failed: {e}") from e

    def query_dns(self, item: str) -> NormalizedResult:
        """Look up an item as a DNSBL question."""
        name, nameserver = self._dns_target(item)

        logger.debug(f"Querying {nameserver} for {name} ({self.config.dns_type})")

        addresses = query_dns(
            name,
            nameserver,
            port=self.config.dns_port,
            record_type=self.config.dns_type,
            attempts=self.config.dns_retries,
            timeout=self.config.dns_timeout,
            exchange=self.dns_exchange,
        )
        return parse_dns(addresses, item)

    def verify(self, verbose: bool = False) -> List["VerificationResult"]:
        """Run the self-test battery through this client."""
        from .verify import run_verification

        return run_verification(self, verbose=verbose)

    def _dns_target(self, item: str) -> Tuple[str, str]:
        """
        Return the question name and the server to send it to.

        ``nameserver`` asks the zone server for the item directly.
        ``zone`` asks ``{item}.{key}.{host}`` through the system resolver.
        """
        config = self.config

        try:
            if config.dns_method == "zone":
                resolver = dns.resolver.get_default_resolver()
                return f"{item}.{config.api_key}.{config.host}", resolver.nameservers[0]

            if is_ip_address(config.host):
                return item, config.host

            answer = dns.resolver.resolve(config.host, "A")
            return item, answer[0].address

        except (dns.exception.DNSException, IndexError) as e:
            raise TransportFailure(f"Cannot resolve zone server {config.host}: {e}") from e
