"""Client configuration for the Zetascan API.

The configuration is an immutable value: build it once with
:func:`init_config` (or :meth:`ApiConfig.from_env`) and derive variants with
:meth:`ApiConfig.with_method` / :meth:`ApiConfig.toggle_ssl`, which return
validated copies.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from .errors import ConfigurationError

DEFAULT_HOST = "api.zetascan.com"
DEFAULT_VERSION = "v2"

HTTP_METHODS = ("http", "text", "json", "jsonx")
METHODS = HTTP_METHODS + ("dns",)
PROTOCOLS = ("http", "https")
DNS_METHODS = ("nameserver", "zone")
DNS_TYPES = ("A", "AAAA")

_TRUE_VALUES = ("true", "1", "yes")


@dataclass(frozen=True)
class ApiConfig:
    """Connection settings shared by every query."""

    api_key: Optional[str] = None
    host: str = DEFAULT_HOST
    protocol: str = "https"
    method: str = "http"
    version: str = DEFAULT_VERSION
    dns_method: str = "nameserver"
    dns_type: str = "A"
    ip_check: bool = False
    dns_port: int = 53
    dns_timeout: float = 2.0
    dns_retries: int = 3
    lenient_numeric_parsing: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check the configuration for invalid combinations.

        Raises:
            ConfigurationError: If a value is unknown or the key would be
                sent in clear text without IP based authorization.
        """
        if self.method not in METHODS:
            raise ConfigurationError(
                f"Unknown method {self.method!r}, expected one of {', '.join(METHODS)}"
            )
        if self.protocol not in PROTOCOLS:
            raise ConfigurationError(f"Unknown protocol {self.protocol!r}")
        if self.dns_method not in DNS_METHODS:
            raise ConfigurationError(f"Unknown DNS method {self.dns_method!r}")
        if self.dns_type not in DNS_TYPES:
            raise ConfigurationError(f"Unsupported DNS record type {self.dns_type!r}")
        if self.dns_retries < 1:
            raise ConfigurationError("dns_retries must allow at least one attempt")
        if self.dns_method == "zone" and not self.api_key:
            raise ConfigurationError("DNS zone lookups require an API key")

        if self.protocol == "http" and self.api_key and not self.ip_check:
            raise ConfigurationError("https required if using API key without ip check")

    @property
    def ssl(self) -> bool:
        return self.protocol == "https"

    def with_method(self, method: str) -> "ApiConfig":
        """Return a copy that queries with another transport method."""
        return replace(self, method=method)

    def toggle_ssl(self, ssl: bool) -> "ApiConfig":
        """Return a copy using https when ``ssl`` is true, plain http otherwise."""
        return replace(self, protocol="https" if ssl else "http")

    def get_conf(self) -> Optional[str]:
        """Return the API key in use."""
        return self.api_key

    @classmethod
    def from_env(cls) -> "ApiConfig":
        """
        Load configuration from ZETASCAN_* environment variables.

        Returns:
            Validated configuration instance

        Raises:
            ConfigurationError: If the resulting combination is invalid
        """
        ssl = os.getenv("ZETASCAN_SSL", "true").lower() in _TRUE_VALUES
        ip_check = os.getenv("ZETASCAN_IP_CHECK", "false").lower() in _TRUE_VALUES

        return init_config(
            api_key=os.getenv("ZETASCAN_API_KEY") or None,
            ip_check=ip_check,
            ssl=ssl,
            method=os.getenv("ZETASCAN_METHOD", "http").lower(),
            host=os.getenv("ZETASCAN_HOST", DEFAULT_HOST),
        )


def init_config(
    api_key: Optional[str] = None,
    ip_check: bool = False,
    ssl: bool = True,
    method: str = "http",
    **overrides
) -> ApiConfig:
    """
    Build the configuration used by :class:`~zetascan.client.ZetascanClient`.

    Without an API key the provider authorizes requests by source IP, so
    ``ip_check`` must reflect that arrangement. A key sent over plain http is
    only accepted when IP authorization is also in place.

    Args:
        api_key: Optional API key, appended to every request
        ip_check: Whether the provider verifies the caller's IP
        ssl: Use https (default) or plain http
        method: Transport method (http, text, json, jsonx, dns)
        **overrides: Any other ApiConfig field; an explicit ``protocol``
            takes precedence over ``ssl``

    Returns:
        Immutable ApiConfig

    Raises:
        ConfigurationError: On an invalid combination
    """
    protocol = overrides.pop("protocol", "https" if ssl else "http")

    return ApiConfig(
        api_key=api_key or None,
        ip_check=ip_check,
        protocol=protocol,
        method=method,
        **overrides
    )
