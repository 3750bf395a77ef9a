"""Normalized result records shared by every transport."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List


class Transport(str, Enum):
    """Which wire format produced a result."""
    HTTP = "http"
    TEXT = "text"
    JSON = "json"
    JSONX = "jsonx"
    DNS = "dns"
    UNKNOWN = "unknown"


class DnsCategory(str, Enum):
    """Meaning of a DNSBL answer, keyed by its address prefix."""
    SPAMHAUS = "spamhaus"  # 127.0.0.*
    SPAMHAUS_ABUSE = "spamhaus_abuse"  # 127.0.1.*
    URIBL = "uribl"  # 127.1.0.*
    DNSWL = "dnswl"  # 127.8.0.*, whitelist
    GENERIC = "generic"  # any other 127.*
    UNKNOWN = "unknown"  # outside 127.0.0.0/8


@dataclass
class Reason:
    """Why an item is listed, as reported by the JSON transport."""
    class_: str = ""
    rule: str = ""
    type: str = ""
    name: str = ""
    source: str = ""
    port: str = ""
    sourceport: str = ""
    destination: str = ""


@dataclass
class ExtendedInfo:
    """Network context for a listed item (JSON transport only)."""
    asnum: str = ""
    route: str = ""
    country: str = ""
    domain: str = ""
    state: str = ""
    time: str = ""
    reason: Reason = field(default_factory=Reason)


_COMMON_SIGNALS = frozenset({"item", "found", "score", "web_score", "sources", "wl", "wl_data"})

# Fields each transport actually fills; anything else is a zero default.
SIGNALS_BY_TRANSPORT: Dict[Transport, FrozenSet[str]] = {
    Transport.HTTP: _COMMON_SIGNALS | {"status"},
    Transport.TEXT: _COMMON_SIGNALS,
    Transport.JSON: _COMMON_SIGNALS | {"from_subnet", "extended", "execution_time", "status"},
    Transport.JSONX: _COMMON_SIGNALS | {"from_subnet", "extended", "execution_time", "status"},
    Transport.DNS: frozenset({"item", "found", "return_codes", "categories"}),
    Transport.UNKNOWN: frozenset(),
}


@dataclass
class NormalizedResult:
    """
    One reputation answer for one queried item.

    Every transport produces this record, but not every transport fills
    every field. ``transport`` records the provenance and :meth:`provides`
    tells whether a field carries a real signal for it.
    """
    item: str = ""
    found: bool = False
    score: float = 0.0
    web_score: float = 0.0
    from_subnet: bool = False
    sources: List[str] = field(default_factory=list)
    wl: bool = False
    wl_data: str = ""
    extended: ExtendedInfo = field(default_factory=ExtendedInfo)
    execution_time: int = 0
    status: str = ""
    transport: Transport = Transport.UNKNOWN
    return_codes: List[str] = field(default_factory=list)
    categories: List[DnsCategory] = field(default_factory=list)

    def provides(self, field_name: str) -> bool:
        """Return True if the producing transport fills ``field_name``."""
        return field_name in SIGNALS_BY_TRANSPORT[self.transport]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary using the provider's wire keys."""
        extended = asdict(self.extended)
        extended["ASNum"] = extended.pop("asnum")
        extended["reason"]["class"] = extended["reason"].pop("class_")

        return {
            "item": self.item,
            "found": self.found,
            "score": self.score,
            "webscore": self.web_score,
            "fromSubnet": self.from_subnet,
            "sources": list(self.sources),
            "wl": self.wl,
            "wldata": self.wl_data,
            "extended": extended,
            "executionTime": self.execution_time,
            "status": self.status,
            "transport": self.transport.value,
            "returnCodes": list(self.return_codes),
            "categories": [category.value for category in self.categories],
        }
