"""Client for the Zetascan domain and IP reputation service."""

__version__ = "2.0.0"

from .client import ZetascanClient
from .config import ApiConfig, init_config
from .errors import (
    ConfigurationError,
    DecodeFailure,
    ForbiddenError,
    MalformedRequestError,
    TransportFailure,
    ZetascanError,
)
from .evaluator import is_blacklisted, is_match, is_whitelisted, score, web_score
from .models import DnsCategory, NormalizedResult, Transport
from .parser import parse_response

__all__ = [
    "ApiConfig",
    "ConfigurationError",
    "DecodeFailure",
    "DnsCategory",
    "ForbiddenError",
    "MalformedRequestError",
    "NormalizedResult",
    "Transport",
    "TransportFailure",
    "ZetascanClient",
    "ZetascanError",
    "init_config",
    "is_blacklisted",
    "is_match",
    "is_whitelisted",
    "parse_response",
    "score",
    "web_score",
]
