"""Reputation questions answered from a NormalizedResult."""

from .models import NormalizedResult


def is_match(result: NormalizedResult) -> bool:
    """Return True if the item matched a blacklist."""
    return result.found


def is_whitelisted(result: NormalizedResult) -> bool:
    """Return True if the item matched a whitelist."""
    return result.wl


def is_blacklisted(result: NormalizedResult) -> bool:
    """Return True if the item is listed and no whitelist entry overrides it."""
    return result.found and not result.wl


def score(result: NormalizedResult) -> float:
    """
    Return the default (MTA) score of a matched item.

    Scores only carry a signal when some list matched, so an unmatched item
    always scores zero.
    """
    if result.found or result.wl:
        return result.score
    return 0.0


def web_score(result: NormalizedResult) -> float:
    """Return the web score of a matched item, zero when nothing matched."""
    if result.found or result.wl:
        return result.web_score
    return 0.0
