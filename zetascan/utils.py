"""Item normalization utilities."""

import ipaddress

import idna


def is_ip_address(item: str) -> bool:
    """Return True if ``item`` is a literal IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(item)
    except ValueError:
        return False
    return True


def normalize_item(item: str) -> str:
    """
    Normalize a domain or IP for use in a request URL or DNS question.

    Args:
        item: Raw domain name or IP address

    Returns:
        Normalized item (stripped, lowercase, no trailing dot, punycode)

    Examples:
        >>> normalize_item("BadDomain.ORG.")
        'baddomain.org'
        >>> normalize_item("münchen.de")
        'xn--mnchen-3ya.de'
    """
    if not item:
        return ""

    item = item.strip()

    if is_ip_address(item):
        return item

    # Remove trailing dot
    item = item.rstrip(".")

    # Convert to lowercase
    item = item.lower()

    # Handle internationalized domain names (IDN)
    try:
        item = idna.encode(item, uts46=True).decode('ascii')
    except (idna.core.IDNAError, UnicodeError):
        # Not encodable, send the item as given
        pass

    return item
