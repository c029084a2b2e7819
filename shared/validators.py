"""
Input validators: framework-agnostic, pure functions.

All validators are stateless; lengths and other limits are passed in by the
service layer, which owns the configuration.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlsplit

from shared.generators import ID_ALPHABET

_ID_CHARS = frozenset(ID_ALPHABET)


def validate_provider_key(key: Any, length: int) -> bool:
    """Return True if *key* is a string of exactly *length* characters."""
    return isinstance(key, str) and len(key) == length


def validate_challenge_id(challenge_id: Any, length: int) -> bool:
    """Return True if *challenge_id* has the shape of an id we could have issued."""
    return (
        isinstance(challenge_id, str)
        and len(challenge_id) == length
        and all(ch in _ID_CHARS for ch in challenge_id)
    )


def parse_site_hostname(site: Optional[str]) -> Optional[str]:
    """Extract the lower-cased hostname from an origin hint.

    Any absolute URL with a scheme and a host is accepted, whatever its path,
    query or fragment look like, since widgets send the full page location.
    Returns ``None`` for missing or malformed input instead of raising; the
    caller falls back to the provider's default method in that case.

    Args:
        site: The ``site`` query parameter as sent by the widget, e.g.
            ``"https://example.com/page?ref"``.
    """
    if not site or not isinstance(site, str):
        return None
    try:
        parsed = urlsplit(site.strip())
    except ValueError:
        return None
    hostname = parsed.hostname
    if not parsed.scheme or not hostname:
        return None
    if any(ch.isspace() for ch in hostname):
        return None
    return hostname
