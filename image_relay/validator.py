"""Target URL validation against the origin allow-list."""

from __future__ import annotations

from typing import Iterable
from urllib.parse import urlparse

# Instagram / Threads image origins, including the Facebook CDN
ALLOWED_DOMAINS: tuple[str, ...] = (
    "scontent.cdninstagram.com",
    "instagram.com",
    "threads.net",
    "fbcdn.net",
    "scontent.xx.fbcdn.net",
)


def validate(url: str, allowed_domains: Iterable[str] = ALLOWED_DOMAINS) -> bool:
    """Check whether a URL points at an allowed image origin.

    The hostname matches when it contains or ends with an allow-list entry,
    which admits CDN subdomains such as ``scontent-iad3-1.cdninstagram.com``.

    Args:
        url: Candidate absolute URL.
        allowed_domains: Hostname entries to match against.

    Returns:
        True if the URL parses and its hostname matches an entry.
    """
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except (TypeError, ValueError, AttributeError):
        return False

    if not parsed.scheme or not hostname:
        return False

    return any(
        domain in hostname or hostname.endswith(domain)
        for domain in allowed_domains
    )
