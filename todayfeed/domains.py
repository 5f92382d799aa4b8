"""Reduce URLs to their registrable ("base") domain."""

from __future__ import annotations

import ipaddress
from urllib.parse import urlparse

import tldextract

# Bundled public suffix list snapshot, private suffixes included so that
# alice.github.io and bob.github.io stay distinct. No network fetch, no cache.
_extract = tldextract.TLDExtract(
    cache_dir=None,
    suffix_list_urls=(),
    fallback_to_snapshot=True,
    include_psl_private_domains=True,
)


def _hostname(url: str) -> str | None:
    if "://" not in url:
        # Bare hosts such as "www.example.com/path" parse as a path otherwise.
        url = f"//{url}"
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host.rstrip(".").lower() or None


def base_domain(url: str | None) -> str | None:
    """Return the registrable domain of *url*, or None when it has no host.

    >>> base_domain("https://www.example.com/path")
    'example.com'
    >>> base_domain("https://news.bbc.co.uk/story")
    'bbc.co.uk'
    """
    if not url:
        return None
    host = _hostname(url.strip())
    if host is None:
        return None

    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        pass

    parts = _extract(host)
    if parts.domain and parts.suffix:
        return f"{parts.domain}.{parts.suffix}"
    # Hosts without a known public suffix (localhost, intranet names).
    return host
