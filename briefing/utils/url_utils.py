"""
URL utilities for normalizing, validating and cleaning URLs.
Used for source deduplication and by the feed connectors.
"""

from typing import Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse

# Tracking parameters to remove for clean URLs
TRACKING_PARAMS = {
    'utm_source', 'utm_medium', 'utm_campaign', 'utm_term', 'utm_content',
    'fbclid', 'gclid', 'dclid', 'msclkid', 'twclid',
    'ref', 'ref_src', 'ref_url', 'referrer',
    '_ga', '_gid', '_gac', '_gl', '_gclid',
    'mc_cid', 'mc_eid', 'mkt_tok',
    'yclid', 'ysclid', 'spm',
}


def normalize_url(url: str) -> str:
    """
    Normalize a URL for consistent comparison.
    Lowercases scheme and domain, preserves path/query/fragment.

    Args:
        url: URL string to normalize

    Returns:
        Normalized URL string
    """
    if not url:
        return ""

    url = url.strip()
    if "://" not in url:
        url = f"https://{url}"

    p = urlparse(url)
    return urlunparse((
        p.scheme.lower(),
        p.netloc.lower(),
        p.path,
        p.params,
        p.query,
        p.fragment,
    ))


def clean_url(url: str, remove_tracking: bool = True, remove_fragment: bool = False) -> str:
    """
    Clean a URL by removing tracking parameters and optionally fragments.

    Args:
        url: URL to clean
        remove_tracking: Whether to remove tracking parameters
        remove_fragment: Whether to remove URL fragments (#...)

    Returns:
        Cleaned URL
    """
    if not url:
        return ""

    try:
        p = urlparse(url)
    except ValueError:
        return url

    if remove_tracking and p.query:
        params = [
            (k, v) for k, v in parse_qsl(p.query, keep_blank_values=True)
            if k.lower() not in TRACKING_PARAMS
        ]
        new_query = urlencode(params, doseq=True)
    else:
        new_query = p.query

    return urlunparse((
        p.scheme,
        p.netloc,
        p.path,
        p.params,
        new_query,
        "" if remove_fragment else p.fragment,
    ))


def dedup_key(url: str) -> str:
    """Key under which two search hits count as the same source."""
    if not url or not url.strip():
        return ""
    return clean_url(normalize_url(url), remove_tracking=True, remove_fragment=True)


def strip_query(url: str) -> str:
    """Drop query string and fragment entirely."""
    try:
        p = urlparse(url)
    except ValueError:
        return url
    if not p.scheme or not p.netloc:
        return url
    return urlunparse((p.scheme, p.netloc, p.path, "", "", ""))


def absolutize(url: Optional[str], base: str) -> Optional[str]:
    """Resolve protocol-relative and root-relative links against ``base``."""
    if not url:
        return None
    url = url.strip()
    if url.startswith("http"):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("/"):
        return urljoin(base, url)
    return url
