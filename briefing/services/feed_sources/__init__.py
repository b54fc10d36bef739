"""
Closed registry of feed connectors, keyed by stable source id.

Resolved once at import into an ordered read-only mapping; there is no
runtime plugin loading.
"""

from types import MappingProxyType
from typing import Mapping

from . import cctvnews, xinhua
from .base import FeedSource, NewsItem

FEED_SOURCES: Mapping[str, FeedSource] = MappingProxyType(
    {
        "cctvnews": cctvnews.fetch,
        "cctvworld": cctvnews.fetch_world,
        "xinhua": xinhua.fetch,
    }
)

__all__ = ["FEED_SOURCES", "FeedSource", "NewsItem"]
