"""Feed retrieval through the cache."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Mapping, Optional

import aiohttp
import structlog

from ..core import config as settings
from ..core.exceptions import FeedSourceError
from .feed_cache import CacheInfo, CacheLike
from .feed_sources import FEED_SOURCES, FeedSource
from .feed_sources.base import NewsItem

logger = structlog.get_logger(__name__)


@dataclass
class FeedResult:
    id: str
    status: str  # "cache" or "success"
    updated: int
    items: List[NewsItem]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _is_fresh(info: CacheInfo, ttl_seconds: int) -> bool:
    return _now_ms() - info.updated < ttl_seconds * 1000


async def fetch_feed(
    source_id: str,
    cache: Optional[CacheLike],
    *,
    latest: bool = False,
    session: Optional[aiohttp.ClientSession] = None,
    sources: Mapping[str, FeedSource] = FEED_SOURCES,
) -> FeedResult:
    """Return one source's items, preferring a fresh cache entry.

    Raises ``KeyError`` for an unknown id and ``FeedSourceError`` when the
    live fetch fails with nothing cached to fall back on.
    """
    producer = sources[source_id]
    ttl = settings.feed_cache_ttl_seconds()

    cached = await cache.get(source_id) if cache is not None else None
    if cached is not None and not latest and _is_fresh(cached, ttl):
        return FeedResult(id=source_id, status="cache", updated=cached.updated, items=cached.items)

    own_session = session is None
    sess = session or aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=15))
    try:
        items = await producer(sess)
    except Exception as exc:
        logger.warning("Feed fetch failed", source=source_id, error=str(exc),
                       error_type=type(exc).__name__,
                       stale_available=cached is not None)
        if cached is not None:
            return FeedResult(id=source_id, status="cache", updated=cached.updated, items=cached.items)
        if isinstance(exc, FeedSourceError):
            raise
        raise FeedSourceError(f"{source_id}: {exc}") from exc
    finally:
        if own_session:
            await sess.close()

    if cache is not None:
        await cache.set(source_id, items)
    return FeedResult(id=source_id, status="success", updated=_now_ms(), items=items)


async def fetch_cached(keys: List[str], cache: Optional[CacheLike]) -> List[CacheInfo]:
    """Cached entries for known ids only; no live fetches."""
    if cache is None:
        return []
    known = [key for key in keys if key in FEED_SOURCES]
    return await cache.get_entire(known)
