"""
Feed result cache.

Two variants of one capability: a SQLite table through SQLAlchemy and a
process-local dict. ``get_cache_table`` picks one at startup and the choice
holds for the life of the process.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..core import config as settings
from ..database.connection import ensure_schema, open_engine, session_scope
from ..database.models import FeedCacheRow
from .feed_sources.base import NewsItem

logger = structlog.get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CacheInfo:
    id: str
    updated: int
    items: List[NewsItem] = field(default_factory=list)


class CacheLike(Protocol):
    async def init(self) -> None: ...

    async def set(self, key: str, items: Sequence[NewsItem]) -> None: ...

    async def get(self, key: str) -> Optional[CacheInfo]: ...

    async def get_entire(self, keys: Sequence[str]) -> List[CacheInfo]: ...

    async def delete(self, key: str) -> None: ...


def _encode(items: Sequence[NewsItem]) -> str:
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


def _row_to_info(row: FeedCacheRow) -> CacheInfo:
    return CacheInfo(
        id=row.id,
        updated=row.updated,
        items=[NewsItem.from_dict(entry) for entry in json.loads(row.data)],
    )


class SQLCache:
    """Cache table in a SQLite file; blocking calls run in a worker thread."""

    def __init__(self, path: Path):
        self.path = path
        self.engine = open_engine(path, allow_create=True)

    async def init(self) -> None:
        await asyncio.to_thread(ensure_schema, self.engine, [FeedCacheRow.__table__])
        logger.info("Feed cache table ready", path=str(self.path))

    def _set(self, key: str, items: Sequence[NewsItem]) -> None:
        with session_scope(self.engine, dispose=False) as session:
            session.merge(FeedCacheRow(id=key, data=_encode(items), updated=_now_ms()))

    async def set(self, key: str, items: Sequence[NewsItem]) -> None:
        await asyncio.to_thread(self._set, key, items)
        logger.debug("Feed cache set", key=key, items=len(items))

    def _get(self, key: str) -> Optional[CacheInfo]:
        with session_scope(self.engine, dispose=False) as session:
            row = session.get(FeedCacheRow, key)
            return _row_to_info(row) if row is not None else None

    async def get(self, key: str) -> Optional[CacheInfo]:
        return await asyncio.to_thread(self._get, key)

    def _get_entire(self, keys: Sequence[str]) -> List[CacheInfo]:
        if not keys:
            return []
        with session_scope(self.engine, dispose=False) as session:
            rows = session.scalars(select(FeedCacheRow).where(FeedCacheRow.id.in_(list(keys)))).all()
            return [_row_to_info(row) for row in rows]

    async def get_entire(self, keys: Sequence[str]) -> List[CacheInfo]:
        return await asyncio.to_thread(self._get_entire, keys)

    def _delete(self, key: str) -> None:
        with session_scope(self.engine, dispose=False) as session:
            row = session.get(FeedCacheRow, key)
            if row is not None:
                session.delete(row)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)


class InMemoryCache:
    def __init__(self) -> None:
        self._store: Dict[str, CacheInfo] = {}

    async def init(self) -> None:
        return None

    async def set(self, key: str, items: Sequence[NewsItem]) -> None:
        self._store[key] = CacheInfo(id=key, updated=_now_ms(), items=list(items))
        logger.debug("Feed cache set (memory)", key=key, items=len(items))

    async def get(self, key: str) -> Optional[CacheInfo]:
        return self._store.get(key)

    async def get_entire(self, keys: Sequence[str]) -> List[CacheInfo]:
        return [self._store[key] for key in keys if key in self._store]

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)


_memory_cache: Optional[InMemoryCache] = None


def memory_cache() -> InMemoryCache:
    global _memory_cache
    if _memory_cache is None:
        _memory_cache = InMemoryCache()
    return _memory_cache


async def get_cache_table(path: Optional[Path] = None) -> Optional[CacheLike]:
    """Select the cache backend: none, SQL, or the in-memory fallback."""
    if not settings.feed_cache_enabled():
        logger.info("Feed cache disabled")
        return None

    try:
        cache = SQLCache(path or settings.feed_cache_db_path())
        if settings.feed_cache_init_table():
            await cache.init()
        return cache
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Failed to init feed cache database; using memory cache", error=str(exc))

    return memory_cache()
