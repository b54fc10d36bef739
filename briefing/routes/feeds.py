"""
Feed routes: newest items per registered source, served through the cache.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..models.press import FeedEntireRequest, FeedResponse, NewsItemModel
from ..services.feed_cache import CacheInfo, CacheLike
from ..services.feed_sources import FEED_SOURCES
from ..services.feed_sources.base import NewsItem
from ..services.feeds import fetch_cached, fetch_feed

router = APIRouter(prefix="/feeds", tags=["feeds"])


def get_feed_cache(request: Request) -> Optional[CacheLike]:
    return getattr(request.app.state, "feed_cache", None)


def _item_model(item: NewsItem) -> NewsItemModel:
    return NewsItemModel(
        id=item.id,
        title=item.title,
        url=item.url,
        mobile_url=item.mobile_url,
        pub_date=item.pub_date,
    )


def _cached_response(info: CacheInfo) -> FeedResponse:
    return FeedResponse(
        id=info.id,
        status="cache",
        updated_time=info.updated,
        items=[_item_model(item) for item in info.items],
    )


@router.get("", response_model=List[str])
async def list_sources() -> List[str]:
    return list(FEED_SOURCES)


@router.post("/entire", response_model=List[FeedResponse])
async def get_entire(
    payload: FeedEntireRequest,
    cache: Optional[CacheLike] = Depends(get_feed_cache),
) -> List[FeedResponse]:
    return [_cached_response(info) for info in await fetch_cached(payload.sources, cache)]


@router.get("/{source_id}", response_model=FeedResponse)
async def get_feed(
    source_id: str,
    latest: bool = Query(False),
    cache: Optional[CacheLike] = Depends(get_feed_cache),
) -> FeedResponse:
    if source_id not in FEED_SOURCES:
        raise HTTPException(status_code=404, detail=f"Unknown source: {source_id}")
    result = await fetch_feed(source_id, cache, latest=latest)
    return FeedResponse(
        id=result.id,
        status=result.status,
        updated_time=result.updated,
        items=[_item_model(item) for item in result.items],
    )
