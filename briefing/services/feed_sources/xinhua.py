"""Xinhua energy news through the site search JSON endpoint."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from ...core.exceptions import FeedSourceError
from .base import BROWSER_UA, NewsItem, sort_newest_first

SEARCH_URL = "https://so.news.cn/getNews"
KEYWORD = "电力"
PAGE_COUNT = 2
MAX_ITEMS = 20

# Publication times on the search API are Beijing time
_BEIJING = timezone(timedelta(hours=8))
_TAG = re.compile(r"<[^>]*>")

HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "zh,en-US;q=0.9,en;q=0.8,zh-CN;q=0.7",
    "User-Agent": BROWSER_UA,
    "Referer": "https://so.news.cn/",
}


def strip_html(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return _TAG.sub("", text).strip() or None


def parse_pubtime(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    normalized = value.strip().replace("/", "-")
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d"):
        try:
            stamp = datetime.strptime(normalized, fmt).replace(tzinfo=_BEIJING)
        except ValueError:
            continue
        return int(stamp.timestamp() * 1000)
    return None


def build_item(entry: Dict[str, Any]) -> Optional[NewsItem]:
    link = (entry.get("url") or "").strip()
    title = strip_html(entry.get("title"))
    if not link or not title:
        return None
    return NewsItem(
        id=str(entry.get("contentId") or link),
        title=title,
        url=link,
        mobile_url=link,
        pub_date=parse_pubtime(entry.get("pubtime")),
    )


def parse_page(payload: Any) -> List[NewsItem]:
    if not isinstance(payload, dict):
        return []
    content = payload.get("content") or {}
    results = content.get("results") if isinstance(content, dict) else None
    items = []
    for entry in results or []:
        if isinstance(entry, dict):
            item = build_item(entry)
            if item is not None:
                items.append(item)
    return items


async def fetch(session: aiohttp.ClientSession) -> List[NewsItem]:
    found: Dict[str, NewsItem] = {}
    for page in range(1, PAGE_COUNT + 1):
        params = {
            "lang": "cn",
            "curPage": str(page),
            "searchFields": "0",
            "sortField": "0",
            "keyword": KEYWORD,
        }
        async with session.get(SEARCH_URL, params=params, headers=HEADERS) as r:
            r.raise_for_status()
            payload = await r.json(content_type=None)
        for item in parse_page(payload):
            found.setdefault(item.id, item)

    items = sort_newest_first(found.values(), MAX_ITEMS)
    if not items:
        raise FeedSourceError("No xinhua energy results")
    return items
