"""CCTV News channels (domestic, world) scraped from their landing pages."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

import aiohttp
import structlog
from bs4 import BeautifulSoup

from ...core.exceptions import FeedSourceError
from ...utils.url_utils import absolutize, strip_query
from .base import BROWSER_UA, FeedSource, NewsItem, sort_newest_first

logger = structlog.get_logger(__name__)

BASE_URL = "https://news.cctv.com"
CHINA_PATH = "/china/"
WORLD_PATH = "/world/"
MAX_ITEMS = 30

_DATE_IN_PATH = re.compile(r"/(20\d{2})/(\d{2})/(\d{2})/")


def parse_date_from_path(url: str, current_year: Optional[int] = None) -> Optional[int]:
    """Epoch ms from a ``/YYYY/MM/DD/`` path; stale archive years yield ``None``."""
    match = _DATE_IN_PATH.search(url)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    current_year = current_year or datetime.now(timezone.utc).year
    if year < current_year - 1 or year > current_year:
        return None
    try:
        stamp = datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None
    return int(stamp.timestamp() * 1000)


def build_news_item(link: str, title: Optional[str], current_year: Optional[int] = None) -> Optional[NewsItem]:
    absolute = absolutize(link, BASE_URL)
    if not absolute:
        return None
    cleaned = strip_query(absolute)
    pub_date = parse_date_from_path(cleaned, current_year)
    if not pub_date:
        return None
    text = (title or "").strip()
    if not text:
        return None
    return NewsItem(id=cleaned, title=text, url=cleaned, mobile_url=cleaned, pub_date=pub_date)


def parse_listing(html: str, current_year: Optional[int] = None) -> List[NewsItem]:
    soup = BeautifulSoup(html, "html.parser")
    found: Dict[str, NewsItem] = {}
    for anchor in soup.find_all("a"):
        href = anchor.get("href") or ""
        title = anchor.get_text(strip=True) or (anchor.get("title") or "").strip()
        item = build_news_item(href, title, current_year)
        if item is None or item.id in found:
            continue
        found[item.id] = item
    return list(found.values())


def channel_source(path: str, label: str) -> FeedSource:
    """Build a connector for one CCTV channel landing page (``/china/``, ``/world/``)."""
    referer = f"{BASE_URL}/"
    url = f"{BASE_URL}{path}"

    async def fetch(session: aiohttp.ClientSession) -> List[NewsItem]:
        headers = {
            "User-Agent": BROWSER_UA,
            "Referer": referer,
            "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
        }
        try:
            async with session.get(url, headers=headers) as r:
                r.raise_for_status()
                html = await r.text()
        except aiohttp.ClientError as exc:
            logger.warning("CCTV listing fetch failed", channel=path, error=str(exc))
            html = ""

        items = sort_newest_first(parse_listing(html), MAX_ITEMS) if html else []
        if not items:
            raise FeedSourceError(f"Failed to fetch {label} feed")
        return items

    return fetch


fetch = channel_source(CHINA_PATH, "CCTV News")
fetch_world = channel_source(WORLD_PATH, "CCTV News (World)")
