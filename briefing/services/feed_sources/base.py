"""Shared contract for feed connectors."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

import aiohttp

BROWSER_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)


@dataclass
class NewsItem:
    id: str
    title: str
    url: str
    mobile_url: Optional[str] = None
    pub_date: Optional[int] = None  # epoch ms

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NewsItem":
        return cls(
            id=str(data["id"]),
            title=data["title"],
            url=data["url"],
            mobile_url=data.get("mobile_url"),
            pub_date=data.get("pub_date"),
        )


# A connector takes a shared session and returns its newest items
FeedSource = Callable[[aiohttp.ClientSession], Awaitable[List[NewsItem]]]


def sort_newest_first(items: Iterable[NewsItem], limit: int) -> List[NewsItem]:
    ordered = sorted(items, key=lambda item: item.pub_date or 0, reverse=True)
    return ordered[:limit]
