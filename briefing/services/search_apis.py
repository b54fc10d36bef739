"""
Provider integrations for section retrieval: SerpAPI (Google engine) for
search and the Zhipu Reader for readable-content extraction.

Both adapters raise on failure; tolerating per-query and per-URL failures is
the caller's job (see ``services.context_gatherer``).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from ..core import config
from ..core.exceptions import UpstreamPartialFailure

logger = structlog.get_logger(__name__)

MAX_LOG_BODY = 512


@dataclass
class SearchHit:
    title: str
    url: str
    snippet: str = ""
    source: str = ""


async def response_body_snippet(response: aiohttp.ClientResponse, limit: int = MAX_LOG_BODY) -> str:
    try:
        return (await response.text())[:limit]
    except (aiohttp.ClientError, UnicodeDecodeError):
        return "<unreadable>"


class BaseProviderAPI:
    """Owns one aiohttp session; usable as an async context manager."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        self._sess()
        return self

    async def __aexit__(self, *_exc):
        await self.close()

    def _sess(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()


class SerpAPISearch(BaseProviderAPI):
    """Google results through SerpAPI, restricted to the last day."""

    def __init__(self, api_key: str, *, session: Optional[aiohttp.ClientSession] = None,
                 endpoint: str = config.SERPAPI_ENDPOINT):
        super().__init__(api_key, timeout=config.search_timeout_sec(), session=session)
        self.endpoint = endpoint

    def build_params(self, query: str, num: int = 5) -> Dict[str, str]:
        return {
            "engine": "google",
            "q": query,
            "api_key": self.api_key,
            "gl": "cn",
            "hl": "zh-cn",
            "num": str(num),
            "tbs": "qdr:d",
        }

    async def search(self, query: str) -> List[SearchHit]:
        params = self.build_params(query)
        async with self._sess().get(self.endpoint, params=params) as r:
            if r.status != 200:
                body = await response_body_snippet(r)
                raise UpstreamPartialFailure(
                    f"SerpAPI HTTP {r.status}: {body}", target=query
                )
            data = await r.json(content_type=None)
        return parse_organic_results(data)


def parse_organic_results(data: Any) -> List[SearchHit]:
    """Map SerpAPI ``organic_results`` to hits; drop items without title or URL."""
    if not isinstance(data, dict):
        return []
    hits: List[SearchHit] = []
    for item in data.get("organic_results") or []:
        if not isinstance(item, dict):
            continue
        title = (item.get("title") or "").strip()
        url = (item.get("link") or item.get("url") or "").strip()
        if not title or not url:
            continue
        snippet = item.get("snippet") or " ".join(item.get("snippet_highlighted_words") or [])
        hits.append(
            SearchHit(
                title=title,
                url=url,
                snippet=snippet,
                source=item.get("source") or item.get("displayed_link") or "",
            )
        )
    return hits


class ReaderClient(BaseProviderAPI):
    """Readable markdown for one URL through the Zhipu Reader API."""

    def __init__(self, api_key: str, *, session: Optional[aiohttp.ClientSession] = None,
                 endpoint: str = config.READER_ENDPOINT):
        super().__init__(api_key, timeout=config.reader_timeout_sec(), session=session)
        self.endpoint = endpoint

    def build_payload(self, url: str) -> Dict[str, Any]:
        return {
            "url": url,
            "timeout": int(self.timeout),
            "no_cache": False,
            "return_format": "markdown",
            "retain_images": True,
            "no_gfm": False,
            "keep_img_data_url": False,
            "with_images_summary": False,
            "with_links_summary": False,
        }

    async def read(self, url: str) -> Optional[str]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with self._sess().post(self.endpoint, json=self.build_payload(url), headers=headers) as r:
            if r.status != 200:
                body = await response_body_snippet(r)
                raise UpstreamPartialFailure(f"Reader HTTP {r.status}: {body}", target=url)
            text = await r.text()
        return extract_reader_text(text)


def extract_reader_text(raw: Optional[str]) -> Optional[str]:
    """Pull the body out of a reader response.

    JSON objects yield the first of ``data``/``content``/``markdown`` (or the
    nested ``reader_result.content``), otherwise the JSON dump; non-JSON
    bodies are returned as-is.
    """
    if raw is None or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return raw
    if isinstance(data, str):
        return data or None
    if not isinstance(data, dict):
        return json.dumps(data, ensure_ascii=False)

    nested = data.get("reader_result")
    candidates = [data.get("data"), data.get("content"), data.get("markdown")]
    if isinstance(nested, dict):
        candidates.append(nested.get("content"))
    for value in candidates:
        if isinstance(value, str) and value.strip():
            return value
        if isinstance(value, dict):
            inner = value.get("content") or value.get("markdown")
            if isinstance(inner, str) and inner.strip():
                return inner
    return json.dumps(data, ensure_ascii=False)
