"""Minimal aiohttp / provider stand-ins shared by the test modules."""

import json

import aiohttp

from briefing.models.sections import SearchQuery, SectionTemplate


class DummyResponse:
    def __init__(self, status=200, payload=None, text=None):
        self.status = status
        self._payload = payload
        self._text = text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type=None):
        if self._payload is None and self._text is not None:
            return json.loads(self._text)
        return self._payload

    async def text(self):
        if self._text is not None:
            return self._text
        return json.dumps(self._payload, ensure_ascii=False)

    async def read(self):
        return (await self.text()).encode("utf-8")

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientError(f"HTTP {self.status}")


class DummySession:
    """Records calls and hands back queued responses (the last one repeats)."""

    def __init__(self, responses):
        self._responses = list(responses)
        self._index = 0
        self.calls = []
        self.closed = False

    def _next(self):
        resp = self._responses[min(self._index, len(self._responses) - 1)]
        self._index += 1
        if isinstance(resp, Exception):
            raise resp
        return resp

    def get(self, url, params=None, headers=None, **kwargs):
        self.calls.append(("GET", url, params, headers))
        return self._next()

    def post(self, url, json=None, headers=None, **kwargs):
        self.calls.append(("POST", url, json, headers))
        return self._next()

    async def close(self):
        self.closed = True


def make_template(template_id="t1", queries=(("q1", "First", "alpha"),), **kwargs):
    defaults = dict(
        title=f"Title {template_id}",
        duration_minutes=1,
        default_prompt=f"default prompt for {template_id}",
        recommended_sources=(),
    )
    defaults.update(kwargs)
    return SectionTemplate(
        id=template_id,
        search_queries=tuple(SearchQuery(id=i, label=label, query=q) for i, label, q in queries),
        **defaults,
    )
