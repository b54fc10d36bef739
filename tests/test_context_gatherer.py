import asyncio

import pytest

from briefing.core.exceptions import UpstreamPartialFailure
from briefing.models.sections import SearchMode
from briefing.services.context_gatherer import collect_sources, gather_context
from briefing.services.search_apis import SearchHit
from briefing.services.section_normalizer import normalize_sections

from .helpers import make_template


class FakeSearch:
    def __init__(self, results):
        self.results = results
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        outcome = self.results.get(query, [])
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeReader:
    def __init__(self, bodies=None, failing=()):
        self.bodies = bodies or {}
        self.failing = set(failing)
        self.urls = []

    async def read(self, url):
        self.urls.append(url)
        await asyncio.sleep(0)
        if url in self.failing:
            raise UpstreamPartialFailure("reader down", target=url)
        return self.bodies.get(url, f"body of {url}")


def _hits(*urls):
    return [SearchHit(title=f"title {u}", url=u, snippet=f"snippet {u}") for u in urls]


def _runtime(queries):
    return normalize_sections(catalog=(make_template(queries=queries),))[0]


@pytest.mark.asyncio
async def test_skip_mode_makes_no_calls():
    search, reader = FakeSearch({}), FakeReader()
    runtime = _runtime((("q1", "First", "alpha"),))
    ctx = await gather_context(runtime, SearchMode.SKIP, search, reader)
    assert ctx.sources == [] and ctx.used_queries == []
    assert search.queries == [] and reader.urls == []


@pytest.mark.asyncio
async def test_web_mode_requires_providers():
    runtime = _runtime((("q1", "First", "alpha"),))
    with pytest.raises(ValueError):
        await gather_context(runtime, SearchMode.WEB, None, FakeReader())


@pytest.mark.asyncio
async def test_queries_run_in_order_and_first_origin_wins():
    runtime = _runtime((("q1", "First", "alpha"), ("q2", "Second", "beta")))
    search = FakeSearch({
        "alpha": _hits("https://a.cn/1", "https://a.cn/2"),
        "beta": _hits("https://A.cn/2?utm_source=x", "https://b.cn/3"),
    })
    sources, used = await collect_sources(runtime, search)

    assert search.queries == ["alpha", "beta"]
    assert used == ["alpha", "beta"]
    assert [s.url for s in sources] == ["https://a.cn/1", "https://a.cn/2", "https://b.cn/3"]
    assert [s.origin for s in sources] == ["First", "First", "Second"]


@pytest.mark.asyncio
async def test_failed_query_is_recorded_and_skipped():
    runtime = _runtime((("q1", "First", "alpha"), ("q2", "Second", "beta"), ("q3", "Third", "gamma")))
    search = FakeSearch({
        "alpha": _hits("https://a.cn/1"),
        "beta": UpstreamPartialFailure("SerpAPI HTTP 500", target="beta"),
        "gamma": _hits("https://a.cn/1", "https://c.cn/2"),
    })
    ctx = await gather_context(runtime, SearchMode.WEB, search, FakeReader())

    assert ctx.used_queries == ["alpha", "beta", "gamma"]
    assert [s.url for s in ctx.sources] == ["https://a.cn/1", "https://c.cn/2"]


@pytest.mark.asyncio
async def test_sources_capped_before_extraction():
    runtime = _runtime((("q1", "First", "alpha"), ("q2", "Second", "beta")))
    search = FakeSearch({
        "alpha": _hits(*[f"https://a.cn/{i}" for i in range(5)]),
        "beta": _hits(*[f"https://b.cn/{i}" for i in range(5)]),
    })
    reader = FakeReader()
    ctx = await gather_context(runtime, SearchMode.WEB, search, reader)

    assert len(ctx.sources) == 6
    assert sorted(reader.urls) == sorted(s.url for s in ctx.sources)
    assert ctx.sources[-1].url == "https://b.cn/0"


@pytest.mark.asyncio
async def test_extraction_failure_keeps_reference_without_body():
    runtime = _runtime((("q1", "First", "alpha"),))
    search = FakeSearch({"alpha": _hits("https://a.cn/1", "https://a.cn/2")})
    reader = FakeReader(failing={"https://a.cn/2"})
    ctx = await gather_context(runtime, SearchMode.WEB, search, reader)

    assert [s.url for s in ctx.sources] == ["https://a.cn/1", "https://a.cn/2"]
    assert ctx.sources[0].content == "body of https://a.cn/1"
    assert ctx.sources[1].content is None


class OverlapReader:
    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0

    async def read(self, url):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return "body"


@pytest.mark.asyncio
async def test_extraction_fetches_overlap():
    runtime = _runtime((("q1", "First", "alpha"),))
    search = FakeSearch({"alpha": _hits("https://a.cn/1", "https://a.cn/2", "https://a.cn/3")})
    reader = OverlapReader()
    ctx = await gather_context(runtime, SearchMode.WEB, search, reader)

    assert len(ctx.sources) == 3
    assert reader.max_in_flight >= 2
