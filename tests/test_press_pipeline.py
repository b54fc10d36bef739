import asyncio

import pytest

from briefing.core.exceptions import ConfigurationError, EmptyGenerationError, GenerationFailure
from briefing.models.sections import ConfigSource, RuntimeConfig, SearchMode, SectionOverride
from briefing.services import press_pipeline
from briefing.services.press_pipeline import PressPipeline, generate_press_release, validate_credentials
from briefing.services.prompt_builder import NO_SOURCES_TEXT
from briefing.services.search_apis import SearchHit

from .helpers import make_template


class RecordingGenerator:
    def __init__(self, fail_on=None, error=None):
        self.calls = []
        self.fail_on = fail_on
        self.error = error or EmptyGenerationError("DeepSeek 响应为空")

    async def generate(self, messages):
        self.calls.append(messages)
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise self.error
        return f"section {len(self.calls)}"


class StaticSearch:
    async def search(self, query):
        return [SearchHit(title=f"{query} hit", url=f"https://{query}.cn/a", snippet="")]


class StaticReader:
    async def read(self, url):
        return "body"


def _runtime(**keys):
    return RuntimeConfig(
        deepseek_api_base="https://api.deepseek.com",
        deepseek_model="deepseek-chat",
        source=ConfigSource.ENVIRONMENT,
        **keys,
    )


def test_validate_requires_generation_key_first():
    with pytest.raises(ConfigurationError) as info:
        validate_credentials(_runtime(), SearchMode.SKIP)
    assert info.value.missing == "deepseek_api_key"


def test_validate_web_mode_names_missing_provider():
    with pytest.raises(ConfigurationError) as info:
        validate_credentials(_runtime(deepseek_api_key="sk", serp_api_key="s"), SearchMode.WEB)
    assert info.value.missing == "reader_api_key"
    validate_credentials(_runtime(deepseek_api_key="sk"), SearchMode.SKIP)


@pytest.mark.asyncio
async def test_skip_mode_generates_every_section_from_placeholder():
    generator = RecordingGenerator()
    result = await PressPipeline(generator).run(mode=SearchMode.SKIP)

    assert result.search_mode == SearchMode.SKIP
    assert [s.id for s in result.sections] == ["major-news", "power-zhejiang-qiantang", "party-discipline"]
    assert all(s.references == [] and s.used_queries == [] for s in result.sections)
    assert all(NO_SOURCES_TEXT in call[1]["content"] for call in generator.calls)
    assert [s.content for s in result.sections] == ["section 1", "section 2", "section 3"]


@pytest.mark.asyncio
async def test_web_mode_references_drop_body_text():
    catalog = (make_template("a", queries=(("q", "L", "alpha"),)),)
    pipeline = PressPipeline(RecordingGenerator(), StaticSearch(), StaticReader(), catalog=catalog)
    result = await pipeline.run([SectionOverride(id="a", prompt="custom")], SearchMode.WEB)

    section = result.sections[0]
    assert section.used_queries == ["alpha"]
    assert [(r.title, r.url, r.snippet) for r in section.references] == [("alpha hit", "https://alpha.cn/a", None)]
    assert not hasattr(section.references[0], "content")


@pytest.mark.asyncio
async def test_generation_failure_aborts_remaining_sections():
    generator = RecordingGenerator(fail_on=2)
    with pytest.raises(GenerationFailure):
        await PressPipeline(generator).run(mode=SearchMode.SKIP)
    assert len(generator.calls) == 2


@pytest.mark.asyncio
async def test_backend_errors_are_wrapped_as_generation_failure():
    generator = RecordingGenerator(fail_on=1, error=RuntimeError("connection reset"))
    with pytest.raises(GenerationFailure) as info:
        await PressPipeline(generator).run(mode=SearchMode.SKIP)
    assert "connection reset" in info.value.message
    assert isinstance(info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_generate_press_release_fails_before_network(monkeypatch):
    def _no_client(*args, **kwargs):
        raise AssertionError("no client should be built")

    monkeypatch.setattr(press_pipeline.GenerationClient, "from_runtime", _no_client)
    with pytest.raises(ConfigurationError):
        await generate_press_release(_runtime(deepseek_api_key="sk"), search_mode=SearchMode.WEB)


@pytest.mark.asyncio
async def test_generate_press_release_defaults_to_web(monkeypatch):
    seen = {}

    class FakeClient(RecordingGenerator):
        async def close(self):
            seen["closed"] = True

    async def fake_run(self, overrides, mode):
        seen["mode"] = mode
        seen["search"] = self.search
        return press_pipeline.PressGenerationResult(sections=[], search_mode=mode)

    monkeypatch.setattr(press_pipeline.GenerationClient, "from_runtime", classmethod(lambda cls, rt: FakeClient()))
    monkeypatch.setattr(PressPipeline, "run", fake_run)

    runtime = _runtime(deepseek_api_key="sk", serp_api_key="s", reader_api_key="r")
    result = await generate_press_release(runtime)

    assert result.search_mode == SearchMode.WEB
    assert isinstance(seen["search"], press_pipeline.SerpAPISearch)
    assert seen["closed"] is True


class OverlapSearch:
    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0

    async def search(self, query):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return []


class SerialCheckingGenerator:
    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0
        self.titles = []

    async def generate(self, messages):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        self.titles.append(messages[1]["content"].splitlines()[0])
        return "ok"


@pytest.mark.asyncio
async def test_sections_gather_concurrently_but_generate_serially():
    search = OverlapSearch()
    generator = SerialCheckingGenerator()
    result = await PressPipeline(generator, search, StaticReader()).run(mode=SearchMode.WEB)

    assert search.max_in_flight >= 2
    assert generator.max_in_flight == 1
    assert generator.titles == [f"板块：{s.title}" for s in result.sections]
    assert [s.id for s in result.sections] == ["major-news", "power-zhejiang-qiantang", "party-discipline"]


@pytest.mark.asyncio
async def test_section_id_is_bound_while_generating():
    import structlog

    seen = []

    class ContextRecorder(RecordingGenerator):
        async def generate(self, messages):
            seen.append(structlog.contextvars.get_contextvars().get("section"))
            return await super().generate(messages)

    await PressPipeline(ContextRecorder()).run(mode=SearchMode.SKIP)

    assert seen == ["major-news", "power-zhejiang-qiantang", "party-discipline"]
    assert "section" not in structlog.contextvars.get_contextvars()
