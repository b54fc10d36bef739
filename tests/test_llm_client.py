import types

import pytest

from briefing.core.exceptions import EmptyGenerationError, GenerationFailure
from briefing.models.sections import ConfigSource, RuntimeConfig
from briefing.services.llm_client import (
    GenerationClient,
    build_openai_client,
    chat_base_url,
    extract_completion_text,
)


class FakeCompletions:
    def __init__(self, response):
        self.response = response
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return self.response


def fake_openai(response):
    completions = FakeCompletions(response)
    client = types.SimpleNamespace(chat=types.SimpleNamespace(completions=completions))
    return client, completions


def test_chat_base_url():
    assert chat_base_url("https://api.deepseek.com") == "https://api.deepseek.com/v1"
    assert chat_base_url("https://api.deepseek.com/") == "https://api.deepseek.com/v1"
    assert chat_base_url("https://proxy.local/v1") == "https://proxy.local/v1"


def test_openai_client_has_no_retries():
    client = build_openai_client("sk", "https://api.deepseek.com", 30.0)
    assert client.max_retries == 0
    assert str(client.base_url).rstrip("/") == "https://api.deepseek.com/v1"


def test_extract_completion_text_paths():
    assert extract_completion_text({"choices": [{"message": {"content": "hi"}}]}) == "hi"
    assert extract_completion_text({"choices": [], "data": {"content": "fallback"}}) == "fallback"
    assert extract_completion_text({"choices": [{"message": {"content": "  "}}]}) is None
    assert extract_completion_text({}) is None


@pytest.mark.asyncio
async def test_generate_uses_model_and_temperature():
    client, completions = fake_openai({"choices": [{"message": {"content": "  播报正文 \n"}}]})
    generator = GenerationClient("sk", "https://api.deepseek.com", "deepseek-chat", client=client)
    text = await generator.generate([{"role": "user", "content": "x"}])

    assert text == "播报正文"
    assert completions.kwargs["model"] == "deepseek-chat"
    assert completions.kwargs["temperature"] == 0.35


@pytest.mark.asyncio
async def test_empty_completion_is_a_generation_failure():
    client, _ = fake_openai({"choices": [{"message": {"content": ""}}]})
    generator = GenerationClient("sk", "https://api.deepseek.com", "m", client=client)
    with pytest.raises(EmptyGenerationError) as info:
        await generator.generate([])
    assert isinstance(info.value, GenerationFailure)


def test_from_runtime_copies_model():
    runtime = RuntimeConfig(
        deepseek_api_base="https://api.deepseek.com",
        deepseek_model="deepseek-reasoner",
        source=ConfigSource.ENVIRONMENT,
        deepseek_api_key="sk",
    )
    client, _ = fake_openai({})
    generator = GenerationClient.from_runtime(runtime, client=client)
    assert generator.model == "deepseek-reasoner"
