"""
LLM client for section generation
---------------------------------
Thin wrapper over an OpenAI-compatible chat completions backend (DeepSeek by
default). One call per section, fixed low temperature, bounded timeout and
no client-side retries.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from openai import AsyncOpenAI

from ..core.config import GENERATION_TEMPERATURE, GENERATION_TIMEOUT_SEC
from ..core.exceptions import EmptyGenerationError
from ..models.sections import RuntimeConfig

logger = structlog.get_logger(__name__)


def chat_base_url(api_base: str) -> str:
    """OpenAI SDK base URL for a provider root (``{base}/v1``)."""
    base = api_base.rstrip("/")
    return base if base.endswith("/v1") else f"{base}/v1"


def build_openai_client(api_key: str, api_base: str, timeout: float) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=api_key,
        base_url=chat_base_url(api_base),
        timeout=timeout,
        max_retries=0,
    )


def _as_dict(response: Any) -> Dict[str, Any]:
    if isinstance(response, dict):
        return response
    dump = getattr(response, "model_dump", None)
    if callable(dump):
        return dump()
    return {}


def extract_completion_text(response: Any) -> Optional[str]:
    """Text from ``choices[0].message.content``, else ``data.content``."""
    payload = _as_dict(response)

    choices = payload.get("choices") or []
    if choices and isinstance(choices[0], dict):
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str) and content.strip():
            return content

    data = payload.get("data")
    if isinstance(data, dict):
        content = data.get("content")
        if isinstance(content, str) and content.strip():
            return content
    return None


class GenerationClient:
    """Generates one section's text from prepared chat messages."""

    def __init__(
        self,
        api_key: str,
        api_base: str,
        model: str,
        *,
        temperature: float = GENERATION_TEMPERATURE,
        timeout: float = GENERATION_TIMEOUT_SEC,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.client = client or build_openai_client(api_key, api_base, timeout)

    @classmethod
    def from_runtime(cls, runtime: RuntimeConfig, **kwargs) -> "GenerationClient":
        return cls(
            api_key=runtime.deepseek_api_key or "",
            api_base=runtime.deepseek_api_base,
            model=runtime.deepseek_model,
            **kwargs,
        )

    async def generate(self, messages: List[Dict[str, str]]) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
        )
        text = extract_completion_text(response)
        if not text:
            logger.error("Generation backend returned an empty completion", model=self.model)
            raise EmptyGenerationError("DeepSeek 响应为空")
        return text.strip()

    async def close(self) -> None:
        close = getattr(self.client, "close", None)
        if callable(close):
            await close()
