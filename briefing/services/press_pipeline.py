"""
Press release generation pipeline.

Validate -> Normalize -> GatherAll (concurrent) -> GenerateEach (serial)
-> Assemble. Context gathering runs for all sections at once; generation
runs one section at a time in catalog order. Any generation failure aborts
the whole request and no partial result is returned.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

import structlog

from ..core.exceptions import ConfigurationError, GenerationFailure
from ..models.sections import (
    Reference,
    RuntimeConfig,
    SearchMode,
    SectionContext,
    SectionOverride,
    SectionResult,
    SectionTemplate,
)
from .context_gatherer import ContentExtractor, SearchProvider, gather_context
from .llm_client import GenerationClient
from .prompt_builder import build_prompt_payload
from .search_apis import ReaderClient, SerpAPISearch
from .section_catalog import DEFAULT_SECTIONS
from .section_normalizer import normalize_sections

logger = structlog.get_logger(__name__)


@dataclass
class PressGenerationResult:
    sections: List[SectionResult]
    search_mode: SearchMode


class Generator(Protocol):
    async def generate(self, messages: List[Dict[str, str]]) -> str: ...


def validate_credentials(runtime: RuntimeConfig, mode: SearchMode) -> None:
    """Fail fast, before any network call, naming the first missing credential."""
    if not runtime.deepseek_api_key:
        raise ConfigurationError(
            "DeepSeek API key 未配置：请在配置中设置 DEEPSEEK_API_KEY",
            missing="deepseek_api_key",
        )
    if mode == SearchMode.WEB:
        if not runtime.serp_api_key:
            raise ConfigurationError(
                "SerpAPI key 未配置：请在配置中设置 SERPAPI_API_KEY",
                missing="serp_api_key",
            )
        if not runtime.reader_api_key:
            raise ConfigurationError(
                "Reader key 未配置：请在配置中设置 READER_API_KEY",
                missing="reader_api_key",
            )


def to_result(ctx: SectionContext, content: str) -> SectionResult:
    return SectionResult(
        id=ctx.template.id,
        title=ctx.template.title,
        duration_minutes=ctx.runtime.duration_minutes,
        target_words=ctx.runtime.target_words,
        content=content,
        references=[
            Reference(title=s.title, url=s.url, snippet=s.snippet or None)
            for s in ctx.sources
        ],
        used_queries=list(ctx.used_queries),
    )


class PressPipeline:
    """Runs one generation request against injected providers."""

    def __init__(
        self,
        generator: Generator,
        search: Optional[SearchProvider] = None,
        reader: Optional[ContentExtractor] = None,
        catalog: Sequence[SectionTemplate] = DEFAULT_SECTIONS,
    ):
        self.generator = generator
        self.search = search
        self.reader = reader
        self.catalog = catalog

    async def gather_all(self, overrides: Optional[Iterable[SectionOverride]], mode: SearchMode) -> List[SectionContext]:
        sections = normalize_sections(overrides, self.catalog)
        return list(
            await asyncio.gather(
                *(gather_context(section, mode, self.search, self.reader) for section in sections)
            )
        )

    async def generate_section(self, ctx: SectionContext) -> str:
        messages = build_prompt_payload(ctx)
        with structlog.contextvars.bound_contextvars(section=ctx.template.id):
            try:
                return await self.generator.generate(messages)
            except GenerationFailure:
                raise
            except Exception as exc:
                logger.warning("Section generation failed", error=str(exc), error_type=type(exc).__name__)
                raise GenerationFailure(
                    f"{ctx.template.title} 生成失败：{exc}"
                ) from exc

    async def run(
        self,
        overrides: Optional[Iterable[SectionOverride]] = None,
        mode: SearchMode = SearchMode.WEB,
    ) -> PressGenerationResult:
        started = time.perf_counter()
        contexts = await self.gather_all(overrides, mode)

        results: List[SectionResult] = []
        for ctx in contexts:
            content = await self.generate_section(ctx)
            results.append(to_result(ctx, content))
            logger.info(
                "Section generated",
                section=ctx.template.id,
                sources=len(ctx.sources),
                chars=len(content),
            )

        logger.info(
            "Press release generated",
            search_mode=mode.value,
            sections=len(results),
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )
        return PressGenerationResult(sections=results, search_mode=mode)


async def generate_press_release(
    runtime: RuntimeConfig,
    overrides: Optional[Iterable[SectionOverride]] = None,
    search_mode: Optional[SearchMode] = None,
) -> PressGenerationResult:
    """Validate credentials, open provider sessions and run the pipeline."""
    mode = search_mode or SearchMode.WEB
    validate_credentials(runtime, mode)

    async with AsyncExitStack() as stack:
        search: Optional[SerpAPISearch] = None
        reader: Optional[ReaderClient] = None
        if mode == SearchMode.WEB:
            search = await stack.enter_async_context(SerpAPISearch(runtime.serp_api_key or ""))
            reader = await stack.enter_async_context(ReaderClient(runtime.reader_api_key or ""))
        generator = GenerationClient.from_runtime(runtime)
        stack.push_async_callback(generator.close)

        pipeline = PressPipeline(generator=generator, search=search, reader=reader)
        return await pipeline.run(overrides, mode)
