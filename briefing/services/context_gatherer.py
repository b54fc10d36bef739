"""
Context gathering for one briefing section.

Queries run sequentially in declared order so that each query dedupes
against everything earlier queries produced; the capped source list is then
hydrated with extracted content concurrently. Per-query and per-URL failures
are logged and degrade only the affected item.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Protocol

import structlog

from ..core.config import MAX_SOURCES_PER_SECTION
from ..models.sections import RetrievedSource, SearchMode, SectionContext, SectionRuntime
from ..utils.url_utils import dedup_key
from .search_apis import SearchHit

logger = structlog.get_logger(__name__)


class SearchProvider(Protocol):
    async def search(self, query: str) -> List[SearchHit]: ...


class ContentExtractor(Protocol):
    async def read(self, url: str) -> Optional[str]: ...


async def collect_sources(section: SectionRuntime, search: SearchProvider):
    """Run the section's queries in order; return (deduped sources, issued queries)."""
    used_queries: List[str] = []
    collected: List[RetrievedSource] = []
    seen: Dict[str, RetrievedSource] = {}

    for query in section.template.search_queries:
        used_queries.append(query.query)
        try:
            hits = await search.search(query.query)
        except Exception as exc:
            logger.warning(
                "Search query failed; continuing with remaining queries",
                section=section.template.id,
                query_id=query.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            continue

        for hit in hits:
            key = dedup_key(hit.url)
            if not key or key in seen:
                continue
            source = RetrievedSource(
                title=hit.title,
                url=hit.url.strip(),
                snippet=hit.snippet,
                origin=query.label,
            )
            seen[key] = source
            collected.append(source)

    return collected, used_queries


async def _hydrate(source: RetrievedSource, reader: ContentExtractor, section_id: str) -> RetrievedSource:
    try:
        source.content = await reader.read(source.url)
    except Exception as exc:
        logger.warning(
            "Content extraction failed; keeping reference without body",
            section=section_id,
            url=source.url,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        source.content = None
    return source


async def gather_context(
    section: SectionRuntime,
    mode: SearchMode,
    search: Optional[SearchProvider] = None,
    reader: Optional[ContentExtractor] = None,
    *,
    max_sources: int = MAX_SOURCES_PER_SECTION,
) -> SectionContext:
    """Build the retrieval context for one section.

    ``skip`` mode returns an empty context without touching the providers.
    """
    if mode == SearchMode.SKIP:
        return SectionContext(runtime=section, sources=[], used_queries=[])

    if search is None or reader is None:
        raise ValueError("web search mode requires a search provider and a content extractor")

    collected, used_queries = await collect_sources(section, search)
    limited = collected[:max_sources]

    hydrated = await asyncio.gather(
        *(_hydrate(source, reader, section.template.id) for source in limited)
    )

    logger.info(
        "Section context gathered",
        section=section.template.id,
        queries=len(used_queries),
        candidates=len(collected),
        sources=len(hydrated),
        with_body=sum(1 for s in hydrated if s.content),
    )
    return SectionContext(runtime=section, sources=list(hydrated), used_queries=used_queries)
