"""
Dependency status probing.

One minimal live call per external dependency (search, extraction,
generation) with a bounded timeout. Each probe reports reachability, latency
and a short message; failures stay local to their own record.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, List, Optional

import aiohttp
import openai
import structlog

from ..core import config as settings
from ..core.exceptions import ProbeFailure
from ..models.sections import RuntimeConfig, StatusRecord
from .llm_client import build_openai_client

logger = structlog.get_logger(__name__)

SERPAPI_ID, SERPAPI_LABEL = "serpapi", "SerpAPI 搜索"
READER_ID, READER_LABEL = "reader", "智谱 Reader"
DEEPSEEK_ID, DEEPSEEK_LABEL = "deepseek", "DeepSeek 生成"

MISSING_MESSAGES = {
    SERPAPI_ID: "缺少 SerpAPI API key",
    READER_ID: "缺少 Reader API key",
    DEEPSEEK_ID: "缺少 DeepSeek API key",
}

OK_MESSAGE = "可用"
MALFORMED_MESSAGE = "返回异常"
FAILED_MESSAGE = "请求失败"
TIMEOUT_MESSAGE = "请求超时"


def _now_ms() -> int:
    return int(time.time() * 1000)


def missing_credential(dep_id: str, label: str) -> StatusRecord:
    return StatusRecord(
        id=dep_id,
        label=label,
        ok=False,
        latency_ms=None,
        checked_at=_now_ms(),
        message=MISSING_MESSAGES[dep_id],
    )


def error_message(exc: BaseException) -> str:
    """Best-effort human message for a failed probe."""
    if isinstance(exc, (asyncio.TimeoutError, openai.APITimeoutError)):
        return TIMEOUT_MESSAGE
    if isinstance(exc, ProbeFailure):
        return exc.message
    if isinstance(exc, aiohttp.ClientResponseError):
        return exc.message or f"HTTP {exc.status}"
    if isinstance(exc, openai.APIError):
        return exc.message or FAILED_MESSAGE
    return str(exc) or FAILED_MESSAGE


async def _error_from_response(r: aiohttp.ClientResponse) -> ProbeFailure:
    try:
        body = await r.json(content_type=None)
    except (aiohttp.ClientError, ValueError):
        body = None
    detail = None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message")
        if isinstance(detail, dict):
            detail = detail.get("message")
    return ProbeFailure(str(detail) if detail else f"HTTP {r.status}")


async def _timed(dep_id: str, label: str, call: Callable[[], Any]) -> StatusRecord:
    started = time.perf_counter()
    try:
        ok = bool(await call())
        message = OK_MESSAGE if ok else MALFORMED_MESSAGE
    except Exception as exc:
        logger.warning("Dependency probe failed", dependency=dep_id, error=str(exc),
                       error_type=type(exc).__name__)
        ok, message = False, error_message(exc)
    return StatusRecord(
        id=dep_id,
        label=label,
        ok=ok,
        latency_ms=int((time.perf_counter() - started) * 1000),
        checked_at=_now_ms(),
        message=message,
    )


def _probe_session(session: Optional[aiohttp.ClientSession]) -> aiohttp.ClientSession:
    return session or aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.PROBE_TIMEOUT_SEC)
    )


async def probe_serpapi(api_key: str, session: Optional[aiohttp.ClientSession] = None) -> StatusRecord:
    params = {
        "engine": "google",
        "q": "site:news.cctv.com (测试)",
        "api_key": api_key,
        "num": "1",
    }

    async def call() -> bool:
        sess = _probe_session(session)
        try:
            async with sess.get(settings.SERPAPI_ENDPOINT, params=params) as r:
                if r.status != 200:
                    raise await _error_from_response(r)
                data = await r.json(content_type=None)
        finally:
            if session is None:
                await sess.close()
        return isinstance(data, dict) and bool(
            data.get("search_metadata") or data.get("organic_results")
        )

    return await _timed(SERPAPI_ID, SERPAPI_LABEL, call)


async def probe_reader(api_key: str, session: Optional[aiohttp.ClientSession] = None) -> StatusRecord:
    payload = {
        "url": "https://example.com",
        "timeout": 10,
        "no_cache": True,
        "return_format": "markdown",
    }

    async def call() -> bool:
        sess = _probe_session(session)
        try:
            async with sess.post(
                settings.READER_ENDPOINT,
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
            ) as r:
                if r.status != 200:
                    raise await _error_from_response(r)
                await r.read()
        finally:
            if session is None:
                await sess.close()
        return True

    return await _timed(READER_ID, READER_LABEL, call)


async def probe_deepseek(runtime: RuntimeConfig, client: Optional[Any] = None) -> StatusRecord:
    async def call() -> bool:
        llm = client or build_openai_client(
            runtime.deepseek_api_key or "",
            runtime.deepseek_api_base,
            settings.PROBE_TIMEOUT_SEC,
        )
        try:
            await llm.chat.completions.create(
                model=runtime.deepseek_model,
                messages=[{"role": "user", "content": "ping"}],
                temperature=0,
                max_tokens=20,
            )
        finally:
            if client is None:
                await llm.close()
        return True

    return await _timed(DEEPSEEK_ID, DEEPSEEK_LABEL, call)


async def check_service_status(
    runtime: RuntimeConfig,
    *,
    session: Optional[aiohttp.ClientSession] = None,
    llm_client: Optional[Any] = None,
) -> List[StatusRecord]:
    """Probe all three dependencies; order is search, extraction, generation."""

    async def serp() -> StatusRecord:
        if not runtime.serp_api_key:
            return missing_credential(SERPAPI_ID, SERPAPI_LABEL)
        return await probe_serpapi(runtime.serp_api_key, session)

    async def reader() -> StatusRecord:
        if not runtime.reader_api_key:
            return missing_credential(READER_ID, READER_LABEL)
        return await probe_reader(runtime.reader_api_key, session)

    async def deepseek() -> StatusRecord:
        if not runtime.deepseek_api_key:
            return missing_credential(DEEPSEEK_ID, DEEPSEEK_LABEL)
        return await probe_deepseek(runtime, llm_client)

    statuses = await asyncio.gather(serp(), reader(), deepseek())
    logger.info(
        "Dependency status checked",
        source=runtime.source.value,
        ok={s.id: s.ok for s in statuses},
    )
    return list(statuses)
