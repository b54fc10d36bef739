"""
Press routes: briefing generation, API configuration and dependency status.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

import structlog
from fastapi import APIRouter, Depends

from ..logging_config import bind_request_context
from ..models.press import (
    ApiConfigModel,
    ConfigSnapshotModel,
    GenerationRequest,
    GenerationResponse,
    SectionResultModel,
    StatusRecordModel,
    StatusResponse,
)
from ..models.sections import RuntimeConfig, SearchMode, SectionOverride, StatusRecord
from ..services import press_config
from ..services.press_pipeline import PressGenerationResult, generate_press_release
from ..services.status_probe import check_service_status

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/press", tags=["press"])

PressRunner = Callable[
    [RuntimeConfig, Optional[List[SectionOverride]], Optional[SearchMode]],
    Awaitable[PressGenerationResult],
]
StatusChecker = Callable[[RuntimeConfig], Awaitable[List[StatusRecord]]]


def get_config_store() -> press_config.PressConfigStore:
    return press_config.default_store()


def get_press_runner() -> PressRunner:
    return generate_press_release


def get_status_checker() -> StatusChecker:
    return check_service_status


@router.post("/generate", response_model=GenerationResponse)
async def generate(
    payload: GenerationRequest,
    store: press_config.PressConfigStore = Depends(get_config_store),
    runner: PressRunner = Depends(get_press_runner),
) -> GenerationResponse:
    """Generate every catalog section; fails as a whole on any fatal error."""
    mode = payload.search_mode or SearchMode.WEB
    overrides = [item.to_override() for item in payload.sections or []]
    runtime = await asyncio.to_thread(press_config.resolve_runtime, store)
    bind_request_context(search_mode=mode.value)
    logger.info("Generating press release", search_mode=mode.value,
                overrides=len(overrides), config_source=runtime.source.value)

    result = await runner(runtime, overrides, mode)
    return GenerationResponse(
        sections=[SectionResultModel.from_result(section) for section in result.sections],
        search_mode=result.search_mode,
    )


@router.get("/config", response_model=ConfigSnapshotModel)
async def get_config(
    store: press_config.PressConfigStore = Depends(get_config_store),
) -> ConfigSnapshotModel:
    snapshot = await asyncio.to_thread(press_config.get_snapshot, store)
    return ConfigSnapshotModel.from_snapshot(snapshot)


@router.post("/config", response_model=ConfigSnapshotModel)
async def save_config(
    payload: ApiConfigModel,
    store: press_config.PressConfigStore = Depends(get_config_store),
) -> ConfigSnapshotModel:
    snapshot = await asyncio.to_thread(press_config.save, payload.to_config(), store)
    return ConfigSnapshotModel.from_snapshot(snapshot)


@router.get("/status", response_model=StatusResponse)
async def get_status(
    store: press_config.PressConfigStore = Depends(get_config_store),
    checker: StatusChecker = Depends(get_status_checker),
) -> StatusResponse:
    runtime = await asyncio.to_thread(press_config.resolve_runtime, store)
    statuses = await checker(runtime)
    return StatusResponse(
        source=runtime.source,
        statuses=[StatusRecordModel.from_record(record) for record in statuses],
    )
