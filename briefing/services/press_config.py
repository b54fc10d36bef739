"""
Layered API configuration.

Two independent read sources feed the effective configuration: a persisted
single-row SQLite store and the process environment. The persisted row, when
it exists, wins field by field; the environment fills the gaps; the base URL
and model name fall back to hardcoded defaults.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import structlog

from ..core import config as settings
from ..database.connection import ensure_schema, open_engine, session_scope
from ..database.models import PRESS_CONFIG_ID, PressConfigRow
from ..models.sections import (
    CREDENTIAL_FIELDS,
    ApiConfig,
    ConfigSnapshot,
    ConfigSource,
    RuntimeConfig,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ConfigDefaults:
    deepseek_api_base: str = settings.DEFAULT_DEEPSEEK_API_BASE
    deepseek_model: str = settings.DEFAULT_DEEPSEEK_MODEL


DEFAULTS = ConfigDefaults()

_ENV_VARS = {
    "serp_api_key": settings.ENV_SERPAPI_API_KEY,
    "reader_api_key": settings.ENV_READER_API_KEY,
    "deepseek_api_key": settings.ENV_DEEPSEEK_API_KEY,
    "deepseek_api_base": settings.ENV_DEEPSEEK_API_BASE,
    "deepseek_model": settings.ENV_DEEPSEEK_MODEL,
}


def normalize_value(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def _now_ms() -> int:
    return int(time.time() * 1000)


def _row_to_config(row: PressConfigRow) -> ApiConfig:
    return ApiConfig(
        serp_api_key=normalize_value(row.serp_api_key),
        reader_api_key=normalize_value(row.reader_api_key),
        deepseek_api_key=normalize_value(row.deepseek_api_key),
        deepseek_api_base=normalize_value(row.deepseek_api_base),
        deepseek_model=normalize_value(row.deepseek_model),
        updated_at=row.updated,
    )


class PressConfigStore:
    """Singleton-row store backed by a SQLite file.

    Reads never create the file; the first save creates file and schema.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else settings.press_config_db_path()

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[ApiConfig]:
        engine = open_engine(self.path, allow_create=False)
        if engine is None:
            return None
        ensure_schema(engine, [PressConfigRow.__table__])
        with session_scope(engine) as session:
            row = session.get(PressConfigRow, PRESS_CONFIG_ID)
            return _row_to_config(row) if row is not None else None

    def write(self, payload: ApiConfig) -> ApiConfig:
        """Replace the singleton row with ``payload`` (values trimmed, blanks cleared)."""
        engine = open_engine(self.path, allow_create=True)
        ensure_schema(engine, [PressConfigRow.__table__])
        now = _now_ms()
        saved = ApiConfig(
            **{name: normalize_value(getattr(payload, name)) for name in CREDENTIAL_FIELDS},
            updated_at=now,
        )
        with session_scope(engine) as session:
            session.merge(
                PressConfigRow(
                    id=PRESS_CONFIG_ID,
                    serp_api_key=saved.serp_api_key,
                    reader_api_key=saved.reader_api_key,
                    deepseek_api_key=saved.deepseek_api_key,
                    deepseek_api_base=saved.deepseek_api_base,
                    deepseek_model=saved.deepseek_model,
                    updated=now,
                )
            )
        logger.info("Saved API configuration", path=str(self.path))
        return saved


def default_store() -> PressConfigStore:
    return PressConfigStore()


def read_persisted(store: Optional[PressConfigStore] = None) -> Optional[ApiConfig]:
    return (store or default_store()).read()


def read_environment(environ: Optional[Mapping[str, str]] = None) -> Optional[ApiConfig]:
    """ApiConfig from the environment, or ``None`` when every field is blank."""
    env = os.environ if environ is None else environ
    candidate = ApiConfig(
        **{name: normalize_value(env.get(var)) for name, var in _ENV_VARS.items()}
    )
    return candidate if candidate.has_value() else None


def resolve_source(persisted: Optional[ApiConfig], environment: Optional[ApiConfig]) -> ConfigSource:
    if persisted is not None:
        return ConfigSource.PERSISTED
    if environment is not None and environment.has_value():
        return ConfigSource.ENVIRONMENT
    return ConfigSource.NONE


def merge_config(
    persisted: Optional[ApiConfig],
    environment: Optional[ApiConfig],
    defaults: ConfigDefaults = DEFAULTS,
) -> RuntimeConfig:
    """Field-by-field merge: persisted, then environment, then defaults."""

    def pick(name: str) -> Optional[str]:
        for layer in (persisted, environment):
            if layer is not None:
                value = normalize_value(getattr(layer, name))
                if value:
                    return value
        return None

    return RuntimeConfig(
        serp_api_key=pick("serp_api_key"),
        reader_api_key=pick("reader_api_key"),
        deepseek_api_key=pick("deepseek_api_key"),
        deepseek_api_base=pick("deepseek_api_base") or defaults.deepseek_api_base,
        deepseek_model=pick("deepseek_model") or defaults.deepseek_model,
        source=resolve_source(persisted, environment),
        updated_at=persisted.updated_at if persisted is not None else None,
    )


def get_snapshot(store: Optional[PressConfigStore] = None) -> ConfigSnapshot:
    store = store or default_store()
    persisted = store.read()
    environment = read_environment()
    source = resolve_source(persisted, environment)
    config = persisted if persisted is not None else environment
    return ConfigSnapshot(config=config, source=source, db_exists=store.exists())


def resolve_runtime(store: Optional[PressConfigStore] = None) -> RuntimeConfig:
    return merge_config(read_persisted(store), read_environment())


def save(payload: ApiConfig, store: Optional[PressConfigStore] = None) -> ConfigSnapshot:
    saved = (store or default_store()).write(payload)
    return ConfigSnapshot(config=saved, source=ConfigSource.PERSISTED, db_exists=True)
