"""
Core configuration and settings for the Press Briefing API

Retrieval budgets, timeouts and feed cache switches. Environment-backed
values are read at call time.

Provider credentials are resolved through ``services.press_config``
(persisted store over environment), not here.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)) or default)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)) or default)
    except ValueError:
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


# ────────────────────────────────────────────────────────────
#  Section / prompt budgets
# ────────────────────────────────────────────────────────────

WORDS_PER_MINUTE: int = 260

# Deduplicated sources kept per section before extraction
MAX_SOURCES_PER_SECTION: int = 6

# Characters of extracted body text rendered per source
SOURCE_BODY_MAX_CHARS: int = 1200


# ────────────────────────────────────────────────────────────
#  Provider endpoints & defaults
# ────────────────────────────────────────────────────────────

SERPAPI_ENDPOINT = "https://serpapi.com/search"
READER_ENDPOINT = "https://open.bigmodel.cn/api/paas/v4/reader"

DEFAULT_DEEPSEEK_API_BASE = "https://api.deepseek.com"
DEFAULT_DEEPSEEK_MODEL = "deepseek-chat"

# Environment variable names for the five credential fields
ENV_SERPAPI_API_KEY = "SERPAPI_API_KEY"
ENV_READER_API_KEY = "READER_API_KEY"
ENV_DEEPSEEK_API_KEY = "DEEPSEEK_API_KEY"
ENV_DEEPSEEK_API_BASE = "DEEPSEEK_API_BASE"
ENV_DEEPSEEK_MODEL = "DEEPSEEK_MODEL"

GENERATION_TEMPERATURE: float = 0.35
GENERATION_TIMEOUT_SEC: float = 30.0
PROBE_TIMEOUT_SEC: float = 12.0


def search_timeout_sec() -> float:
    return _env_float("SEARCH_API_TIMEOUT_SEC", 30.0)


def reader_timeout_sec() -> float:
    return _env_float("READER_TIMEOUT_SEC", 20.0)


# ────────────────────────────────────────────────────────────
#  Storage
# ────────────────────────────────────────────────────────────

def press_config_db_path() -> Path:
    """Location of the singleton API configuration store."""
    return Path(os.getenv("PRESS_CONFIG_DB_PATH", os.path.join("data", "press-config.db")))


def feed_cache_db_path() -> Path:
    return Path(os.getenv("FEED_CACHE_DB_PATH", os.path.join("data", "feed-cache.db")))


def feed_cache_enabled() -> bool:
    return _env_flag("ENABLE_CACHE", True)


def feed_cache_init_table() -> bool:
    return _env_flag("INIT_TABLE", True)


def feed_cache_ttl_seconds() -> int:
    return _env_int("FEED_CACHE_TTL_SECONDS", 1800)


# ────────────────────────────────────────────────────────────
#  Service
# ────────────────────────────────────────────────────────────

def get_environment() -> str:
    """Get current environment"""
    return os.getenv("ENVIRONMENT", "production")


def is_production() -> bool:
    return get_environment() == "production"


def get_trusted_origins() -> List[str]:
    """CORS origins allowed to call the API"""
    raw = os.getenv("TRUSTED_ORIGINS", "http://localhost:5173,http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
