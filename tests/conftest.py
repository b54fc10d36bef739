"""Global pytest fixtures.

Every test runs with the credential variables cleared and both SQLite
stores pointed into a per-test temporary directory, so a developer's
``.env`` or ``data/`` never leaks into assertions.
"""

from __future__ import annotations

import pytest

from briefing.core import config as settings

_ISOLATED_VARS = (
    settings.ENV_SERPAPI_API_KEY,
    settings.ENV_READER_API_KEY,
    settings.ENV_DEEPSEEK_API_KEY,
    settings.ENV_DEEPSEEK_API_BASE,
    settings.ENV_DEEPSEEK_MODEL,
    "ENABLE_CACHE",
    "INIT_TABLE",
    "FEED_CACHE_TTL_SECONDS",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in _ISOLATED_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PRESS_CONFIG_DB_PATH", str(tmp_path / "press-config.db"))
    monkeypatch.setenv("FEED_CACHE_DB_PATH", str(tmp_path / "feed-cache.db"))
    return tmp_path
