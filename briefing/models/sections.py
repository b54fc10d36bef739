"""
Internal data models for the section generation pipeline and the
configuration resolver. API-facing pydantic models live in ``models.press``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional, Tuple


class SearchMode(str, Enum):
    WEB = "web"
    SKIP = "skip"


class ConfigSource(str, Enum):
    PERSISTED = "persisted"
    ENVIRONMENT = "environment"
    NONE = "none"


# --------------------------------------------------------------------------- #
#                               SECTIONS                                      #
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class SearchQuery:
    id: str
    label: str
    query: str


@dataclass(frozen=True)
class SectionTemplate:
    id: str
    title: str
    duration_minutes: float
    default_prompt: str
    recommended_sources: Tuple[str, ...]
    search_queries: Tuple[SearchQuery, ...]
    target_words: Optional[int] = None


@dataclass
class SectionOverride:
    id: str
    prompt: Optional[str] = None
    duration_minutes: Optional[float] = None


@dataclass
class SectionRuntime:
    template: SectionTemplate
    prompt: str
    duration_minutes: float
    target_words: int


@dataclass
class RetrievedSource:
    title: str
    url: str
    snippet: str = ""
    origin: Optional[str] = None
    content: Optional[str] = None


@dataclass
class SectionContext:
    runtime: SectionRuntime
    sources: List[RetrievedSource] = field(default_factory=list)
    used_queries: List[str] = field(default_factory=list)

    @property
    def template(self) -> SectionTemplate:
        return self.runtime.template


@dataclass
class Reference:
    title: str
    url: str
    snippet: Optional[str] = None


@dataclass
class SectionResult:
    id: str
    title: str
    duration_minutes: float
    target_words: int
    content: str
    references: List[Reference]
    used_queries: List[str]


# --------------------------------------------------------------------------- #
#                          API CONFIGURATION                                  #
# --------------------------------------------------------------------------- #

CREDENTIAL_FIELDS = (
    "serp_api_key",
    "reader_api_key",
    "deepseek_api_key",
    "deepseek_api_base",
    "deepseek_model",
)


@dataclass
class ApiConfig:
    serp_api_key: Optional[str] = None
    reader_api_key: Optional[str] = None
    deepseek_api_key: Optional[str] = None
    deepseek_api_base: Optional[str] = None
    deepseek_model: Optional[str] = None
    updated_at: Optional[int] = None

    def has_value(self) -> bool:
        """True when at least one of the five credential fields is set."""
        return any(getattr(self, name) for name in CREDENTIAL_FIELDS)

    def as_dict(self) -> Dict[str, Optional[object]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ConfigSnapshot:
    config: Optional[ApiConfig]
    source: ConfigSource
    db_exists: bool


@dataclass
class RuntimeConfig:
    """Effective merged configuration; base URL and model are never empty."""

    deepseek_api_base: str
    deepseek_model: str
    source: ConfigSource
    serp_api_key: Optional[str] = None
    reader_api_key: Optional[str] = None
    deepseek_api_key: Optional[str] = None
    updated_at: Optional[int] = None


@dataclass
class StatusRecord:
    id: str
    label: str
    ok: bool
    checked_at: int
    message: str
    latency_ms: Optional[int] = None
