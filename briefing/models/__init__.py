"""
Models package for the Press Briefing API
"""

from .sections import (
    ApiConfig,
    ConfigSnapshot,
    ConfigSource,
    Reference,
    RetrievedSource,
    RuntimeConfig,
    SearchMode,
    SearchQuery,
    SectionContext,
    SectionOverride,
    SectionResult,
    SectionRuntime,
    SectionTemplate,
    StatusRecord,
)

__all__ = [
    "ApiConfig",
    "ConfigSnapshot",
    "ConfigSource",
    "Reference",
    "RetrievedSource",
    "RuntimeConfig",
    "SearchMode",
    "SearchQuery",
    "SectionContext",
    "SectionOverride",
    "SectionResult",
    "SectionRuntime",
    "SectionTemplate",
    "StatusRecord",
]
