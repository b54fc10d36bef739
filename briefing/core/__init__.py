"""
Core package for the Press Briefing API.

Re-exports the error taxonomy so callers can import it from ``briefing.core``
without knowing the module layout. ``create_app`` lives in ``core.app``.
"""

from .exceptions import (
    BriefingError,
    ConfigurationError,
    EmptyGenerationError,
    FeedSourceError,
    GenerationFailure,
    ProbeFailure,
    UpstreamPartialFailure,
)

__all__ = [
    "BriefingError",
    "ConfigurationError",
    "EmptyGenerationError",
    "FeedSourceError",
    "GenerationFailure",
    "ProbeFailure",
    "UpstreamPartialFailure",
]
