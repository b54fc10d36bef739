"""
Error taxonomy for the Press Briefing API.

Fatal errors (``ConfigurationError``, ``GenerationFailure``) abort a request
and are mapped to HTTP responses in ``core.error_handlers``. Recoverable
errors (``UpstreamPartialFailure``, ``ProbeFailure``) are raised by the
provider adapters and caught by their callers, which degrade the affected
item only.
"""

from typing import Optional


class BriefingError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(BriefingError):
    """A required credential is missing; raised before any network call."""

    def __init__(self, message: str, missing: Optional[str] = None):
        super().__init__(message)
        self.missing = missing


class UpstreamPartialFailure(BriefingError):
    """A single search query or content fetch failed."""

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.target = target


class GenerationFailure(BriefingError):
    """The generation backend errored or returned nothing usable."""


class EmptyGenerationError(GenerationFailure):
    """Neither completion path of the response envelope carried text."""


class ProbeFailure(BriefingError):
    """A dependency probe returned a malformed or failed response."""


class FeedSourceError(BriefingError):
    """A feed connector could not produce a single valid item."""
