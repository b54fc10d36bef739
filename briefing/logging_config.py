"""Structured logging for the briefing service.

:func:`configure_logging` sets up *structlog* with a JSON pipeline (or a
console renderer when ``LOG_PRETTY=1``) and routes stdlib records from
uvicorn, aiohttp and the OpenAI SDK through the same renderer. Every event
carries ``service`` and, inside a request, the ids bound by
:func:`bind_request_context`: ``request_id`` from the middleware,
``search_mode`` from the generate route and ``section`` while one section is
being generated.

The application factory calls it once at startup; modules only call
:pyfunc:`structlog.get_logger()`.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, MutableMapping, Optional

import structlog

from . import __version__

__all__ = [
    "SERVICE_NAME",
    "NOISY_LOGGERS",
    "configure_logging",
    "bind_request_context",
]

SERVICE_NAME = "press-briefing"

# Upstream clients log every request at INFO; keep them at WARNING.
NOISY_LOGGERS = ("httpx", "openai", "aiohttp.access", "aiohttp.client")


def add_service_info(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def configure_logging(force: bool = False) -> None:
    """Set up structlog and the stdlib bridge once per process.

    Args:
        force: Reconfigure even if already configured (tests switching renderer).
    """

    if getattr(structlog, "_briefing_configured", False) and not force:
        return

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    pretty = os.getenv("LOG_PRETTY", "0").lower() in {"1", "true", "yes"}
    renderer = structlog.dev.ConsoleRenderer() if pretty else structlog.processors.JSONRenderer(ensure_ascii=False)

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_service_info,
        timestamper,
    ]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    setattr(structlog, "_briefing_configured", True)


def bind_request_context(
    request_id: Optional[str] = None,
    *,
    search_mode: Optional[str] = None,
    section: Optional[str] = None,
    **extra: str,
) -> Dict[str, str]:
    """Bind briefing ids into structlog contextvars for subsequent logs.

    Empty values are skipped so a later call never blanks an earlier id.
    Returns what was bound.
    """
    payload: Dict[str, str] = {}
    for key, value in (("request_id", request_id), ("search_mode", search_mode), ("section", section)):
        if value:
            payload[key] = value
    payload.update({k: v for k, v in extra.items() if v})
    if payload:
        structlog.contextvars.bind_contextvars(**payload)
    return payload
