"""
Error handlers for the Press Briefing API
"""

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import (
    BriefingError,
    ConfigurationError,
    FeedSourceError,
    GenerationFailure,
)

logger = structlog.get_logger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _body(error: str, detail, request: Request) -> dict:
    return {"error": error, "detail": detail, "request_id": _request_id(request)}


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten pydantic errors into `field: message` lines"""
    messages = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error["loc"][1:])  # skip "body"
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(status_code=422, content=_body("Validation Error", messages, request))


async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Request rejected: missing credential",
                 missing=exc.missing, path=request.url.path)
    return JSONResponse(status_code=400, content=_body("Configuration Error", exc.message, request))


async def generation_failure_handler(request: Request, exc: GenerationFailure):
    logger.error("Generation failed", error=exc.message,
                 error_type=type(exc).__name__, path=request.url.path)
    return JSONResponse(status_code=502, content=_body("Generation Failure", exc.message, request))


async def feed_source_error_handler(request: Request, exc: FeedSourceError):
    logger.error("Feed source failed", error=exc.message, path=request.url.path)
    return JSONResponse(status_code=502, content=_body("Feed Source Error", exc.message, request))


async def briefing_error_handler(request: Request, exc: BriefingError):
    logger.error("Request failed", error=exc.message,
                 error_type=type(exc).__name__, path=request.url.path)
    return JSONResponse(status_code=500, content=_body("Briefing Error", exc.message, request))


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_body("HTTP Error", exc.detail, request),
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception",
                 error=str(exc),
                 error_type=type(exc).__name__,
                 path=request.url.path,
                 request_id=_request_id(request))
    return JSONResponse(
        status_code=500,
        content=_body("Internal Server Error", "An unexpected error occurred", request),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(GenerationFailure, generation_failure_handler)
    app.add_exception_handler(FeedSourceError, feed_source_error_handler)
    app.add_exception_handler(BriefingError, briefing_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
