"""
Core application setup for the Press Briefing API
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..logging_config import bind_request_context, configure_logging
from ..routes import register_all_routers
from ..services.feed_cache import get_cache_table
from .config import get_environment, get_trusted_origins
from .error_handlers import register_error_handlers

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    configure_logging()
    logger.info("Starting Press Briefing API", environment=get_environment(), version=__version__)

    app.state.feed_cache = await get_cache_table()
    logger.info("Feed cache ready", backend=type(app.state.feed_cache).__name__)

    yield

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Press Briefing API",
        version=__version__,
        description="Sectioned morning-briefing drafts grounded in fresh web sources",
        lifespan=lifespan,
    )
    app.state.feed_cache = None

    setup_middleware(app)
    register_error_handlers(app)
    register_all_routers(app)
    setup_custom_endpoints(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure middleware"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_trusted_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Request-ID"],
        max_age=600,
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        bind_request_context(request_id=request_id)

        started = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.debug("Request handled", method=request.method, path=request.url.path,
                     status=response.status_code,
                     duration_ms=round((time.perf_counter() - started) * 1000, 1))
        return response


def setup_custom_endpoints(app: FastAPI):
    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "version": __version__,
            "environment": get_environment(),
            "feed_cache": app.state.feed_cache is not None,
        }
