"""
Routes package for the Press Briefing API.

Aggregates the APIRouter instances so the application factory can register
them in one place.
"""

from __future__ import annotations

from fastapi import FastAPI

from .feeds import router as feeds_router
from .press import router as press_router

__all__ = [
    "press_router",
    "feeds_router",
    "all_routers",
    "register_all_routers",
]

all_routers = [
    press_router,
    feeds_router,
]


def register_all_routers(app: FastAPI, *, prefix: str = "") -> None:
    """Register every router; each already carries its own path prefix."""
    for router in all_routers:
        app.include_router(router, prefix=prefix)
