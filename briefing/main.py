"""Entrypoint: ``uvicorn briefing.main:app``."""

import os

from .core.app import create_app
from .core.config import is_production

app = create_app()

__all__ = ["app"]


def run() -> None:
    import uvicorn

    uvicorn.run(
        "briefing.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=not is_production(),
        log_config=None,
    )


if __name__ == "__main__":
    run()
