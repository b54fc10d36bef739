"""
Database connection and session management.

Both stores are local SQLite files opened per operation: open, run, close.
There is no long-lived pool and no concurrent-write discipline beyond SQLite's
own locking (last write wins on singleton rows).
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

import structlog
from sqlalchemy import Table, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from .models import Base

logger = structlog.get_logger(__name__)


def sqlite_url(path: Path) -> str:
    return f"sqlite:///{path}"


def open_engine(path: Path, *, allow_create: bool) -> Optional[Engine]:
    """Engine for ``path``; ``None`` when the file is missing and creation is not allowed."""
    if not path.exists():
        if not allow_create:
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(sqlite_url(path), poolclass=NullPool, future=True)


def ensure_schema(engine: Engine, tables: Optional[Sequence[Table]] = None) -> None:
    Base.metadata.create_all(engine, tables=list(tables) if tables else None)


@contextmanager
def session_scope(engine: Engine, *, dispose: bool = True) -> Iterator[Session]:
    """Transactional scope; the engine is disposed on exit unless told otherwise."""
    factory = sessionmaker(bind=engine, expire_on_commit=False, future=True)
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        if dispose:
            engine.dispose()
