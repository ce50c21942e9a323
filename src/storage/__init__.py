"""Async engine and sessions for the workflow/document store.

One engine per process, built lazily from settings. Repositories only
flush; whoever opens the session decides when to commit:

    async with get_session() as session:
        document = await DocumentRepository(session).update(doc_id, changes)
        await session.commit()
"""

import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.settings import Settings, get_settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None
# Reentrant: get_session_factory() calls get_engine() while holding it
_init_lock = threading.RLock()


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """The process-wide engine, created on first call."""
    global _engine

    with _init_lock:
        if _engine is None:
            cfg = settings or get_settings()
            _engine = create_async_engine(
                str(cfg.database_url),
                pool_size=cfg.database_pool_size,
                max_overflow=cfg.database_max_overflow,
                pool_timeout=cfg.database_pool_timeout,
                pool_recycle=cfg.database_pool_recycle,
                pool_pre_ping=True,
                echo=cfg.debug,
            )
        return _engine


def get_session_factory(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the process-wide engine.

    Objects stay readable after commit so routes can serialize what
    they just wrote.
    """
    global _session_factory

    with _init_lock:
        if _session_factory is None:
            _session_factory = async_sessionmaker(
                bind=get_engine(settings),
                expire_on_commit=False,
                autoflush=False,
            )
        return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Open a session; uncommitted work is rolled back on close."""
    async with get_session_factory()() as session:
        yield session


async def init_db() -> None:
    """Open the pool and fail fast if PostgreSQL is unreachable."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    """Dispose the engine; the next call to get_engine() builds a new one."""
    global _engine, _session_factory

    with _init_lock:
        engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()


__all__ = [
    "close_db",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
]
