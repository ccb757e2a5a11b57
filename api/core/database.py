"""IOU store plumbing: engine, per-request sessions and schema bootstrap.

PostgreSQL (asyncpg) gets a connection pool sized from Settings. SQLite
(aiosqlite) runs with NullPool, since each aiosqlite connection owns a
thread and pooling buys nothing.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from core.config import Settings, get_settings
from core.logger import get_logger

logger = get_logger(__name__)

CONNECT_CHECK_TIMEOUT_SECONDS = 30


class Base(DeclarativeBase):
    pass


def _engine_options(settings: Settings) -> dict:
    if settings.is_sqlite:
        return {"echo": settings.db_echo, "poolclass": NullPool}
    return {
        "echo": settings.db_echo,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_pool_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
    }


def create_engine() -> AsyncEngine:
    settings = get_settings()
    engine = create_async_engine(settings.database_url, **_engine_options(settings))

    if settings.is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def _sqlite_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows stay readable after commit so routes can serialize them
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession]:
    """One session per request: commit when the handler returns, else roll back.

    Repositories only flush; the commit belongs here.
    """
    async with request.app.state.session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def check_db_connection(engine: AsyncEngine) -> None:
    """Round-trip ``SELECT 1``; raises on failure or after the timeout."""
    async with asyncio.timeout(CONNECT_CHECK_TIMEOUT_SECONDS):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))


async def init_db(engine: AsyncEngine) -> None:
    await check_db_connection(engine)
    logger.info("db.connectivity.verified", sqlite=get_settings().is_sqlite)


async def create_tables(engine: AsyncEngine) -> None:
    """Create the ious table if it is missing. Existing tables are left as-is."""
    import models  # noqa: F401  (populates Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db.tables.ensured", tables=sorted(Base.metadata.tables))


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("db.engine.disposed")
