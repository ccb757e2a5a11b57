"""Shared fixtures: an in-memory IOU store and an HTTP client bound to it.

Every test gets its own SQLite database (aiosqlite + StaticPool so the
single in-memory connection is shared), so tests never see each other's
IOUs.
"""

import os

# Settings are validated at import time of main/core.database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  (registers the ious table on Base.metadata)
from core.config import clear_settings_cache
from core.database import Base, create_session_maker
from core.wide_event import clear_wide_event, init_wide_event


@pytest.fixture(autouse=True)
def fresh_request_context() -> Generator[None]:
    """Give each test its own wide event and a freshly read Settings."""
    clear_settings_cache()
    init_wide_event()
    yield
    clear_wide_event()
    clear_settings_cache()


@pytest_asyncio.fixture
async def ledger_engine() -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(ledger_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    async with create_session_maker(ledger_engine)() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def app(ledger_engine: AsyncEngine) -> FastAPI:
    """The real application, pointed at this test's database.

    Lifespan is not run; the engine and session maker it would create are
    installed directly.
    """
    from main import app as ledger_app

    ledger_app.state.engine = ledger_engine
    ledger_app.state.session_maker = create_session_maker(ledger_engine)
    return ledger_app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
