"""Tests for /health, /ready and the startup sequence behind them."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

import main


@pytest.mark.unit
class TestHealth:
    async def test_health_returns_200(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "iou-ledger-api"}


@pytest.mark.integration
class TestReady:
    async def test_ready_when_database_answers(self, client: AsyncClient):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_database_unreachable_returns_503(self, client: AsyncClient):
        with patch(
            "routes.health_routes.check_db_connection",
            new=AsyncMock(side_effect=ConnectionError("refused")),
        ):
            response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json()["detail"] == "Database unavailable"


@pytest.mark.integration
class TestLifespan:
    async def test_startup_creates_tables_and_serves(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/l.db")
        app = FastAPI()

        with patch("main.dispose_engine", new=AsyncMock()) as dispose:
            async with main.lifespan(app):
                assert app.state.session_maker is not None
                dispose.assert_not_awaited()

        dispose.assert_awaited_once_with(app.state.engine)
        assert (tmp_path / "l.db").exists()

    async def test_startup_failure_aborts(self):
        app = FastAPI()

        with (
            patch("main.init_db", new=AsyncMock(side_effect=ConnectionError("no db"))),
            patch("main.dispose_engine", new=AsyncMock()) as dispose,
        ):
            with pytest.raises(ConnectionError, match="no db"):
                async with main.lifespan(app):
                    pytest.fail("app must not start serving")

        dispose.assert_awaited_once()
