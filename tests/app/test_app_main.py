"""Unit tests for app.main — FastAPI app creation, routing, lifespan, frame loop."""
from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app():
    """Import the actual app instance (no lifespan execution)."""
    from app.main import app as real_app
    return real_app


# ---------------------------------------------------------------------------
# App creation tests
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestAppCreation:
    def test_app_is_fastapi_instance(self, app):
        assert isinstance(app, FastAPI)

    def test_app_title(self, app):
        assert app.title == "BASTION"

    def test_game_routes_registered(self, app):
        paths = {route.path for route in app.routes}
        assert "/api/game/state" in paths
        assert "/api/game/upgrade/{kind}" in paths
        assert "/api/status" in paths


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestCreateSimulationEngine:
    def test_disabled_returns_none(self):
        from app import main

        with patch.object(main.settings, "simulation_enabled", False):
            assert main._create_simulation_engine() is None

    def test_builds_from_settings(self):
        from app import main

        with patch.object(main.settings, "simulation_variant", "lancer"), \
                patch.object(main.settings, "simulation_seed", 3):
            engine = main._create_simulation_engine()
        assert engine.config.name == "lancer"
        assert engine.event_bus is not None
        assert engine.max_frame_time == main.settings.simulation_max_frame_time


@pytest.mark.unit
class TestFrameLoop:
    def test_loop_ticks_engine(self):
        from app.main import run_frame_loop

        engine = MagicMock()

        async def run():
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(run_frame_loop(engine, 200.0), timeout=0.1)

        asyncio.run(run())
        assert engine.tick.call_count >= 1
        delta = engine.tick.call_args[0][0]
        assert delta > 0

    def test_crash_is_logged(self):
        from app import main

        engine = MagicMock()
        engine.tick.side_effect = RuntimeError("tick failed")

        async def run():
            task = asyncio.create_task(main.run_frame_loop(engine, 200.0))
            task.add_done_callback(main._on_frame_loop_done)
            with pytest.raises(RuntimeError):
                await task
            await asyncio.sleep(0)

        with patch.object(main, "logger") as mock_logger:
            asyncio.run(run())
        mock_logger.opt.assert_called_once()
        assert isinstance(mock_logger.opt.call_args.kwargs["exception"], RuntimeError)
        mock_logger.opt.return_value.error.assert_called_once()

    def test_cancel_is_not_logged(self):
        from app import main

        async def run():
            task = asyncio.create_task(main.run_frame_loop(MagicMock(), 200.0))
            task.add_done_callback(main._on_frame_loop_done)
            await asyncio.sleep(0.02)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            await asyncio.sleep(0)

        with patch.object(main, "logger") as mock_logger:
            asyncio.run(run())
        mock_logger.opt.assert_not_called()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestLifespan:
    def test_status_with_engine(self, app):
        with TestClient(app) as client:
            resp = client.get("/api/status")
            assert resp.status_code == 200
            data = resp.json()
            assert data["name"] == "BASTION"
            assert data["simulation"] is True
            assert data["variant"] == "arsenal"
            assert client.get("/api/game/state").status_code == 200

    def test_status_without_engine(self, app):
        from app import main

        with patch.object(main.settings, "simulation_enabled", False):
            with TestClient(app) as client:
                data = client.get("/api/status").json()
                assert data["simulation"] is False
                assert data["variant"] is None
                assert client.get("/api/game/state").status_code == 503
