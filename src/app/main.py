"""BASTION - single-tower defense simulation.

Main FastAPI application.  The lifespan builds one SimulationEngine from
settings and drives it with an asyncio frame loop on the server's event
loop, so ticks and API handlers never run concurrently.
"""

from __future__ import annotations

import asyncio
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers import game_router


def _configure_logging() -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())


def _create_simulation_engine():
    """Create a SimulationEngine from settings. Returns engine or None."""
    if not settings.simulation_enabled:
        return None

    from bastion.comms.event_bus import EventBus
    from bastion.simulation import SimulationEngine

    engine = SimulationEngine(
        settings.simulation_variant,
        event_bus=EventBus(),
        viewport=(settings.viewport_width, settings.viewport_height),
        max_frame_time=settings.simulation_max_frame_time,
        seed=settings.simulation_seed,
    )
    logger.info("Simulation engine created")
    return engine


async def run_frame_loop(engine, frame_rate: float) -> None:
    """Tick *engine* with the wall-clock delta, roughly *frame_rate* times a second."""
    interval = 1.0 / frame_rate
    last = time.monotonic()
    while True:
        await asyncio.sleep(interval)
        now = time.monotonic()
        engine.tick(now - last)
        last = now


def _on_frame_loop_done(task: asyncio.Task) -> None:
    """Log a frame loop that ended with an error instead of by cancellation."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.opt(exception=exc).error("Frame loop crashed; simulation is frozen")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    _configure_logging()
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} v0.1.0 - INITIALIZING")
    logger.info("=" * 60)

    engine = _create_simulation_engine()
    app.state.simulation_engine = engine
    frame_task = None
    if engine is not None:
        frame_task = asyncio.create_task(
            run_frame_loop(engine, settings.simulation_frame_rate)
        )
        frame_task.add_done_callback(_on_frame_loop_done)
        logger.info(f"Frame loop started ({settings.simulation_frame_rate:.0f} Hz)")
    else:
        logger.warning("Simulation disabled (SIMULATION_ENABLED=false)")

    yield

    if frame_task is not None and not frame_task.done():
        frame_task.cancel()
        try:
            await frame_task
        except asyncio.CancelledError:
            pass
        logger.info("Frame loop stopped")
    logger.info(f"{settings.app_name} shutting down...")


app = FastAPI(
    title="BASTION",
    description="Single-tower defense simulation",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(game_router)


@app.get("/api/status")
async def status():
    """Liveness probe plus the configured variant."""
    engine = getattr(app.state, "simulation_engine", None)
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "simulation": engine is not None,
        "variant": engine.config.name if engine is not None else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
