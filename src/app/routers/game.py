"""Game control API — state snapshot, upgrades, wave start, reset, viewport."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from bastion.simulation.economy import parse_upgrade_kind

router = APIRouter(prefix="/api/game", tags=["game"])


class Viewport(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)


def _get_engine(request: Request):
    """Retrieve the SimulationEngine from app state."""
    engine = getattr(request.app.state, "simulation_engine", None)
    if engine is None:
        raise HTTPException(503, "Simulation engine not available")
    return engine


@router.get("/state")
async def get_game_state(request: Request):
    """Get the current snapshot: wave, coins, health, entities, log."""
    engine = _get_engine(request)
    return engine.get_snapshot()


@router.post("/upgrade/{kind}")
async def purchase_upgrade(kind: str, request: Request):
    """Buy one level of damage, fire_rate or range. Unaffordable buys are no-ops."""
    engine = _get_engine(request)
    try:
        upgrade_kind = parse_upgrade_kind(kind)
    except ValueError as e:
        raise HTTPException(400, str(e))
    purchased = engine.purchase_upgrade(upgrade_kind)
    snapshot = engine.get_snapshot()
    key = upgrade_kind.value
    return {
        "purchased": purchased,
        "kind": key,
        "upgrade": snapshot["upgrades"][key],
        "coins": snapshot["coins"],
    }


@router.post("/start-wave")
async def start_wave(request: Request):
    """Launch the next wave. Only meaningful in manual-start variants."""
    engine = _get_engine(request)
    if not engine.config.manual_waves:
        raise HTTPException(400, f"Waves start automatically in variant: {engine.config.name}")
    started = engine.start_wave()
    return {"started": started, "wave": engine.state.wave}


@router.post("/reset")
async def reset_game(request: Request):
    """Throw away the current run and start over."""
    engine = _get_engine(request)
    engine.reset()
    return {"status": "reset", "variant": engine.config.name}


@router.post("/viewport")
async def set_viewport(viewport: Viewport, request: Request):
    """Tell the engine the playfield was resized."""
    engine = _get_engine(request)
    engine.set_viewport(viewport.width, viewport.height)
    return {"scale": engine.scaling.scale}


@router.get("/projectiles")
async def get_projectiles(request: Request):
    """Get projectiles in flight for late-joining clients."""
    engine = _get_engine(request)
    return [p.to_dict() for p in engine.state.projectiles]
