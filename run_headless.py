#!/usr/bin/env python3
"""Run a headless game and report how far the tower got.

Usage:
    python3 run_headless.py [--variant arsenal] [--seconds 300] [--seed 7]

Steps the engine at a fixed frame rate with a greedy upgrade policy (buy
the cheapest affordable upgrade whenever coins allow) and launches manual
waves as soon as the field is clear.  Useful for balancing variants.
"""

import argparse
import sys
from pathlib import Path

# Ensure src/ is on path when run from a checkout
sys.path.insert(0, str(Path(__file__).parent / "src"))

from loguru import logger

from bastion.comms.event_bus import EventBus, drain
from bastion.simulation import VARIANTS, SimulationEngine, UpgradeKind


def buy_cheapest(engine: SimulationEngine) -> int:
    """Greedy policy: keep buying the cheapest upgrade while affordable."""
    bought = 0
    while True:
        snapshot = engine.get_snapshot()
        cost, kind = min(
            (info["cost"], kind) for kind, info in snapshot["upgrades"].items()
        )
        if cost > snapshot["coins"] or not engine.purchase_upgrade(UpgradeKind(kind)):
            return bought
        bought += 1


def run_one(variant: str, seconds: float, fps: float, seed: int | None) -> dict:
    bus = EventBus()
    events = bus.subscribe(["target_eliminated", "base_breached", "wave_complete"])
    engine = SimulationEngine(variant, event_bus=bus, seed=seed)

    dt = 1.0 / fps
    elapsed = 0.0
    upgrades = 0
    kills = {"projectile": 0, "beam": 0, "pulse": 0}
    breaches = 0
    while elapsed < seconds and not engine.game_over:
        if engine.config.manual_waves and not engine.state.wave_active:
            engine.start_wave()
        engine.tick(dt)
        elapsed += dt
        upgrades += buy_cheapest(engine)
        for msg in drain(events):
            if msg["type"] == "target_eliminated":
                kills[msg["data"]["method"]] += 1
            elif msg["type"] == "base_breached":
                breaches += 1

    snapshot = engine.get_snapshot()
    return {
        "variant": variant,
        "seconds": round(elapsed, 1),
        "game_over": snapshot["game_over"],
        "wave": snapshot["wave"],
        "health": snapshot["health"],
        "coins": snapshot["coins"],
        "upgrades": upgrades,
        "levels": {k: v["level"] for k, v in snapshot["upgrades"].items()},
        "kills": kills,
        "breaches": breaches,
        "log": snapshot["log"],
    }


def main():
    parser = argparse.ArgumentParser(description="Headless BASTION run")
    parser.add_argument("--variant", choices=sorted(VARIANTS), action="append",
                        help="variant(s) to run (default: all)")
    parser.add_argument("--seconds", type=float, default=300.0)
    parser.add_argument("--fps", type=float, default=60.0)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    for name in args.variant or sorted(VARIANTS):
        r = run_one(name, args.seconds, args.fps, args.seed)
        print(f"\n{'='*60}")
        print(f"  VARIANT: {r['variant']}")
        print(f"{'='*60}")
        outcome = "tower fell" if r["game_over"] else "still standing"
        print(f"  {outcome} after {r['seconds']}s at wave {r['wave']}")
        print(f"  Health: {r['health']}  Coins: {r['coins']}  Breaches: {r['breaches']}")
        print(f"  Upgrades bought: {r['upgrades']} {r['levels']}")
        print(f"  Kills: {r['kills']}")
        print(f"\n  --- Last events ---")
        for line in r["log"]:
            print(f"  {line}")


if __name__ == "__main__":
    main()
