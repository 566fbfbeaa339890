"""SimulationState — the single owned aggregate of mutable game state.

Subsystems (``WaveScheduler``, ``TowerEngine``, the upgrade ledger) do not
hold references to each other.  The engine passes this aggregate into
every call instead, so a tick is a sequence of plain function calls over
one object.

``enemies`` is a dict keyed by enemy id.  Insertion order is spawn order,
which doubles as the target-acquisition tie-break.  Projectiles refer to
enemies by id only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .economy import UpgradeLedger
from .event_log import EventLog

if TYPE_CHECKING:
    from .combat import Projectile, Pulse
    from .enemy import Enemy
    from .waves import SpawnSlot


@dataclass
class Base:
    """The immobile structure the tower sits on."""

    position: tuple[float, float]
    radius: float

    def distance_to(self, point: tuple[float, float]) -> float:
        return math.hypot(point[0] - self.position[0], point[1] - self.position[1])

    def to_dict(self) -> dict:
        return {
            "position": {"x": self.position[0], "y": self.position[1]},
            "radius": self.radius,
        }


@dataclass
class TowerState:
    """Upgrade-derived tower stats plus the timers that drive each attack mode."""

    damage: float = 0.0
    fire_rate: float = 1.0
    range: float = 0.0
    fire_cooldown: float = 0.0
    beam_angle: float = 0.0
    pulse_timer: float = math.inf

    def to_dict(self) -> dict:
        return {
            "damage": self.damage,
            "fire_rate": round(self.fire_rate, 4),
            "range": self.range,
            "fire_cooldown": round(self.fire_cooldown, 3),
            "pulse_timer": None if math.isinf(self.pulse_timer) else round(self.pulse_timer, 3),
        }


@dataclass
class SimulationState:
    base: Base
    coins: int = 0
    wave: int = 1
    health: int = 0
    passive_income: int = 0
    wave_cooldown: float = 0.0
    wave_active: bool = False
    game_over: bool = False
    tower: TowerState = field(default_factory=TowerState)
    upgrades: UpgradeLedger = field(default_factory=UpgradeLedger)
    enemies: dict[int, Enemy] = field(default_factory=dict)
    projectiles: list[Projectile] = field(default_factory=list)
    pulses: list[Pulse] = field(default_factory=list)
    spawn_queue: list[SpawnSlot] = field(default_factory=list)
    log: EventLog = field(default_factory=EventLog)
    next_enemy_id: int = 0
    next_projectile_id: int = 0

    def allocate_enemy_id(self) -> int:
        self.next_enemy_id += 1
        return self.next_enemy_id

    def allocate_projectile_id(self) -> int:
        self.next_projectile_id += 1
        return self.next_projectile_id

    def living_enemies(self) -> list[Enemy]:
        """Copy of the live set, safe to iterate while enemies are removed."""
        return list(self.enemies.values())

    def award(self, coins: int | float) -> None:
        self.coins = max(0, self.coins + int(coins))
