"""Enemy — a hostile unit marching on the base.

Enemies are flat dataclasses: tier differences live in the
``TierStats`` table of the active variant, not in subclasses.  Stats are
resolved once, at spawn, from the tier and the wave index at that moment;
raising the wave index later never touches enemies already on the field.

An enemy leaves play in exactly one of two ways:
  - killed   — ``take_damage`` drove health to zero or below
  - breached — ``update`` reported that it touched the base
The engine removes it from the live set the moment either happens.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scaling import ScalingContext
    from .state import Base
    from .tuning import VariantConfig

# Number of viewport edges enemies may enter from
SPAWN_SIDE_COUNT = 4


class EnemyTier(IntEnum):
    TIER1 = 1
    TIER2 = 2
    TIER3 = 3

    @classmethod
    def coerce(cls, value: int) -> EnemyTier:
        """Map any requested tier to a known one; unknown tiers become TIER1."""
        try:
            return cls(value)
        except ValueError:
            return cls.TIER1


@dataclass
class Enemy:
    """A single enemy on the field. Positions and speeds are viewport units."""

    enemy_id: int
    tier: EnemyTier
    position: tuple[float, float]
    radius: float
    health: float
    max_health: float
    speed: float
    damage: int
    reward: int
    color: str
    stun: float = 0.0

    @property
    def alive(self) -> bool:
        return self.health > 0

    @property
    def stunned(self) -> bool:
        return self.stun > 0

    @property
    def health_ratio(self) -> float:
        if self.max_health <= 0:
            return 0.0
        return max(0.0, self.health / self.max_health)

    def distance_to(self, point: tuple[float, float]) -> float:
        return math.hypot(self.position[0] - point[0], self.position[1] - point[1])

    def update(self, delta: float, base: Base) -> bool:
        """Advance by *delta* seconds. Returns True if the enemy reached the base."""
        if self.stun > 0:
            self.stun = max(0.0, self.stun - delta)
            return False
        dx = base.position[0] - self.position[0]
        dy = base.position[1] - self.position[1]
        dist = math.hypot(dx, dy) or 1.0
        step = self.speed * delta
        self.position = (
            self.position[0] + (dx / dist) * step,
            self.position[1] + (dy / dist) * step,
        )
        return dist <= base.radius + self.radius

    def take_damage(self, amount: float) -> bool:
        """Subtract *amount* health. Returns True once health is at or below zero."""
        self.health -= amount
        return self.health <= 0

    def apply_stun(self, duration: float) -> None:
        # Stuns never stack; the longer one wins
        self.stun = max(self.stun, duration)

    def rescale(self, x_ratio: float, y_ratio: float) -> None:
        self.position = (self.position[0] * x_ratio, self.position[1] * y_ratio)
        self.radius *= x_ratio
        self.speed *= x_ratio

    def to_dict(self) -> dict:
        return {
            "id": self.enemy_id,
            "tier": int(self.tier),
            "position": {"x": self.position[0], "y": self.position[1]},
            "radius": self.radius,
            "color": self.color,
            "health": round(max(self.health, 0.0), 1),
            "max_health": round(self.max_health, 1),
            "health_ratio": round(self.health_ratio, 4),
            "stunned": self.stunned,
        }


def create_enemy(
    enemy_id: int,
    tier: int,
    wave: int,
    config: VariantConfig,
    scaling: ScalingContext,
    rng: random.Random,
    position: tuple[float, float] | None = None,
) -> Enemy:
    """Build an enemy of *tier* with stats scaled for *wave*.

    Without an explicit *position* the enemy appears just outside a random
    viewport edge.
    """
    tier = EnemyTier.coerce(tier)
    stats = config.tiers.get(int(tier)) or config.tiers[int(EnemyTier.TIER1)]
    growth = config.enemy_scaling
    health_factor = 1 + (wave - 1) * growth.health_per_wave
    speed_factor = 1 + (wave - 1) * growth.speed_per_wave
    radius = scaling.actor_metric(growth.radius_base + int(tier) * growth.radius_per_tier)
    health = stats.health * health_factor
    if position is None:
        position = random_edge_position(scaling.width, scaling.height, radius, rng)
    return Enemy(
        enemy_id=enemy_id,
        tier=tier,
        position=position,
        radius=radius,
        health=health,
        max_health=health,
        speed=scaling.metric(stats.speed * speed_factor),
        damage=stats.damage,
        reward=stats.reward,
        color=stats.color,
    )


def random_edge_position(
    width: float, height: float, radius: float, rng: random.Random,
) -> tuple[float, float]:
    """Return a random point just outside one of the four viewport edges."""
    side = rng.randrange(SPAWN_SIDE_COUNT)
    if side == 0:  # top
        return (rng.random() * width, -radius)
    elif side == 1:  # right
        return (width + radius, rng.random() * height)
    elif side == 2:  # bottom
        return (rng.random() * width, height + radius)
    else:  # left
        return (-radius, rng.random() * height)
