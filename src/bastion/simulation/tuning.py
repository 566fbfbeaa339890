"""Variant tuning tables.

Every number the simulation uses lives here, in design units (see
``scaling.py``).  A *variant* bundles a full set of tables with the
attack modes it enables, how waves start, and where the base sits.
Three variants ship:

  outpost  — projectile only, player-triggered waves, base near the bottom
  lancer   — projectile + rotating beam, automatic waves
  arsenal  — projectile + beam + shockwave pulse, automatic waves

Variants differ by configuration only; the engine is the same.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, Flag, auto


class AttackMode(Flag):
    """Tower attack capabilities. Projectile fire is present in every variant."""

    PROJECTILE = auto()
    BEAM = auto()
    PULSE = auto()


class WaveStart(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class BasePlacement(str, Enum):
    CENTER = "center"
    BOTTOM = "bottom"


class UpgradeKind(str, Enum):
    DAMAGE = "damage"
    FIRE_RATE = "fire_rate"
    RANGE = "range"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


@dataclass(frozen=True)
class TowerTuning:
    base_damage: float = 12.0
    damage_per_upgrade: float = 4.0
    base_fire_rate: float = 1.3          # shots per second
    fire_rate_per_upgrade: float = 0.15  # fractional bonus per level
    base_range: float = 250.0
    range_per_upgrade: float = 10.0
    projectile_speed: float = 560.0
    projectile_radius: float = 5.0


@dataclass(frozen=True)
class BeamTuning:
    rotation_factor: float = 0.08       # turns per second per unit of fire rate
    damage_multiplier: float = 1.1      # damage per second = damage * this
    half_width: float = 0.25            # radians either side of the heading
    max_range_multiplier: float = 1.5   # reach = max(view w, h) * this


@dataclass(frozen=True)
class PulseTuning:
    duration: float = 0.65
    initial_timer: float = 4.0
    base_interval: float = 6.0
    min_interval: float = 2.5
    interval_reduction: float = 0.4     # per fire-rate level
    stun_duration_base: float = 1.2
    stun_duration_per_damage_upgrade: float = 0.1
    stun_base_ratio: float = 0.45
    stun_bonus_ratio: float = 0.55
    damage_base_ratio: float = 0.8
    damage_bonus_ratio: float = 0.6


@dataclass(frozen=True)
class TierStats:
    health: float
    speed: float
    reward: int
    damage: int
    color: str


DEFAULT_TIER_STATS: dict[int, TierStats] = {
    1: TierStats(health=35.0, speed=32.0, reward=6, damage=1, color="#72f1b8"),
    2: TierStats(health=110.0, speed=24.0, reward=15, damage=2, color="#42c3ff"),
    3: TierStats(health=280.0, speed=18.0, reward=35, damage=5, color="#f39b45"),
}


@dataclass(frozen=True)
class EnemyScaling:
    radius_base: float = 18.0
    radius_per_tier: float = 2.0
    health_per_wave: float = 0.08
    speed_per_wave: float = 0.02


@dataclass(frozen=True)
class WaveQueueTuning:
    base_enemies: int = 8
    enemies_per_wave: int = 3
    max_enemies: int = 42
    cadence_base: float = 1.1
    cadence_reduction: float = 0.03
    min_cadence: float = 0.2
    tier_two_threshold: int = 4
    tier_two_spacing: int = 5
    tier_three_interval: int = 6
    tier_three_tail_count: int = 2


@dataclass(frozen=True)
class WaveRewardTuning:
    base_bonus: float = 25.0
    per_wave: float = 8.0
    per_damage_upgrade: float = 2.0
    cooldown: float = 3.5


@dataclass(frozen=True)
class UpgradeDef:
    base_cost: float
    growth: float
    description: str


DEFAULT_UPGRADES: dict[UpgradeKind, UpgradeDef] = {
    UpgradeKind.DAMAGE: UpgradeDef(35, 1.45, "Increase all attack damage by 4."),
    UpgradeKind.FIRE_RATE: UpgradeDef(40, 1.4, "Boost cadence (+15% fire rate & beam speed)."),
    UpgradeKind.RANGE: UpgradeDef(30, 1.35, "Extend tower attack radius."),
}


@dataclass(frozen=True)
class StartingState:
    coins: int = 120
    wave: int = 1
    health: int = 20
    passive_income: int = 5
    wave_cooldown: float = 2.0


@dataclass(frozen=True)
class VariantConfig:
    """A complete engine configuration."""

    name: str
    title: str
    attack_modes: AttackMode
    wave_start: WaveStart = WaveStart.AUTO
    base_placement: BasePlacement = BasePlacement.CENTER
    base_radius: float = 54.0
    bottom_margin: float = 0.15  # fraction of view height, BOTTOM placement only
    starting: StartingState = field(default_factory=StartingState)
    tower: TowerTuning = field(default_factory=TowerTuning)
    beam: BeamTuning = field(default_factory=BeamTuning)
    pulse: PulseTuning = field(default_factory=PulseTuning)
    enemy_scaling: EnemyScaling = field(default_factory=EnemyScaling)
    tiers: dict[int, TierStats] = field(default_factory=lambda: dict(DEFAULT_TIER_STATS))
    wave_queue: WaveQueueTuning = field(default_factory=WaveQueueTuning)
    wave_reward: WaveRewardTuning = field(default_factory=WaveRewardTuning)
    upgrades: dict[UpgradeKind, UpgradeDef] = field(default_factory=lambda: dict(DEFAULT_UPGRADES))

    def has_mode(self, mode: AttackMode) -> bool:
        return bool(self.attack_modes & mode)

    @property
    def manual_waves(self) -> bool:
        return self.wave_start is WaveStart.MANUAL

    def mode_names(self) -> list[str]:
        return [m.name.lower() for m in AttackMode if m in self.attack_modes]


ARSENAL = VariantConfig(
    name="arsenal",
    title="Arsenal",
    attack_modes=AttackMode.PROJECTILE | AttackMode.BEAM | AttackMode.PULSE,
)

LANCER = replace(
    ARSENAL,
    name="lancer",
    title="Lancer",
    attack_modes=AttackMode.PROJECTILE | AttackMode.BEAM,
    starting=StartingState(coins=100, wave_cooldown=3.0),
    beam=BeamTuning(rotation_factor=0.1, damage_multiplier=1.3),
    wave_queue=WaveQueueTuning(base_enemies=6, max_enemies=36),
    wave_reward=WaveRewardTuning(cooldown=4.0),
)

OUTPOST = replace(
    ARSENAL,
    name="outpost",
    title="Outpost",
    attack_modes=AttackMode.PROJECTILE,
    wave_start=WaveStart.MANUAL,
    base_placement=BasePlacement.BOTTOM,
    wave_queue=WaveQueueTuning(base_enemies=6, enemies_per_wave=2, max_enemies=30, cadence_base=1.2),
    wave_reward=WaveRewardTuning(base_bonus=20.0, per_wave=6.0),
)

VARIANTS: dict[str, VariantConfig] = {v.name: v for v in (OUTPOST, LANCER, ARSENAL)}

DEFAULT_VARIANT = "arsenal"


def get_variant(name: str) -> VariantConfig:
    """Look up a variant by name (case-insensitive)."""
    try:
        return VARIANTS[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown variant {name!r}; expected one of {sorted(VARIANTS)}"
        ) from None
