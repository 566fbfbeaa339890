"""Economy & upgrade ledger.

Coins come from kills, wave-clear bonuses and passive income; they are
spent on three permanent upgrades (damage, fire rate, range).  Costs grow
geometrically:

    cost(kind, level) = round(base_cost[kind] * growth[kind] ** level)

so the damage track (35 x 1.45) reads 35, 51, 74, 107, ...  Levels are
unbounded and never refunded.

Tower stats are *derived*: ``recalc_tower_stats`` recomputes damage,
fire rate and range from the variant's base numbers and the current
levels.  Nothing else writes those fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from .tuning import AttackMode, UpgradeDef, UpgradeKind

if TYPE_CHECKING:
    from bastion.comms.event_bus import EventBus
    from .scaling import ScalingContext
    from .state import SimulationState
    from .tuning import VariantConfig

_KIND_ALIASES: dict[str, UpgradeKind] = {
    "damage": UpgradeKind.DAMAGE,
    "fire_rate": UpgradeKind.FIRE_RATE,
    "firerate": UpgradeKind.FIRE_RATE,
    "fire-rate": UpgradeKind.FIRE_RATE,
    "range": UpgradeKind.RANGE,
}


def parse_upgrade_kind(value: str | UpgradeKind) -> UpgradeKind:
    """Accept an UpgradeKind or a loose spelling ("fireRate", "fire-rate")."""
    if isinstance(value, UpgradeKind):
        return value
    kind = _KIND_ALIASES.get(str(value).strip().lower())
    if kind is None:
        raise ValueError(
            f"Unknown upgrade kind {value!r}; expected one of "
            f"{[k.value for k in UpgradeKind]}"
        )
    return kind


def upgrade_cost(defn: UpgradeDef, level: int) -> int:
    return round(defn.base_cost * defn.growth ** level)


@dataclass
class UpgradeLedger:
    """Current level per upgrade kind."""

    levels: dict[UpgradeKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in UpgradeKind}
    )

    def level(self, kind: UpgradeKind) -> int:
        return self.levels.get(kind, 0)

    def next_cost(self, kind: UpgradeKind, upgrades: dict[UpgradeKind, UpgradeDef]) -> int:
        return upgrade_cost(upgrades[kind], self.level(kind))

    def increment(self, kind: UpgradeKind) -> int:
        self.levels[kind] = self.level(kind) + 1
        return self.levels[kind]


def derive_tower_stats(
    config: VariantConfig, ledger: UpgradeLedger, scaling: ScalingContext,
) -> tuple[float, float, float]:
    """Return (damage, fire_rate, range) for the current upgrade levels."""
    tower = config.tower
    damage = tower.base_damage + ledger.level(UpgradeKind.DAMAGE) * tower.damage_per_upgrade
    fire_rate = tower.base_fire_rate * (
        1 + ledger.level(UpgradeKind.FIRE_RATE) * tower.fire_rate_per_upgrade
    )
    range_base = tower.base_range + ledger.level(UpgradeKind.RANGE) * tower.range_per_upgrade
    return damage, fire_rate, scaling.actor_metric(range_base)


def pulse_interval(config: VariantConfig, ledger: UpgradeLedger) -> float:
    pulse = config.pulse
    return max(
        pulse.min_interval,
        pulse.base_interval - ledger.level(UpgradeKind.FIRE_RATE) * pulse.interval_reduction,
    )


def pulse_stun_duration(config: VariantConfig, ledger: UpgradeLedger) -> float:
    pulse = config.pulse
    return (
        pulse.stun_duration_base
        + ledger.level(UpgradeKind.DAMAGE) * pulse.stun_duration_per_damage_upgrade
    )


def recalc_tower_stats(
    state: SimulationState, config: VariantConfig, scaling: ScalingContext,
) -> None:
    """Recompute the derived tower stats in place."""
    tower = state.tower
    tower.damage, tower.fire_rate, tower.range = derive_tower_stats(
        config, state.upgrades, scaling
    )
    if config.has_mode(AttackMode.PULSE):
        # A cheaper interval pulls a pending pulse forward, never back
        tower.pulse_timer = min(tower.pulse_timer, pulse_interval(config, state.upgrades))


def purchase(
    state: SimulationState,
    kind: UpgradeKind,
    config: VariantConfig,
    scaling: ScalingContext,
    event_bus: EventBus | None = None,
) -> bool:
    """Buy the next level of *kind*. Returns False (and changes nothing) if unaffordable."""
    cost = state.upgrades.next_cost(kind, config.upgrades)
    if state.coins < cost:
        return False
    state.coins -= cost
    level = state.upgrades.increment(kind)
    recalc_tower_stats(state, config, scaling)
    state.log.add(f"{kind.label} upgraded to level {level}.")
    logger.info(f"Upgrade purchased: {kind.value} -> level {level} for {cost} coins")
    if event_bus is not None:
        event_bus.publish("upgrade_purchased", {
            "kind": kind.value,
            "level": level,
            "cost": cost,
            "coins": state.coins,
        })
    return True
