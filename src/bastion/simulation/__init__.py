"""Tower-defense simulation engine — waves, enemies, tower attacks, economy."""
from .combat import Projectile, Pulse, TowerEngine
from .economy import UpgradeLedger, parse_upgrade_kind, purchase, recalc_tower_stats, upgrade_cost
from .enemy import Enemy, EnemyTier, create_enemy
from .engine import MAX_FRAME_TIME, SimulationEngine
from .event_log import EventLog
from .scaling import ScalingContext
from .state import Base, SimulationState, TowerState
from .tuning import (
    DEFAULT_VARIANT,
    AttackMode,
    BasePlacement,
    UpgradeKind,
    VariantConfig,
    VARIANTS,
    WaveStart,
    get_variant,
)
from .waves import SpawnSlot, WaveScheduler

__all__ = [
    "DEFAULT_VARIANT",
    "AttackMode",
    "Base",
    "BasePlacement",
    "Enemy",
    "EnemyTier",
    "EventLog",
    "MAX_FRAME_TIME",
    "Projectile",
    "Pulse",
    "ScalingContext",
    "SimulationEngine",
    "SimulationState",
    "SpawnSlot",
    "TowerEngine",
    "TowerState",
    "UpgradeKind",
    "UpgradeLedger",
    "VARIANTS",
    "VariantConfig",
    "WaveScheduler",
    "WaveStart",
    "create_enemy",
    "get_variant",
    "parse_upgrade_kind",
    "purchase",
    "recalc_tower_stats",
    "upgrade_cost",
]
