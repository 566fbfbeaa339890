"""SimulationEngine — frame-driven tick loop and game-over state machine.

Architecture
------------
The engine is the authoritative owner of one ``SimulationState`` and the
only public entry point for a rendering/UI collaborator.  It holds no
threads: the collaborator calls ``tick(delta)`` once per rendered frame
with the wall-clock delta, and reads ``get_snapshot()`` between ticks.

Each tick runs these steps in a fixed order, all against the same state:

  1. spawn          — WaveScheduler.spawn_ready
  2. enemies        — movement, breaches, base health, game over
  3. projectiles    — TowerEngine.tick_projectiles
  4. fire decision  — TowerEngine.update_fire
  5. beam           — TowerEngine.sweep_beam          (variants with BEAM)
  6. pulse          — TowerEngine.tick_pulse          (variants with PULSE)
  7. wave timer     — WaveScheduler.tick_wave_timer   (automatic variants)
  8. end of wave    — WaveScheduler.try_end_wave

Frame delta:
  ``delta`` is clamped to ``[0, max_frame_time]`` (0.1s by default) so a
  stalled tab or a debugger pause cannot teleport enemies through the
  base.  There is no fixed-timestep accumulator; a clamped variable step
  is stable at the speeds involved.  A zero delta is a no-op.

Game over:
  Active -> GameOver is one-way.  It fires the moment a breach drops base
  health to zero or below: health is pinned to 0, the spawn queue and the
  pulse rings are cleared, and the rest of the tick is skipped.  After
  that, ticks, purchases and wave starts are ignored, but the snapshot
  remains readable for the end-of-run report.
"""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING

from loguru import logger

from .combat import TowerEngine
from .economy import parse_upgrade_kind, purchase, recalc_tower_stats
from .enemy import Enemy, create_enemy
from .scaling import ScalingContext
from .state import Base, SimulationState, TowerState
from .tuning import (
    DEFAULT_VARIANT,
    AttackMode,
    BasePlacement,
    UpgradeKind,
    VariantConfig,
    get_variant,
)
from .waves import WaveScheduler

if TYPE_CHECKING:
    from bastion.comms.event_bus import EventBus

# Largest simulated step per frame, in seconds
MAX_FRAME_TIME = 0.1


class SimulationEngine:
    """Drives one tower-defense run and exposes it as plain-data snapshots."""

    def __init__(
        self,
        variant: VariantConfig | str = DEFAULT_VARIANT,
        event_bus: EventBus | None = None,
        viewport: tuple[float, float] | None = None,
        max_frame_time: float = MAX_FRAME_TIME,
        seed: int | None = None,
    ) -> None:
        if isinstance(variant, str):
            variant = get_variant(variant)
        if max_frame_time <= 0:
            raise ValueError(f"max_frame_time must be positive, got {max_frame_time}")
        self._config = variant
        self._event_bus = event_bus
        self._max_frame_time = max_frame_time
        self._seed = seed
        self._rng = random.Random(seed)
        self.scaling = ScalingContext()
        if viewport is not None:
            self.scaling.resize(*viewport)
        self.scheduler = WaveScheduler(variant, event_bus)
        self.tower_engine = TowerEngine(variant, self.scaling, event_bus)
        self.state = self._new_state()
        logger.info(
            f"Simulation engine created: variant={variant.name} "
            f"modes={variant.mode_names()} viewport={self.scaling.width:.0f}x{self.scaling.height:.0f}"
        )

    # -- Properties ----------------------------------------------------------

    @property
    def config(self) -> VariantConfig:
        return self._config

    @property
    def event_bus(self) -> EventBus | None:
        return self._event_bus

    @property
    def max_frame_time(self) -> float:
        return self._max_frame_time

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    # -- Construction --------------------------------------------------------

    def _new_state(self) -> SimulationState:
        start = self._config.starting
        state = SimulationState(
            base=self._base_metrics(),
            coins=start.coins,
            wave=start.wave,
            health=start.health,
            passive_income=start.passive_income,
            wave_cooldown=0.0 if self._config.manual_waves else start.wave_cooldown,
            tower=TowerState(),
        )
        if self._config.has_mode(AttackMode.PULSE):
            state.tower.pulse_timer = self._config.pulse.initial_timer
        recalc_tower_stats(state, self._config, self.scaling)
        state.log.add(self._welcome_message())
        return state

    def _welcome_message(self) -> str:
        online = ", ".join(self._config.mode_names())
        if self._config.manual_waves:
            return f"Welcome! {online} online. Launch the first wave when ready."
        return f"Welcome! Auto-waves and {online} online. Upgrade wisely."

    def _base_metrics(self) -> Base:
        s = self.scaling
        if self._config.base_placement is BasePlacement.BOTTOM:
            y = s.height * (1 - self._config.bottom_margin)
        else:
            y = s.height / 2
        return Base(position=(s.width / 2, y), radius=s.actor_metric(self._config.base_radius))

    def reset(self) -> None:
        """Start a fresh run with the same variant, viewport and seed."""
        self._rng = random.Random(self._seed)
        self.state = self._new_state()
        logger.info(f"Simulation reset: variant={self._config.name}")

    # -- Commands ------------------------------------------------------------

    def clamp_delta(self, delta: float) -> float:
        if not math.isfinite(delta) or delta <= 0:
            return 0.0
        return min(delta, self._max_frame_time)

    def tick(self, delta: float) -> float:
        """Advance one frame. Returns the delta actually simulated."""
        state = self.state
        if state.game_over:
            return 0.0
        dt = self.clamp_delta(delta)
        if dt == 0.0:
            return 0.0

        self.scheduler.spawn_ready(state, dt, self._spawn_from_queue)
        if self._update_enemies(dt):
            return dt
        self.tower_engine.tick(state, dt)
        self.scheduler.tick_wave_timer(state, dt)
        self.scheduler.try_end_wave(state)
        return dt

    def purchase_upgrade(self, kind: UpgradeKind | str) -> bool:
        """Buy one level of *kind*. Unaffordable purchases are silent no-ops."""
        kind = parse_upgrade_kind(kind)
        if self.state.game_over:
            return False
        return purchase(self.state, kind, self._config, self.scaling, self._event_bus)

    def start_wave(self) -> bool:
        """Launch the next wave (manual variants only)."""
        return self.scheduler.start_wave(self.state)

    def set_viewport(self, width: float, height: float) -> None:
        """Resize the playfield, rescaling everything already on it."""
        x_ratio, y_ratio = self.scaling.resize(width, height)
        state = self.state
        for enemy in state.enemies.values():
            enemy.rescale(x_ratio, y_ratio)
        for proj in state.projectiles:
            proj.rescale(x_ratio, y_ratio)
        for pulse in state.pulses:
            pulse.max_radius *= x_ratio
        state.base = self._base_metrics()
        recalc_tower_stats(state, self._config, self.scaling)
        logger.debug(f"Viewport resized to {width:.0f}x{height:.0f} (scale {self.scaling.scale:.3f})")

    def set_scale(self, factor: float) -> None:
        """Resize to *factor* times the design viewport."""
        self.set_viewport(*self.scaling.size_for_scale(factor))

    def spawn_enemy(self, tier: int, position: tuple[float, float] | None = None) -> Enemy:
        """Place an enemy on the field immediately, scaled for the current wave."""
        state = self.state
        enemy = create_enemy(
            enemy_id=state.allocate_enemy_id(),
            tier=tier,
            wave=state.wave,
            config=self._config,
            scaling=self.scaling,
            rng=self._rng,
            position=position,
        )
        state.enemies[enemy.enemy_id] = enemy
        logger.debug(f"Enemy {enemy.enemy_id} spawned: tier {int(enemy.tier)}, health {enemy.health:.1f}")
        return enemy

    # -- Tick steps ------------------------------------------------------------

    def _spawn_from_queue(self, tier: int) -> Enemy:
        return self.spawn_enemy(tier)

    def _update_enemies(self, dt: float) -> bool:
        """Move every enemy and resolve breaches. Returns True on game over."""
        state = self.state
        for enemy in state.living_enemies():
            if not enemy.update(dt, state.base):
                continue
            state.enemies.pop(enemy.enemy_id, None)
            state.health -= enemy.damage
            state.log.add(f"Enemy breached the tower (-{enemy.damage} health).")
            logger.debug(f"Enemy {enemy.enemy_id} breached: health now {max(state.health, 0)}")
            self._publish("base_breached", {
                "target_id": enemy.enemy_id,
                "tier": int(enemy.tier),
                "damage": enemy.damage,
                "health": max(state.health, 0),
            })
            if state.health <= 0:
                self._enter_game_over()
                return True
        return False

    def _enter_game_over(self) -> None:
        state = self.state
        state.health = 0
        state.game_over = True
        state.wave_active = False
        state.spawn_queue.clear()
        state.pulses.clear()
        state.log.add("The tower has fallen.")
        logger.info(f"Game over: reached wave {state.wave} with {state.coins} coins")
        self._publish("game_over", {
            "result": "defeat",
            "wave": state.wave,
            "waves_completed": state.wave - 1,
            "coins": state.coins,
        })

    def _publish(self, event_type: str, data: dict) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event_type, data)

    # -- Observation ---------------------------------------------------------

    def next_wave_in(self) -> float:
        """Seconds until the next automatic wave; 0 while a wave runs or in manual variants."""
        state = self.state
        if state.game_over or state.wave_active or self._config.manual_waves:
            return 0.0
        return max(0.0, state.wave_cooldown)

    def get_snapshot(self) -> dict:
        """Return a serializable copy of everything a renderer needs."""
        state = self.state
        upgrades = {}
        for kind in UpgradeKind:
            cost = state.upgrades.next_cost(kind, self._config.upgrades)
            upgrades[kind.value] = {
                "level": state.upgrades.level(kind),
                "cost": cost,
                "affordable": state.coins >= cost and not state.game_over,
                "description": self._config.upgrades[kind].description,
            }
        return {
            "variant": self._config.name,
            "attack_modes": self._config.mode_names(),
            "manual_waves": self._config.manual_waves,
            "wave": state.wave,
            "coins": math.floor(state.coins),
            "health": state.health,
            "game_over": state.game_over,
            "wave_active": state.wave_active,
            "next_wave_in": round(self.next_wave_in(), 3),
            "pending_spawns": len(state.spawn_queue),
            "spawn_queue": [slot.to_dict() for slot in state.spawn_queue],
            "scale": self.scaling.scale,
            "viewport": {"width": self.scaling.width, "height": self.scaling.height},
            "base": state.base.to_dict(),
            "tower": state.tower.to_dict(),
            "beam_angle": (
                state.tower.beam_angle if self._config.has_mode(AttackMode.BEAM) else None
            ),
            "upgrades": upgrades,
            "enemies": [e.to_dict() for e in state.enemies.values()],
            "projectiles": [p.to_dict() for p in state.projectiles],
            "pulses": [p.to_dict() for p in state.pulses],
            "log": state.log.entries(),
        }
