"""WaveScheduler — spawn queues, wave pacing, and wave completion.

Architecture
------------
A wave moves through a small linear lifecycle:

  idle -> active (queue draining, enemies alive) -> cleared -> idle -> ...

``queue_wave()`` builds the whole spawn queue up front.  Slot *i* waits
``i * cadence`` seconds, so spawns are front-loaded and evenly spaced,
never randomized.  The count and cadence both tighten with the wave index
up to fixed caps.  Tiers follow a fixed precedence:

  - tier 1 by default
  - tier 2 every ``tier_two_spacing``-th slot once past ``tier_two_threshold``
  - tier 3 for the last ``tier_three_tail_count`` slots of every
    ``tier_three_interval``-th wave (overrides tier 2)

``spawn_ready()`` counts every slot down and hands those at or below zero
to the engine's spawn callback in queue order.  ``try_end_wave()`` fires
once both the queue and the live set are empty: it pays the clear bonus
and passive income, advances the wave index, and either arms the
auto-wave cooldown or waits for ``start_wave()`` in manual variants.

Events published on the EventBus:
  - ``wave_start``: a wave's queue was built
  - ``wave_complete``: a wave was cleared and its bonus paid
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from loguru import logger

from .tuning import UpgradeKind

if TYPE_CHECKING:
    from bastion.comms.event_bus import EventBus
    from .enemy import Enemy
    from .state import SimulationState
    from .tuning import VariantConfig


@dataclass
class SpawnSlot:
    """One pending spawn: seconds until it appears, and its tier."""

    delay: float
    tier: int

    def to_dict(self) -> dict:
        return {"delay": round(self.delay, 3), "tier": self.tier}


class WaveScheduler:
    """Builds spawn queues and runs the wave lifecycle over a SimulationState."""

    def __init__(self, config: VariantConfig, event_bus: EventBus | None = None) -> None:
        self._config = config
        self._event_bus = event_bus

    # -- Queue construction --------------------------------------------------

    def enemy_count(self, wave: int) -> int:
        q = self._config.wave_queue
        return min(q.max_enemies, q.base_enemies + wave * q.enemies_per_wave)

    def cadence(self, wave: int) -> float:
        q = self._config.wave_queue
        return max(q.min_cadence, q.cadence_base - wave * q.cadence_reduction)

    def tier_for(self, wave: int, index: int, total: int) -> int:
        q = self._config.wave_queue
        tier = 1
        if wave > q.tier_two_threshold and index % q.tier_two_spacing == 0:
            tier = 2
        if wave % q.tier_three_interval == 0 and index >= total - q.tier_three_tail_count:
            tier = 3
        return tier

    def build_wave(self, wave: int) -> list[SpawnSlot]:
        """Return the spawn queue for *wave* without touching any state."""
        total = self.enemy_count(wave)
        cadence = self.cadence(wave)
        return [
            SpawnSlot(delay=i * cadence, tier=self.tier_for(wave, i, total))
            for i in range(total)
        ]

    # -- Lifecycle -------------------------------------------------------------

    def queue_wave(self, state: SimulationState, wave: int) -> list[SpawnSlot]:
        """Load *wave* into the spawn queue and mark it active."""
        slots = self.build_wave(wave)
        state.spawn_queue = slots
        state.wave_active = True
        state.log.add(f"Wave {wave} incoming from every direction ({len(slots)} units).")
        logger.info(f"Wave {wave} queued: {len(slots)} enemies, cadence {self.cadence(wave):.2f}s")
        if self._event_bus is not None:
            self._event_bus.publish("wave_start", {
                "wave_number": wave,
                "hostile_count": len(slots),
                "cadence": self.cadence(wave),
                "tiers": [slot.tier for slot in slots],
            })
        return slots

    def spawn_ready(
        self,
        state: SimulationState,
        delta: float,
        spawn: Callable[[int], Enemy],
    ) -> list[Enemy]:
        """Count the queue down by *delta* and spawn every slot that is due."""
        if not state.wave_active or not state.spawn_queue:
            return []
        for slot in state.spawn_queue:
            slot.delay -= delta
        ready = [slot for slot in state.spawn_queue if slot.delay <= 0]
        state.spawn_queue = [slot for slot in state.spawn_queue if slot.delay > 0]
        return [spawn(slot.tier) for slot in ready]

    def tick_wave_timer(self, state: SimulationState, delta: float) -> bool:
        """Count down to the next automatic wave. Returns True if one was queued."""
        if state.game_over or state.wave_active or self._config.manual_waves:
            return False
        state.wave_cooldown = max(0.0, state.wave_cooldown - delta)
        if state.wave_cooldown <= 0:
            self.queue_wave(state, state.wave)
            return True
        return False

    def start_wave(self, state: SimulationState) -> bool:
        """Player-triggered start for manual variants."""
        if not self._config.manual_waves:
            return False
        if state.game_over or state.wave_active:
            return False
        self.queue_wave(state, state.wave)
        return True

    def try_end_wave(self, state: SimulationState) -> bool:
        """Close out the active wave if it has been cleared. Returns True on clear."""
        if not state.wave_active or state.game_over:
            return False
        if state.spawn_queue or state.enemies:
            return False

        reward = self._config.wave_reward
        cleared = state.wave
        bonus = round(
            reward.base_bonus
            + cleared * reward.per_wave
            + state.upgrades.level(UpgradeKind.DAMAGE) * reward.per_damage_upgrade
        )
        state.wave_active = False
        state.award(bonus)
        state.log.add(f"Wave {cleared} cleared. Bonus +{bonus} coins.")
        state.wave += 1
        state.award(state.passive_income)

        if self._config.manual_waves:
            state.wave_cooldown = 0.0
            state.log.add(f"Wave {state.wave} standing by. Launch when ready.")
        else:
            state.wave_cooldown = reward.cooldown
            state.log.add("Charging the next wave...")

        logger.info(f"Wave {cleared} cleared: bonus {bonus}, coins now {state.coins}")
        if self._event_bus is not None:
            self._event_bus.publish("wave_complete", {
                "wave_number": cleared,
                "score_bonus": bonus,
                "passive_income": state.passive_income,
                "coins": state.coins,
                "next_wave": state.wave,
            })
        return True
