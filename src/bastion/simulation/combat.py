"""TowerEngine — projectile, beam and pulse attack resolution.

Architecture
------------
The tower sits on the base and attacks with whichever modes the variant
enables (``AttackMode`` flags).  All modes share the upgrade-derived
``damage``, ``fire_rate`` and ``range`` on ``TowerState``.  ``tick()``
resolves them in a fixed order:

  1. Projectiles in flight steer toward their target's *current* position
     (looked up by id each tick).  A projectile whose target id is gone
     from the live set is dropped without effect: the enemy died to
     something else first.  Within the target's radius the projectile
     deals its damage once and is removed.

  2. Fire decision.  The cooldown counts down to zero; at zero the
     nearest enemy strictly inside ``range`` gets a new projectile and the
     cooldown resets to ``1 / fire_rate``.  Equidistant enemies resolve to
     the earliest spawned (strict ``<`` over insertion order).

  3. Beam.  A heading sweeps ``fire_rate * rotation_factor`` turns per
     second.  Enemies inside the half-width wedge take continuous
     ``damage * damage_multiplier * dt`` damage.  Beam kills pay out but
     are not written to the combat feed.

  4. Pulse.  A countdown fires an instantaneous shockwave, then adds the
     interval back (``timer += interval``) so the remainder carries over
     and the cadence is independent of frame rate.  Each enemy within
     ``range + radius`` is stunned and damaged with a linear falloff:
     closer enemies get more of both.  The ``Pulse`` record is only the
     expanding ring for rendering.

An enemy is removed from ``state.enemies`` the moment its health crosses
zero, before any later step looks at it, so one enemy can never pay out
twice.

Events are published on the EventBus:
  - ``projectile_fired``: new projectile in the air
  - ``projectile_hit``: projectile damage applied
  - ``target_eliminated``: enemy killed (``method`` = projectile/beam/pulse)
  - ``pulse_emitted``: shockwave fired
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from .economy import pulse_interval, pulse_stun_duration
from .tuning import AttackMode

if TYPE_CHECKING:
    from bastion.comms.event_bus import EventBus
    from .enemy import Enemy
    from .scaling import ScalingContext
    from .state import SimulationState
    from .tuning import VariantConfig

TWO_PI = math.pi * 2


def normalize_angle(angle: float) -> float:
    """Wrap *angle* into [-pi, pi)."""
    return (angle + math.pi) % TWO_PI - math.pi


@dataclass
class Projectile:
    """A homing shot in flight."""

    id: int
    target_id: int
    position: tuple[float, float]
    speed: float
    damage: float
    radius: float

    def rescale(self, x_ratio: float, y_ratio: float) -> None:
        self.position = (self.position[0] * x_ratio, self.position[1] * y_ratio)
        self.radius *= x_ratio
        self.speed *= x_ratio

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "target_id": self.target_id,
            "position": {"x": self.position[0], "y": self.position[1]},
            "radius": self.radius,
            "speed": self.speed,
            "damage": self.damage,
        }


@dataclass
class Pulse:
    """Expanding shockwave ring. Purely visual once emitted."""

    duration: float
    max_radius: float
    life: float = 0.0

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, self.life / self.duration)

    def to_dict(self) -> dict:
        return {
            "life": round(self.life, 4),
            "duration": self.duration,
            "max_radius": self.max_radius,
            "progress": round(self.progress, 4),
        }


class TowerEngine:
    """Resolves every enabled attack mode against the live enemy set."""

    def __init__(
        self,
        config: VariantConfig,
        scaling: ScalingContext,
        event_bus: EventBus | None = None,
    ) -> None:
        self._config = config
        self._scaling = scaling
        self._event_bus = event_bus

    def tick(self, state: SimulationState, dt: float) -> None:
        """Run all attack modes for one frame, in order."""
        self.tick_projectiles(state, dt)
        self.update_fire(state, dt)
        if self._config.has_mode(AttackMode.BEAM):
            self.sweep_beam(state, dt)
        if self._config.has_mode(AttackMode.PULSE):
            self.tick_pulse(state, dt)

    # -- Projectile mode ---------------------------------------------------

    def acquire_target(self, state: SimulationState) -> Enemy | None:
        """Nearest living enemy strictly inside range, earliest spawned on ties."""
        closest = None
        min_distance = math.inf
        for enemy in state.enemies.values():
            dist = state.base.distance_to(enemy.position)
            if dist < state.tower.range and dist < min_distance:
                min_distance = dist
                closest = enemy
        return closest

    def fire(self, state: SimulationState, target: Enemy) -> Projectile:
        tower = self._config.tower
        proj = Projectile(
            id=state.allocate_projectile_id(),
            target_id=target.enemy_id,
            position=state.base.position,
            speed=self._scaling.metric(tower.projectile_speed),
            damage=state.tower.damage,
            radius=self._scaling.actor_metric(tower.projectile_radius),
        )
        state.projectiles.append(proj)
        self._publish("projectile_fired", {
            "id": proj.id,
            "target_id": target.enemy_id,
            "damage": proj.damage,
        })
        return proj

    def update_fire(self, state: SimulationState, dt: float) -> Projectile | None:
        """Count the cooldown down and shoot at the nearest enemy when ready."""
        tower = state.tower
        tower.fire_cooldown = max(0.0, tower.fire_cooldown - dt)
        if tower.fire_cooldown > 0:
            return None
        target = self.acquire_target(state)
        if target is None:
            return None
        proj = self.fire(state, target)
        tower.fire_cooldown = 1 / tower.fire_rate
        return proj

    def tick_projectiles(self, state: SimulationState, dt: float) -> None:
        """Advance all projectiles, resolve hits, drop dangling ones."""
        remaining: list[Projectile] = []
        for proj in state.projectiles:
            target = state.enemies.get(proj.target_id)
            if target is None:
                continue

            dx = target.position[0] - proj.position[0]
            dy = target.position[1] - proj.position[1]
            dist = math.hypot(dx, dy)
            step = proj.speed * dt
            if step >= dist:
                proj.position = target.position
            elif dist > 0:
                proj.position = (
                    proj.position[0] + (dx / dist) * step,
                    proj.position[1] + (dy / dist) * step,
                )

            if target.distance_to(proj.position) < target.radius:
                killed = target.take_damage(proj.damage)
                self._publish("projectile_hit", {
                    "projectile_id": proj.id,
                    "target_id": target.enemy_id,
                    "damage": proj.damage,
                    "remaining_health": target.health,
                })
                if killed:
                    self._eliminate(state, target, method="projectile", source="Projectile")
                continue
            remaining.append(proj)
        state.projectiles = remaining

    # -- Beam mode -----------------------------------------------------------

    def beam_reach(self) -> float:
        return max(self._scaling.width, self._scaling.height) * self._config.beam.max_range_multiplier

    def sweep_beam(self, state: SimulationState, dt: float) -> list[Enemy]:
        """Rotate the beam and burn everything under it. Returns enemies killed."""
        beam = self._config.beam
        tower = state.tower
        tower.beam_angle = (
            tower.beam_angle + tower.fire_rate * beam.rotation_factor * dt * TWO_PI
        ) % TWO_PI
        damage = tower.damage * beam.damage_multiplier * dt
        reach = self.beam_reach()
        killed: list[Enemy] = []
        for enemy in state.living_enemies():
            dx = enemy.position[0] - state.base.position[0]
            dy = enemy.position[1] - state.base.position[1]
            if math.hypot(dx, dy) > reach + enemy.radius:
                continue
            offset = abs(normalize_angle(math.atan2(dy, dx) - tower.beam_angle))
            if offset > beam.half_width:
                continue
            if enemy.take_damage(damage):
                self._eliminate(state, enemy, method="beam")
                killed.append(enemy)
        return killed

    # -- Pulse mode ----------------------------------------------------------

    def tick_pulse(self, state: SimulationState, dt: float) -> Pulse | None:
        """Count down to the next shockwave and age the visible rings."""
        emitted = None
        tower = state.tower
        tower.pulse_timer -= dt
        if tower.pulse_timer <= 0:
            tower.pulse_timer += pulse_interval(self._config, state.upgrades)
            emitted = self.emit_pulse(state)
        for pulse in state.pulses:
            pulse.life += dt
        state.pulses = [p for p in state.pulses if p.life < p.duration]
        return emitted

    def emit_pulse(self, state: SimulationState) -> Pulse:
        """Fire a shockwave: stun and damage every enemy it reaches."""
        cfg = self._config.pulse
        tower = state.tower
        pulse = Pulse(duration=cfg.duration, max_radius=tower.range)
        state.pulses.append(pulse)

        stun_duration = pulse_stun_duration(self._config, state.upgrades)
        caught = 0
        for enemy in state.living_enemies():
            dist = state.base.distance_to(enemy.position)
            if dist > tower.range + enemy.radius:
                continue
            caught += 1
            falloff = self.falloff(dist, tower.range)
            enemy.apply_stun(
                stun_duration * (cfg.stun_base_ratio + falloff * cfg.stun_bonus_ratio)
            )
            damage = tower.damage * (cfg.damage_base_ratio + falloff * cfg.damage_bonus_ratio)
            if enemy.take_damage(damage):
                self._eliminate(state, enemy, method="pulse")

        if caught > 0:
            state.log.add("Shockwave released! Nearby enemies are stunned.")
        logger.debug(f"Pulse emitted: {caught} enemies caught")
        self._publish("pulse_emitted", {
            "caught": caught,
            "radius": tower.range,
            "stun_duration": stun_duration,
        })
        return pulse

    @staticmethod
    def falloff(distance: float, range_: float) -> float:
        """1 at the tower, 0 at the edge of range and beyond."""
        if range_ <= 0:
            return 0.0
        return 1 - min(1.0, distance / range_)

    # -- Shared ------------------------------------------------------------

    def _eliminate(
        self,
        state: SimulationState,
        enemy: Enemy,
        method: str,
        source: str | None = None,
    ) -> None:
        """Remove a killed enemy, pay its reward, and log it if *source* is given."""
        if state.enemies.pop(enemy.enemy_id, None) is None:
            return
        state.award(enemy.reward)
        if source is not None:
            state.log.add(
                f"{source} destroyed tier {int(enemy.tier)} enemy (+{enemy.reward})."
            )
        logger.debug(f"Enemy {enemy.enemy_id} (tier {int(enemy.tier)}) killed by {method}")
        self._publish("target_eliminated", {
            "target_id": enemy.enemy_id,
            "tier": int(enemy.tier),
            "reward": enemy.reward,
            "method": method,
            "position": {"x": enemy.position[0], "y": enemy.position[1]},
        })

    def _publish(self, event_type: str, data: dict) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event_type, data)
