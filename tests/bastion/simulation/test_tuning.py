"""Unit tests for variant tuning tables."""

from __future__ import annotations

import pytest

from bastion.simulation.tuning import (
    ARSENAL,
    DEFAULT_TIER_STATS,
    LANCER,
    OUTPOST,
    VARIANTS,
    AttackMode,
    BasePlacement,
    UpgradeKind,
    WaveStart,
    get_variant,
)

pytestmark = pytest.mark.unit


class TestVariants:
    def test_three_variants(self):
        assert set(VARIANTS) == {"outpost", "lancer", "arsenal"}

    def test_outpost_is_projectile_only_and_manual(self):
        assert OUTPOST.attack_modes == AttackMode.PROJECTILE
        assert OUTPOST.wave_start is WaveStart.MANUAL
        assert OUTPOST.manual_waves is True
        assert OUTPOST.base_placement is BasePlacement.BOTTOM

    def test_lancer_has_beam_not_pulse(self):
        assert LANCER.has_mode(AttackMode.BEAM)
        assert not LANCER.has_mode(AttackMode.PULSE)
        assert LANCER.manual_waves is False

    def test_arsenal_has_every_mode(self):
        assert ARSENAL.mode_names() == ["projectile", "beam", "pulse"]
        assert ARSENAL.base_placement is BasePlacement.CENTER

    def test_every_variant_fires_projectiles(self):
        for variant in VARIANTS.values():
            assert variant.has_mode(AttackMode.PROJECTILE)

    def test_lookup_is_case_insensitive(self):
        assert get_variant("ARSENAL") is ARSENAL

    def test_unknown_variant_lists_choices(self):
        with pytest.raises(KeyError, match="arsenal"):
            get_variant("fortress")


class TestTables:
    def test_tier_one_stats(self):
        t1 = DEFAULT_TIER_STATS[1]
        assert (t1.health, t1.speed, t1.reward, t1.damage) == (35.0, 32.0, 6, 1)

    def test_tiers_get_tougher(self):
        healths = [DEFAULT_TIER_STATS[t].health for t in (1, 2, 3)]
        assert healths == sorted(healths)

    def test_every_kind_has_an_upgrade_def(self):
        for variant in VARIANTS.values():
            assert set(variant.upgrades) == set(UpgradeKind)

    def test_upgrade_labels(self):
        assert UpgradeKind.FIRE_RATE.label == "Fire rate"
        assert UpgradeKind.DAMAGE.label == "Damage"
