"""Unit tests for app.config.Settings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import Settings
from bastion.simulation.tuning import DEFAULT_VARIANT

pytestmark = pytest.mark.unit


class TestSettingsDefaults:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SIMULATION_VARIANT", raising=False)
        s = Settings(_env_file=None)
        assert s.app_name == "BASTION"
        assert s.simulation_enabled is True
        assert s.simulation_variant == DEFAULT_VARIANT == "arsenal"
        assert s.simulation_frame_rate == 60.0
        assert s.simulation_max_frame_time == 0.1
        assert s.simulation_seed is None
        assert (s.viewport_width, s.viewport_height) == (960.0, 540.0)


class TestSettingsEnvironment:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SIMULATION_VARIANT", "Outpost")
        monkeypatch.setenv("SIMULATION_SEED", "42")
        monkeypatch.setenv("VIEWPORT_WIDTH", "1920")
        s = Settings(_env_file=None)
        assert s.simulation_variant == "outpost"
        assert s.simulation_seed == 42
        assert s.viewport_width == 1920.0

    def test_unknown_variant_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, simulation_variant="fortress")

    @pytest.mark.parametrize("field", [
        "simulation_frame_rate", "simulation_max_frame_time",
        "viewport_width", "viewport_height",
    ])
    def test_non_positive_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})
