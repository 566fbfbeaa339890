"""Shared fixtures for BASTION tests."""

from __future__ import annotations

import pytest

from bastion.comms.event_bus import EventBus
from bastion.simulation.engine import SimulationEngine


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def make_engine(bus):
    """Factory for engines wired to the shared test bus."""

    def _make(variant: str = "arsenal", **kwargs) -> SimulationEngine:
        kwargs.setdefault("seed", 1234)
        return SimulationEngine(variant, event_bus=bus, **kwargs)

    return _make
