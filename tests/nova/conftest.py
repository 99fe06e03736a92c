"""Shared fixtures for simulation tests."""

from __future__ import annotations

import random

import pytest

from nova.comms.event_bus import EventBus
from nova.simulation.engine import SimulationEngine
from nova.simulation.entities import Threat


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def engine(bus) -> SimulationEngine:
    """Engine on the start screen with a seeded RNG."""
    return SimulationEngine(bus, rng=random.Random(1234))


@pytest.fixture
def playing(engine) -> SimulationEngine:
    """Engine in ``playing`` with wave 1 started but nothing left to spawn.

    Tests inject their own threats into the quiet battlespace.
    """
    engine.game_mode.start()
    engine.spawner.remaining = 0
    return engine


def make_threat(
    tid: str = "threat-test",
    origin=(200.0, 0.0),
    target=(200.0, 570.0),
    speed: float = 0.0025,
    progress: float = 0.0,
    position=None,
) -> Threat:
    return Threat(
        id=tid,
        origin=origin,
        position=position if position is not None else origin,
        target=target,
        speed=speed,
        progress=progress,
    )


@pytest.fixture
def new_threat():
    """Factory fixture: ``new_threat(target=..., speed=...)``."""
    return make_threat
