"""Autopilot: a simple computer player for headless sessions.

Picks the threat closest to impact that no in-flight interceptor is
already covering, leads it by the interceptor flight time plus a short lead, and fires.
Interceptor flight time does not depend on distance: every interceptor
covers its path in ``FRAME_REFERENCE_MS / INTERCEPTOR_SPEED`` ms.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..constants import BLAST_MAX_RADIUS, FRAME_REFERENCE_MS, INTERCEPTOR_SPEED
from ..geometry import Point, distance, lerp_point

if TYPE_CHECKING:
    from .engine import SimulationEngine
    from .entities import Interceptor, Threat

INTERCEPT_FLIGHT_MS = FRAME_REFERENCE_MS / INTERCEPTOR_SPEED

# Aim this far past the flight time so the threat runs into the growing blast
AIM_LEAD_MS = 160.0


def predict_position(threat: Threat, after_ms: float) -> Point:
    """Where *threat* will be *after_ms* from now, stopping at its target."""
    progress = threat.progress + threat.speed * (after_ms / FRAME_REFERENCE_MS)
    return lerp_point(threat.origin, threat.target, min(progress, 1.0))


class Autopilot:
    """Fires at most one interceptor per ``cooldown_ms``."""

    def __init__(self, engine: SimulationEngine, cooldown_ms: float = 250.0) -> None:
        self._engine = engine
        self.cooldown_ms = cooldown_ms
        self._cooldown = 0.0
        self.shots = 0

    def tick(self, delta_ms: float) -> Interceptor | None:
        self._cooldown -= delta_ms
        if self._cooldown > 0:
            return None
        aim = self.choose_aim_point()
        if aim is None:
            return None
        interceptor = self._engine.launch(aim)
        if interceptor is not None:
            self.shots += 1
            self._cooldown = self.cooldown_ms
        return interceptor

    def choose_aim_point(self) -> Point | None:
        aims = [i.target for i in self._engine.get_interceptors()]
        threats = sorted(self._engine.get_threats(), key=lambda t: t.progress, reverse=True)
        for threat in threats:
            predicted = predict_position(threat, INTERCEPT_FLIGHT_MS + AIM_LEAD_MS)
            if any(distance(predicted, a) < BLAST_MAX_RADIUS for a in aims):
                continue
            return predicted
        return None
