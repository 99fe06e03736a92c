"""WaveSpawner: paces threat creation within a wave.

Each wave launches ``wave_threat_count(wave)`` threats, one every
``spawn_interval(wave)`` milliseconds.  A threat starts at a random x on
the top edge and is aimed at a random surviving turret or city.  When
nothing is left standing the spawn is skipped, but it still counts
against the wave so the wave can run out.
"""

from __future__ import annotations

import random

from loguru import logger

from ..constants import (
    GAME_WIDTH,
    THREAT_SPEED_MAX,
    THREAT_SPEED_MIN,
    spawn_interval,
    threat_speed_multiplier,
    wave_threat_count,
)
from .entities import IdAllocator, Targetable, Threat


class WaveSpawner:
    """Spawn timer and remaining-threat counter for the current wave."""

    def __init__(self, rng: random.Random, ids: IdAllocator) -> None:
        self._rng = rng
        self._ids = ids
        self.wave: int = 1
        self.remaining: int = 0
        self.timer: float = 0.0

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def start_wave(self, wave: int) -> None:
        self.wave = wave
        self.remaining = wave_threat_count(wave)

    def reset(self) -> None:
        self.wave = 1
        self.remaining = 0
        self.timer = 0.0

    def tick(self, delta_ms: float, targets: list[Targetable]) -> Threat | None:
        """Advance the spawn timer.  Returns the threat spawned this frame, if any."""
        if self.remaining <= 0:
            return None
        self.timer += delta_ms
        if self.timer <= spawn_interval(self.wave):
            return None
        self.timer = 0.0
        return self.spawn(targets)

    def spawn(self, targets: list[Targetable]) -> Threat | None:
        """Create one threat aimed at a random surviving target."""
        if self.remaining <= 0:
            return None
        self.remaining -= 1

        alive = [t for t in targets if not t.destroyed]
        if not alive:
            logger.debug("Spawn skipped: no targets left standing")
            return None

        target = alive[self._rng.randrange(len(alive))]
        origin = (self._rng.uniform(0.0, GAME_WIDTH), 0.0)
        speed = self._rng.uniform(THREAT_SPEED_MIN, THREAT_SPEED_MAX)
        speed *= threat_speed_multiplier(self.wave)
        return Threat(
            id=self._ids.next("threat"),
            origin=origin,
            position=origin,
            target=target.position,
            speed=speed,
        )
