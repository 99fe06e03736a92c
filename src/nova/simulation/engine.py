"""SimulationEngine: frame-driven update of the whole battlespace.

Architecture
------------
The engine is the authoritative owner of every entity: the turret and
city rosters (for the whole session) and the transient threats,
interceptors, and blasts (for the current wave).  It has no clock of its
own.  An external driver (FrameDriver, a test, a UI loop) calls
``tick(delta_ms)`` once per rendered frame and ``launch(point)`` when the
player taps.

One tick, in order:

  1. spawn: WaveSpawner may release one threat
  2. threats: advance along their path; progress >= 1 is an impact
     that flags any turret or city under it and leaves a blast
  3. interceptors, blasts, collisions: delegated to CombatSystem
  4. wave end: spawner exhausted and no threats left
  5. defeat: every turret or every city destroyed

Steps 4 and 5 are skipped if the session left ``playing`` during the
frame (a kill can push the score over the win threshold).

Speeds are normalised to a 16 ms reference frame, so the simulation
runs at the same pace whatever the display refresh rate.

Impacts are hit-tested with an axis-aligned 5-unit box around the
impact point, while blasts use a true circular radius.

Thread safety:
  All mutation happens under ``_lock`` so a render thread can call
  ``snapshot()`` between frames.  Launches coming from another thread
  should go through FrameDriver.request_launch so they run on the same
  execution context as the tick.
"""

from __future__ import annotations

import random
import threading
from typing import TYPE_CHECKING

from loguru import logger

from ..constants import (
    FRAME_REFERENCE_MS,
    IMPACT_TOLERANCE,
    INITIAL_CITIES,
    INITIAL_TURRETS,
    POINTS_PER_THREAT,
)
from ..geometry import Point, lerp_point
from .combat import CombatSystem, select_turret
from .entities import City, IdAllocator, Interceptor, Targetable, Threat, Turret
from .game_mode import GameMode
from .spawner import WaveSpawner

if TYPE_CHECKING:
    from ..comms.event_bus import EventBus


def _initial_turrets() -> list[Turret]:
    return [
        Turret(id=tid, position=(x, y), ammunition=ammo, max_ammunition=ammo)
        for tid, x, y, ammo in INITIAL_TURRETS
    ]


def _initial_cities() -> list[City]:
    return [City(id=cid, position=(x, y)) for cid, x, y in INITIAL_CITIES]


class SimulationEngine:
    """Owns all entities and advances them one frame at a time."""

    def __init__(self, event_bus: EventBus, rng: random.Random | None = None) -> None:
        self._event_bus = event_bus
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.RLock()
        self._ids = IdAllocator()

        self._turrets: list[Turret] = _initial_turrets()
        self._cities: list[City] = _initial_cities()
        self._threats: list[Threat] = []
        self._wave_in_progress = False

        self.spawner = WaveSpawner(self._rng, self._ids)
        self.combat = CombatSystem(event_bus, self._ids)
        self.game_mode = GameMode(event_bus, self)

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def wave_in_progress(self) -> bool:
        return self._wave_in_progress

    @property
    def threats_to_spawn(self) -> int:
        return self.spawner.remaining

    # -- Read access --------------------------------------------------------

    def get_turrets(self) -> list[Turret]:
        with self._lock:
            return list(self._turrets)

    def get_cities(self) -> list[City]:
        with self._lock:
            return list(self._cities)

    def get_threats(self) -> list[Threat]:
        with self._lock:
            return list(self._threats)

    def get_interceptors(self) -> list[Interceptor]:
        with self._lock:
            return self.combat.interceptors

    def targetables(self) -> list[Targetable]:
        """Every turret and city, in roster order."""
        with self._lock:
            return [*self._turrets, *self._cities]

    def snapshot(self) -> dict:
        """Read-only projection of the current frame for renderers."""
        with self._lock:
            return {
                "status": self.game_mode.state.value,
                "wave": self.game_mode.wave,
                "score": self.game_mode.score,
                "threats": [t.to_dict() for t in self._threats],
                "interceptors": self.combat.get_active_interceptors(),
                "blasts": self.combat.get_active_blasts(),
                "turrets": [t.to_dict() for t in self._turrets],
                "cities": [c.to_dict() for c in self._cities],
            }

    # -- Intents (issued by GameMode) ---------------------------------------

    def start_wave(self, wave: int) -> None:
        with self._lock:
            self.spawner.start_wave(wave)
            self._wave_in_progress = True
        logger.info(f"Wave {wave} started: {self.spawner.remaining} threats incoming")
        self._event_bus.publish("wave_start", {
            "wave_number": wave,
            "threat_count": self.spawner.remaining,
        })

    def replenish_ammunition(self) -> None:
        """Refill every surviving turret.  Destroyed turrets stay empty-handed."""
        with self._lock:
            for turret in self._turrets:
                if not turret.destroyed:
                    turret.ammunition = turret.max_ammunition

    def reset(self) -> None:
        """Fresh rosters and empty transient collections."""
        with self._lock:
            self._ids.reset()
            self._turrets = _initial_turrets()
            self._cities = _initial_cities()
            self._threats.clear()
            self.combat.clear()
            self.spawner.reset()
            self._wave_in_progress = False

    # -- Commands -----------------------------------------------------------

    def launch(self, target: Point) -> Interceptor | None:
        """Fire an interceptor toward *target* from the nearest armed turret.

        Returns None (and does nothing) outside ``playing`` or when no
        turret can fire.
        """
        with self._lock:
            if not self.game_mode.is_playing:
                return None
            turret = select_turret(self._turrets, target[0])
            if turret is None:
                return None
            return self.combat.fire(turret, (float(target[0]), float(target[1])))

    def tick(self, delta_ms: float) -> None:
        """Advance the world by *delta_ms* milliseconds."""
        if delta_ms <= 0:
            return
        with self._lock:
            if not self.game_mode.is_playing:
                return

            threat = self.spawner.tick(delta_ms, [*self._turrets, *self._cities])
            if threat is not None:
                self._threats.append(threat)
                self._event_bus.publish("threat_spawned", threat.to_dict())

            self._advance_threats(delta_ms)

            self.combat.tick_interceptors(delta_ms)
            self.combat.tick_blasts(delta_ms)
            for _ in self.combat.resolve_collisions(self._threats):
                self.game_mode.on_threat_destroyed(POINTS_PER_THREAT)
            self.combat.remove_expired_blasts()

            if not self.game_mode.is_playing:
                return

            if self._wave_in_progress and self.spawner.exhausted and not self._threats:
                self._wave_in_progress = False
                self.game_mode.on_wave_complete()

            if not self.game_mode.is_playing:
                return

            if all(t.destroyed for t in self._turrets) or all(c.destroyed for c in self._cities):
                self.game_mode.on_defeat()

    # -- Internals ----------------------------------------------------------

    def _advance_threats(self, delta_ms: float) -> None:
        survivors: list[Threat] = []
        for threat in self._threats:
            step = threat.speed * (delta_ms / FRAME_REFERENCE_MS)
            remaining = 1.0 - threat.progress
            threat.progress += step
            if threat.progress >= 1:
                threat.position = threat.target
                self._impact(threat)
                continue
            # Cover the same fraction of the remaining distance as of the
            # remaining progress; keeps the threat on its straight path.
            threat.position = lerp_point(threat.position, threat.target, step / remaining)
            survivors.append(threat)
        self._threats = survivors

    def _impact(self, threat: Threat) -> None:
        ix, iy = threat.target
        hit: list[str] = []
        for target in [*self._turrets, *self._cities]:
            tx, ty = target.position
            if abs(tx - ix) < IMPACT_TOLERANCE and abs(ty - iy) < IMPACT_TOLERANCE:
                if not target.destroyed:
                    logger.debug(f"{target.kind} {target.id} destroyed by {threat.id}")
                target.destroyed = True
                hit.append(target.id)
        self.combat.detonate(threat.target)
        self._event_bus.publish("threat_landed", {
            "threat_id": threat.id,
            "position": {"x": ix, "y": iy},
            "destroyed": hit,
        })
