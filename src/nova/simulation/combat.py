"""CombatSystem: interceptor flight, blast lifecycle, and collisions.

Architecture
------------
CombatSystem manages the lifecycle of Interceptor and Blast instances:

  1. ``fire()`` takes one round from a turret and creates an Interceptor
     flying from the turret's position to a fixed point.

  2. ``tick_interceptors()`` advances each interceptor along its straight
     path.  The first time progress reaches 1 the interceptor detonates
     (one Blast at its target point, guarded by ``exploded``) and is
     removed.

  3. ``tick_blasts()`` ages every blast.  The radius follows a triangular
     profile: 0 -> max_radius over the first half of the duration, back to
     0 over the second half.

  4. ``resolve_collisions()`` destroys every threat strictly inside a
     blast's current radius.  Each destroyed threat leaves a secondary
     blast at its position; that blast starts at radius 0 and chains into
     neighbouring threats on later frames as it grows.

Events are published on the EventBus:
  - ``interceptor_launched``: new interceptor in the air
  - ``threat_intercepted``: a blast destroyed a threat
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..constants import (
    BLAST_DURATION,
    BLAST_MAX_RADIUS,
    FRAME_REFERENCE_MS,
    INTERCEPTOR_SPEED,
    POINTS_PER_THREAT,
)
from ..geometry import Point, distance, lerp_point
from .entities import Blast, IdAllocator, Interceptor, Threat, Turret

if TYPE_CHECKING:
    from ..comms.event_bus import EventBus


def blast_radius(elapsed: float, duration: float, max_radius: float) -> float:
    """Triangular radius profile, clamped to [0, max_radius]."""
    if duration <= 0:
        return 0.0
    p = elapsed / duration
    if p < 0.5:
        radius = max_radius * (p * 2)
    else:
        radius = max_radius * (1 - (p - 0.5) * 2)
    return min(max_radius, max(0.0, radius))


def select_turret(turrets: list[Turret], x: float) -> Turret | None:
    """Closest armed, standing turret by horizontal distance to *x*.

    Ties go to the first turret in roster order.
    """
    best: Turret | None = None
    best_dist = float("inf")
    for turret in turrets:
        if turret.destroyed or turret.ammunition <= 0:
            continue
        dist = abs(turret.position[0] - x)
        if dist < best_dist:
            best_dist = dist
            best = turret
    return best


class CombatSystem:
    """Owns in-flight interceptors and live blasts."""

    def __init__(self, event_bus: EventBus, ids: IdAllocator) -> None:
        self._event_bus = event_bus
        self._ids = ids
        self._interceptors: dict[str, Interceptor] = {}
        self._blasts: dict[str, Blast] = {}

    @property
    def interceptors(self) -> list[Interceptor]:
        return list(self._interceptors.values())

    @property
    def blasts(self) -> list[Blast]:
        return list(self._blasts.values())

    def fire(self, turret: Turret, target: Point) -> Interceptor | None:
        """Launch one interceptor from *turret* toward *target*.

        Returns None if the turret is destroyed or out of ammunition.
        """
        if turret.destroyed or turret.ammunition <= 0:
            return None
        turret.ammunition -= 1

        interceptor = Interceptor(
            id=self._ids.next("interceptor"),
            launch=turret.position,
            position=turret.position,
            target=target,
            speed=INTERCEPTOR_SPEED,
            turret_id=turret.id,
        )
        self._interceptors[interceptor.id] = interceptor

        self._event_bus.publish("interceptor_launched", {
            "id": interceptor.id,
            "turret_id": turret.id,
            "launch": {"x": turret.position[0], "y": turret.position[1]},
            "target": {"x": target[0], "y": target[1]},
            "ammunition": turret.ammunition,
        })
        logger.debug(
            f"Interceptor {interceptor.id} from {turret.id} -> "
            f"({target[0]:.0f}, {target[1]:.0f}), {turret.ammunition} left"
        )
        return interceptor

    def detonate(self, center: Point) -> Blast:
        """Start a new blast at *center*."""
        blast = Blast(
            id=self._ids.next("blast"),
            center=center,
            max_radius=BLAST_MAX_RADIUS,
            duration=BLAST_DURATION,
        )
        self._blasts[blast.id] = blast
        return blast

    def tick_interceptors(self, delta_ms: float) -> None:
        to_remove: list[str] = []
        for interceptor in self._interceptors.values():
            interceptor.progress += interceptor.speed * (delta_ms / FRAME_REFERENCE_MS)
            interceptor.position = lerp_point(
                interceptor.launch, interceptor.target, min(interceptor.progress, 1.0)
            )
            if interceptor.progress >= 1 and not interceptor.exploded:
                interceptor.exploded = True
                self.detonate(interceptor.target)
            if interceptor.progress >= 1:
                to_remove.append(interceptor.id)

        for iid in to_remove:
            self._interceptors.pop(iid, None)

    def tick_blasts(self, delta_ms: float) -> None:
        for blast in self._blasts.values():
            blast.elapsed += delta_ms
            blast.radius = blast_radius(blast.elapsed, blast.duration, blast.max_radius)

    def resolve_collisions(self, threats: list[Threat]) -> list[Threat]:
        """Destroy threats caught inside a blast.

        *threats* is filtered in place.  Returns the destroyed threats in
        the order they were hit.
        """
        destroyed: list[Threat] = []
        for blast in list(self._blasts.values()):
            survivors: list[Threat] = []
            for threat in threats:
                if distance(threat.position, blast.center) < blast.radius:
                    destroyed.append(threat)
                    self.detonate(threat.position)
                    self._event_bus.publish("threat_intercepted", {
                        "threat_id": threat.id,
                        "blast_id": blast.id,
                        "position": {"x": threat.position[0], "y": threat.position[1]},
                        "points": POINTS_PER_THREAT,
                    })
                else:
                    survivors.append(threat)
            threats[:] = survivors
        return destroyed

    def remove_expired_blasts(self) -> None:
        expired = [bid for bid, b in self._blasts.items() if b.expired]
        for bid in expired:
            self._blasts.pop(bid, None)

    def get_active_blasts(self) -> list[dict]:
        """Serializable list of live blasts for rendering."""
        return [b.to_dict() for b in self._blasts.values()]

    def get_active_interceptors(self) -> list[dict]:
        """Serializable list of in-flight interceptors for rendering."""
        return [i.to_dict() for i in self._interceptors.values()]

    def clear(self) -> None:
        """Remove all interceptors and blasts."""
        self._interceptors.clear()
        self._blasts.clear()
