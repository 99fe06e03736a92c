"""Entity records for the simulation.

Plain dataclasses with no behaviour of their own: the SimulationEngine,
WaveSpawner, and CombatSystem create and mutate them.  Every record has a
``to_dict()`` used for render snapshots and event payloads.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import ClassVar, Union

from ..geometry import Point


def _point(p: Point) -> dict:
    return {"x": p[0], "y": p[1]}


class IdAllocator:
    """Monotonic per-kind identifiers: ``threat-1``, ``threat-2``, ..."""

    def __init__(self) -> None:
        self._counters: dict[str, itertools.count] = {}

    def next(self, kind: str) -> str:
        counter = self._counters.setdefault(kind, itertools.count(1))
        return f"{kind}-{next(counter)}"

    def reset(self) -> None:
        self._counters.clear()


@dataclass
class Threat:
    """A descending projectile aimed at a turret or city."""

    id: str
    origin: Point
    position: Point
    target: Point
    speed: float
    progress: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "origin": _point(self.origin),
            "position": _point(self.position),
            "target": _point(self.target),
            "speed": self.speed,
            "progress": self.progress,
        }


@dataclass
class Interceptor:
    """A player-launched projectile that detonates at its target point."""

    id: str
    launch: Point
    position: Point
    target: Point
    speed: float
    turret_id: str = ""
    progress: float = 0.0
    exploded: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "turret_id": self.turret_id,
            "launch": _point(self.launch),
            "position": _point(self.position),
            "target": _point(self.target),
            "speed": self.speed,
            "progress": self.progress,
            "exploded": self.exploded,
        }


@dataclass
class Blast:
    """An expanding-then-contracting kill radius."""

    id: str
    center: Point
    max_radius: float
    duration: float
    radius: float = 0.0
    elapsed: float = 0.0

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.duration

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "center": _point(self.center),
            "radius": self.radius,
            "max_radius": self.max_radius,
            "duration": self.duration,
            "elapsed": self.elapsed,
        }


@dataclass
class Turret:
    """Interceptor battery.  Destroyed permanently by a threat impact."""

    kind: ClassVar[str] = "turret"

    id: str
    position: Point
    ammunition: int
    max_ammunition: int
    destroyed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "position": _point(self.position),
            "ammunition": self.ammunition,
            "max_ammunition": self.max_ammunition,
            "destroyed": self.destroyed,
        }


@dataclass
class City:
    """Defended city.  Never repaired within a session."""

    kind: ClassVar[str] = "city"

    id: str
    position: Point
    destroyed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "position": _point(self.position),
            "destroyed": self.destroyed,
        }


# Anything a threat can be aimed at: exposes position, destroyed, kind.
Targetable = Union[Turret, City]
