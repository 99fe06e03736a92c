"""Simulation subsystem: engine, combat, waves, session, frame driver."""
from .autopilot import Autopilot, predict_position
from .combat import CombatSystem, blast_radius, select_turret
from .driver import FrameDriver
from .engine import SimulationEngine
from .entities import Blast, City, IdAllocator, Interceptor, Targetable, Threat, Turret
from .game_mode import GameMode, GameStatus
from .spawner import WaveSpawner

__all__ = [
    "Autopilot",
    "Blast",
    "City",
    "CombatSystem",
    "FrameDriver",
    "GameMode",
    "GameStatus",
    "IdAllocator",
    "Interceptor",
    "SimulationEngine",
    "Targetable",
    "Threat",
    "Turret",
    "WaveSpawner",
    "blast_radius",
    "predict_position",
    "select_turret",
]
