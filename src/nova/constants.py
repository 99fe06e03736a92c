"""Gameplay constants for Nova Defense.

Times are in milliseconds.  Speeds are in path-progress units per
reference frame (``FRAME_REFERENCE_MS``), so a threat with speed 0.002
covers its whole path in 500 reference frames (8 seconds).
"""

from __future__ import annotations

# Logical playfield
GAME_WIDTH = 800.0
GAME_HEIGHT = 600.0

# Deltas are normalised against a 16 ms (~60 Hz) frame
FRAME_REFERENCE_MS = 16.0

# Threat speed range, scaled per wave by 1 + (wave-1) * THREAT_SPEED_WAVE_SCALE
THREAT_SPEED_MIN = 0.001
THREAT_SPEED_MAX = 0.0025
THREAT_SPEED_WAVE_SCALE = 0.2

INTERCEPTOR_SPEED = 0.02

BLAST_MAX_RADIUS = 40.0
BLAST_DURATION = 1000.0

# Impact hit-test is an axis-aligned box, not a circle
IMPACT_TOLERANCE = 5.0

# Scoring
WIN_SCORE = 5000
POINTS_PER_THREAT = 20
POINTS_PER_AMMO = 5

# Wave composition and spawn cadence
WAVE_THREATS_BASE = 10
WAVE_THREATS_INCREMENT = 5
SPAWN_INTERVAL_BASE = 2000.0
SPAWN_INTERVAL_STEP = 200.0
SPAWN_INTERVAL_MIN = 500.0

# (id, x, y, ammunition)
INITIAL_TURRETS: list[tuple[str, float, float, int]] = [
    ("t1", 50.0, 550.0, 30),
    ("t2", 750.0, 550.0, 30),
]

# (id, x, y)
INITIAL_CITIES: list[tuple[str, float, float]] = [
    ("c1", 200.0, 570.0),
    ("c2", 300.0, 570.0),
    ("c3", 400.0, 570.0),
    ("c4", 500.0, 570.0),
    ("c5", 600.0, 570.0),
]


def wave_threat_count(wave: int) -> int:
    """Number of threats launched during *wave* (1-based)."""
    return WAVE_THREATS_BASE + (wave - 1) * WAVE_THREATS_INCREMENT


def spawn_interval(wave: int) -> float:
    """Milliseconds between consecutive threat spawns during *wave*."""
    return max(SPAWN_INTERVAL_MIN, SPAWN_INTERVAL_BASE - (wave - 1) * SPAWN_INTERVAL_STEP)


def threat_speed_multiplier(wave: int) -> float:
    return 1 + (wave - 1) * THREAT_SPEED_WAVE_SCALE
