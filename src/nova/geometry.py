"""Playfield geometry helpers.

All positions are ``(x, y)`` tuples in playfield units, origin top-left,
y growing downward.  These helpers carry no state; callers clamp
interpolation parameters as needed.
"""

from __future__ import annotations

import math

from .constants import GAME_HEIGHT, GAME_WIDTH

Point = tuple[float, float]


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def lerp_point(start: Point, end: Point, t: float) -> Point:
    """Linear interpolation from *start* to *end*.

    ``t`` is not clamped: values outside [0, 1] extrapolate along the line.
    """
    return (
        start[0] + (end[0] - start[0]) * t,
        start[1] + (end[1] - start[1]) * t,
    )


def to_world(
    x: float,
    y: float,
    view_width: float,
    view_height: float,
    left: float = 0.0,
    top: float = 0.0,
) -> Point | None:
    """Translate a tap in view coordinates into playfield coordinates.

    The view is the on-screen rectangle the playfield is drawn into
    (``left``/``top`` is its offset on screen).  Returns None for a
    degenerate view.
    """
    if view_width <= 0 or view_height <= 0:
        return None
    scale_x = GAME_WIDTH / view_width
    scale_y = GAME_HEIGHT / view_height
    return ((x - left) * scale_x, (y - top) * scale_y)
