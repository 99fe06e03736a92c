"""GameMode: session state machine, scoring, and wave bookkeeping.

Architecture
------------
GameMode manages the flow of a session through a small state machine:

  start -> playing -> won | lost

``won`` and ``lost`` are terminal until ``start()`` is called again, which
resets the engine and re-enters ``playing`` at wave 1.

The SimulationEngine is the single owner of the turret and city rosters.
GameMode only reads them and issues intents back to the engine
(``reset``, ``start_wave``, ``replenish_ammunition``).

The engine reports three things during its tick:
  - ``on_threat_destroyed(points)``: a blast destroyed a threat
  - ``on_wave_complete()``: the wave's threats are all spawned and gone
  - ``on_defeat()``: every turret or every city is destroyed

Scoring:
  - 20 points per threat destroyed
  - 5 points per unused round in each surviving turret at wave end
  - reaching 5000 points wins the session

Events published on EventBus:
  - ``game_state_change``: any state transition
  - ``wave_complete``: wave cleared (with ammunition bonus)
  - ``game_over``: victory or defeat
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from loguru import logger

from ..constants import POINTS_PER_AMMO, WIN_SCORE

if TYPE_CHECKING:
    from ..comms.event_bus import EventBus
    from .engine import SimulationEngine


class GameStatus(str, enum.Enum):
    START = "start"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class GameMode:
    """Session state machine + wave counter + score."""

    def __init__(self, event_bus: EventBus, engine: SimulationEngine) -> None:
        self._event_bus = event_bus
        self._engine = engine

        self.state: GameStatus = GameStatus.START
        self.wave: int = 1
        self.score: int = 0
        self.total_kills: int = 0
        self.waves_completed: int = 0

    @property
    def is_playing(self) -> bool:
        return self.state == GameStatus.PLAYING

    @property
    def is_terminal(self) -> bool:
        return self.state in (GameStatus.WON, GameStatus.LOST)

    # -- Public interface -------------------------------------------------------

    def start(self) -> None:
        """Begin a fresh session at wave 1.  Also used to restart."""
        self.score = 0
        self.wave = 1
        self.total_kills = 0
        self.waves_completed = 0
        self._engine.reset()
        self.state = GameStatus.PLAYING
        logger.info("Session started")
        self._publish_state_change()
        self._engine.start_wave(self.wave)

    def reset(self) -> None:
        """Return to the start screen, discarding the current session."""
        self.state = GameStatus.START
        self.score = 0
        self.wave = 1
        self.total_kills = 0
        self.waves_completed = 0
        self._engine.reset()
        self._publish_state_change()

    def on_score(self, points: int) -> None:
        """Credit *points*; crossing the win threshold ends the session."""
        if self.state != GameStatus.PLAYING or points <= 0:
            return
        self.score += points
        if self.score >= WIN_SCORE:
            self.state = GameStatus.WON
            logger.info(f"Victory at {self.score} points on wave {self.wave}")
            self._event_bus.publish("game_over", {
                "result": "victory",
                "final_score": self.score,
                "waves_completed": self.waves_completed,
                "total_kills": self.total_kills,
            })
            self._publish_state_change()

    def on_threat_destroyed(self, points: int) -> None:
        if self.state != GameStatus.PLAYING:
            return
        self.total_kills += 1
        self.on_score(points)

    def on_wave_complete(self) -> None:
        """Credit the ammunition bonus, resupply turrets, and start the next wave."""
        if self.state != GameStatus.PLAYING:
            return
        bonus = sum(
            t.ammunition * POINTS_PER_AMMO
            for t in self._engine.get_turrets()
            if not t.destroyed
        )
        completed = self.wave
        self.waves_completed += 1
        self.on_score(bonus)

        self._engine.replenish_ammunition()
        self.wave += 1
        logger.info(f"Wave {completed} complete: +{bonus} ammunition bonus, score {self.score}")
        self._event_bus.publish("wave_complete", {
            "wave_number": completed,
            "score_bonus": bonus,
            "score": self.score,
        })

        if self.state == GameStatus.PLAYING:
            self._engine.start_wave(self.wave)
        self._publish_state_change()

    def on_defeat(self) -> None:
        if self.state != GameStatus.PLAYING:
            return
        self.state = GameStatus.LOST
        logger.info(f"Defeat on wave {self.wave} with {self.score} points")
        self._event_bus.publish("game_over", {
            "result": "defeat",
            "final_score": self.score,
            "waves_completed": self.waves_completed,
            "total_kills": self.total_kills,
        })
        self._publish_state_change()

    def get_state(self) -> dict:
        """Return serializable session state for renderers and the CLI."""
        return {
            "state": self.state.value,
            "wave": self.wave,
            "score": self.score,
            "total_kills": self.total_kills,
            "waves_completed": self.waves_completed,
            "threats_to_spawn": self._engine.threats_to_spawn,
        }

    # -- Event publishing -------------------------------------------------------

    def _publish_state_change(self) -> None:
        self._event_bus.publish("game_state_change", self.get_state())
