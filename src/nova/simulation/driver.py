"""FrameDriver: the external frame scheduler for a SimulationEngine.

The engine has no clock; the driver turns timestamps into deltas and
calls ``engine.tick()``.  It runs either:

  - manually: ``advance(now_ms)`` from a UI loop or a test, or
  - on its own daemon thread (``start()`` / ``stop()``) at a fixed
    frame rate, timed with ``time.monotonic()``.

The first timestamp only establishes the time origin.  Launch requests
from any thread are queued and executed on the driver's context right
before the next tick, so they never interleave with one.

The thread loop exits by itself once the session is won or lost, and
``stop()`` guarantees no tick runs after it returns.
"""

from __future__ import annotations

import queue
import threading
import time
from typing import TYPE_CHECKING, Callable

from loguru import logger

if TYPE_CHECKING:
    from ..geometry import Point
    from .engine import SimulationEngine

FrameListener = Callable[[float], object]


class FrameDriver:
    """Feeds elapsed-time deltas into a SimulationEngine."""

    def __init__(self, engine: SimulationEngine, frame_rate: float = 60.0) -> None:
        self._engine = engine
        self._interval = 1.0 / frame_rate if frame_rate > 0 else 1.0 / 60.0
        self._launches: queue.Queue = queue.Queue()
        self._listeners: list[FrameListener] = []
        self._last_ms: float | None = None
        self._frames = 0
        self._tick_lock = threading.Lock()
        self._running = False
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def frames(self) -> int:
        """Number of frames that advanced the engine."""
        return self._frames

    def add_listener(self, listener: FrameListener) -> None:
        """Call *listener(delta_ms)* after every engine tick, on the driver's context."""
        self._listeners.append(listener)

    def request_launch(self, point: Point) -> None:
        """Queue a launch toward *point*; safe to call from any thread."""
        self._launches.put(point)

    def advance(self, now_ms: float) -> float:
        """Run one frame ending at *now_ms*.  Returns the delta applied (0 if none)."""
        with self._tick_lock:
            if self._last_ms is None:
                self._last_ms = now_ms
                return 0.0
            delta = now_ms - self._last_ms
            if delta <= 0:
                return 0.0
            self._last_ms = now_ms

            self._drain_launches()
            self._engine.tick(delta)
            self._frames += 1
            for listener in self._listeners:
                listener(delta)
            return delta

    def reset_clock(self) -> None:
        """Forget the time origin; the next ``advance`` starts a new one."""
        with self._tick_lock:
            self._last_ms = None
            self._drain_launches(execute=False)

    # -- Lifecycle ----------------------------------------------------------

    def start(self) -> None:
        if self._running:
            return
        self.reset_clock()
        self._running = True
        self._thread = threading.Thread(
            target=self._frame_loop, name="sim-frame", daemon=True
        )
        self._thread.start()
        logger.info(f"Frame driver started at {1.0 / self._interval:.0f} Hz")

    def stop(self) -> None:
        self._running = False
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        self._thread = None
        logger.info(f"Frame driver stopped after {self._frames} frames")

    def join(self, timeout: float | None = None) -> None:
        """Wait for the frame loop to finish on its own (session over)."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)

    # -- Internals ----------------------------------------------------------

    def _frame_loop(self) -> None:
        while self._running:
            time.sleep(self._interval)
            if not self._running:
                break
            self.advance(time.monotonic() * 1000.0)
            if self._engine.game_mode.is_terminal:
                logger.info(f"Session over ({self._engine.game_mode.state.value}), halting frames")
                self._running = False

    def _drain_launches(self, execute: bool = True) -> None:
        while True:
            try:
                point = self._launches.get_nowait()
            except queue.Empty:
                return
            if execute:
                self._engine.launch(point)
