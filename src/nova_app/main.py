"""Nova Defense - headless session runner.

Usage:
    nova-defense [--seed N] [--duration SECONDS] [--realtime] [--no-autopilot]

Headless mode steps the engine with fixed 16 ms frames as fast as the CPU
allows.  ``--realtime`` runs the threaded FrameDriver against the wall
clock instead.  Either way the final session state is printed as JSON.
"""

from __future__ import annotations

import argparse
import json
import random
import sys
import time

from loguru import logger

from nova.comms.event_bus import EventBus, drain
from nova.constants import FRAME_REFERENCE_MS
from nova.simulation import Autopilot, FrameDriver, SimulationEngine
from nova_app.config import Settings, settings


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def create_session(cfg: Settings, seed: int | None = None, autopilot: bool | None = None):
    """Build the engine, its frame driver, and (optionally) the autopilot."""
    if seed is None:
        seed = cfg.random_seed
    rng = random.Random(seed)
    bus = EventBus()
    engine = SimulationEngine(bus, rng=rng)
    driver = FrameDriver(engine, frame_rate=cfg.frame_rate)

    pilot = None
    use_autopilot = cfg.autopilot_enabled if autopilot is None else autopilot
    if use_autopilot:
        pilot = Autopilot(engine, cooldown_ms=cfg.autopilot_cooldown_ms)
        driver.add_listener(pilot.tick)
    return bus, engine, driver, pilot


def run_headless(engine: SimulationEngine, driver: FrameDriver, duration_s: float) -> int:
    """Step fixed-size frames until the session ends or *duration_s* of game time passes.

    Returns the number of frames simulated.
    """
    engine.game_mode.start()
    now_ms = 0.0
    driver.advance(now_ms)
    limit_ms = duration_s * 1000.0
    while now_ms < limit_ms and not engine.game_mode.is_terminal:
        now_ms += FRAME_REFERENCE_MS
        driver.advance(now_ms)
    return driver.frames


def run_realtime(engine: SimulationEngine, driver: FrameDriver, duration_s: float) -> int:
    """Run the threaded driver against the wall clock for up to *duration_s*."""
    engine.game_mode.start()
    driver.start()
    try:
        driver.join(timeout=duration_s)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
    finally:
        driver.stop()
    return driver.frames


def summarize(engine: SimulationEngine, frames: int, elapsed: float, events: list[dict]) -> dict:
    state = engine.game_mode.get_state()
    snap = engine.snapshot()
    return {
        **state,
        "frames": frames,
        "wall_time": round(elapsed, 2),
        "turrets": snap["turrets"],
        "cities_standing": sum(1 for c in snap["cities"] if not c["destroyed"]),
        "wave_bonuses": [msg["data"]["score_bonus"] for msg in events],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a Nova Defense session")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for a reproducible session")
    parser.add_argument("--duration", type=float, default=None,
                        help="seconds of game time to run (default from settings)")
    parser.add_argument("--realtime", action="store_true", help="drive frames from the wall clock")
    parser.add_argument("--no-autopilot", action="store_true", help="do not fire any interceptors")
    parser.add_argument("--log-level", default=None, help="loguru level (default from settings)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or settings.log_level)

    bus, engine, driver, _ = create_session(
        settings, seed=args.seed, autopilot=False if args.no_autopilot else None,
    )
    events = bus.subscribe("wave_complete")
    duration = args.duration if args.duration is not None else settings.demo_duration

    logger.info(f"{settings.app_name}: {'realtime' if args.realtime else 'headless'} run, {duration:.0f}s")
    t0 = time.time()
    if args.realtime:
        frames = run_realtime(engine, driver, duration)
    else:
        frames = run_headless(engine, driver, duration)
    elapsed = time.time() - t0

    print(json.dumps(summarize(engine, frames, elapsed, drain(events)), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
