"""Unit tests for the Autopilot computer player."""

from __future__ import annotations

import random

import pytest

from nova.comms.event_bus import EventBus
from nova.simulation.autopilot import AIM_LEAD_MS, INTERCEPT_FLIGHT_MS, Autopilot, predict_position
from nova.simulation.driver import FrameDriver
from nova.simulation.engine import SimulationEngine

pytestmark = pytest.mark.unit

AIM_TIME = INTERCEPT_FLIGHT_MS + AIM_LEAD_MS


class TestPrediction:
    def test_flight_time(self):
        assert INTERCEPT_FLIGHT_MS == pytest.approx(800.0)

    def test_predict_along_path(self, new_threat):
        threat = new_threat(origin=(0.0, 0.0), target=(100.0, 500.0), speed=0.002, progress=0.2)
        # 800 ms = 50 reference frames -> +0.1 progress
        assert predict_position(threat, 800.0) == pytest.approx((30.0, 150.0))

    def test_prediction_stops_at_target(self, new_threat):
        threat = new_threat(origin=(0.0, 0.0), target=(100.0, 500.0), speed=0.01, progress=0.9)
        assert predict_position(threat, 10_000.0) == (100.0, 500.0)


class TestAiming:
    def test_no_threats_no_shot(self, playing):
        pilot = Autopilot(playing)
        assert pilot.choose_aim_point() is None
        assert pilot.tick(16.0) is None

    def test_aims_at_most_advanced_threat(self, playing, new_threat):
        early = new_threat(tid="early", origin=(100.0, 0.0), target=(200.0, 570.0), progress=0.1)
        late = new_threat(tid="late", origin=(700.0, 0.0), target=(600.0, 570.0), progress=0.6)
        playing._threats.extend([early, late])
        pilot = Autopilot(playing)
        assert pilot.choose_aim_point() == pytest.approx(predict_position(late, AIM_TIME))

    def test_skips_covered_threat(self, playing, new_threat):
        covered = new_threat(tid="covered", origin=(700.0, 0.0), target=(600.0, 570.0), progress=0.6)
        open_ = new_threat(tid="open", origin=(100.0, 0.0), target=(200.0, 570.0), progress=0.1)
        playing._threats.extend([covered, open_])
        playing.launch(predict_position(covered, AIM_TIME))
        pilot = Autopilot(playing)
        assert pilot.choose_aim_point() == pytest.approx(predict_position(open_, AIM_TIME))

    def test_cooldown_between_shots(self, playing, new_threat):
        playing._threats.extend([
            new_threat(tid="a", origin=(100.0, 0.0), target=(200.0, 570.0), speed=0.0),
            new_threat(tid="b", origin=(700.0, 0.0), target=(600.0, 570.0), speed=0.0),
        ])
        pilot = Autopilot(playing, cooldown_ms=100.0)
        assert pilot.tick(16.0) is not None
        assert pilot.tick(50.0) is None
        assert pilot.tick(60.0) is not None
        assert pilot.shots == 2


@pytest.mark.integration
class TestAutopilotSession:
    def test_defends_a_wave(self):
        engine = SimulationEngine(EventBus(), rng=random.Random(42))
        driver = FrameDriver(engine)
        pilot = Autopilot(engine)
        driver.add_listener(pilot.tick)
        engine.game_mode.start()

        now = 0.0
        driver.advance(now)
        while engine.game_mode.wave == 1 and not engine.game_mode.is_terminal and now < 120_000:
            now += 16.0
            driver.advance(now)

        assert pilot.shots > 0
        assert engine.game_mode.total_kills > 0
        assert engine.game_mode.score > 0
