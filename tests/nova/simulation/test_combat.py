"""Unit tests for CombatSystem: interceptors, blasts, and collisions."""

from __future__ import annotations

import pytest

from nova.comms.event_bus import EventBus, drain
from nova.constants import BLAST_DURATION, BLAST_MAX_RADIUS, INTERCEPTOR_SPEED
from nova.simulation.combat import CombatSystem, blast_radius, select_turret
from nova.simulation.entities import IdAllocator, Threat, Turret

pytestmark = pytest.mark.unit


def _turret(tid="t1", x=50.0, y=550.0, ammo=30, destroyed=False) -> Turret:
    return Turret(id=tid, position=(x, y), ammunition=ammo, max_ammunition=30, destroyed=destroyed)


def _threat(tid, position, speed=0.0) -> Threat:
    return Threat(id=tid, origin=position, position=position, target=(position[0], 570.0), speed=speed)


@pytest.fixture
def combat() -> CombatSystem:
    return CombatSystem(EventBus(), IdAllocator())


# --------------------------------------------------------------------------
# Blast radius profile
# --------------------------------------------------------------------------

class TestBlastRadius:
    def test_zero_at_start_and_end(self):
        assert blast_radius(0.0, 1000.0, 40.0) == 0.0
        assert blast_radius(1000.0, 1000.0, 40.0) == pytest.approx(0.0)

    def test_peak_at_half_duration(self):
        assert blast_radius(500.0, 1000.0, 40.0) == pytest.approx(40.0)

    @pytest.mark.parametrize("elapsed", [0.0, 100.0, 250.0, 499.0])
    def test_rising_half(self, elapsed):
        assert blast_radius(elapsed, 1000.0, 40.0) == pytest.approx(40.0 * 2 * elapsed / 1000.0)

    @pytest.mark.parametrize("elapsed", [500.0, 600.0, 750.0, 999.0])
    def test_falling_half(self, elapsed):
        expected = 40.0 * (1 - 2 * (elapsed - 500.0) / 1000.0)
        assert blast_radius(elapsed, 1000.0, 40.0) == pytest.approx(expected)

    def test_clamped_past_duration(self):
        assert blast_radius(1500.0, 1000.0, 40.0) == 0.0

    def test_zero_duration(self):
        assert blast_radius(10.0, 0.0, 40.0) == 0.0


# --------------------------------------------------------------------------
# Turret selection
# --------------------------------------------------------------------------

class TestSelectTurret:
    def test_picks_horizontally_closest(self):
        left, right = _turret("t1", 50.0), _turret("t2", 750.0)
        assert select_turret([left, right], 600.0) is right
        assert select_turret([left, right], 100.0) is left

    def test_tie_goes_to_first(self):
        left, right = _turret("t1", 50.0), _turret("t2", 750.0)
        assert select_turret([left, right], 400.0) is left

    def test_ignores_vertical_distance(self):
        high = _turret("t1", 100.0, 0.0)
        low = _turret("t2", 120.0, 550.0)
        assert select_turret([low, high], 100.0) is high

    def test_skips_empty_and_destroyed(self):
        empty = _turret("t1", 50.0, ammo=0)
        wrecked = _turret("t2", 60.0, destroyed=True)
        armed = _turret("t3", 750.0)
        assert select_turret([empty, wrecked, armed], 55.0) is armed

    def test_none_when_nothing_can_fire(self):
        assert select_turret([_turret(ammo=0), _turret("t2", destroyed=True)], 0.0) is None
        assert select_turret([], 0.0) is None


# --------------------------------------------------------------------------
# Firing and interceptor flight
# --------------------------------------------------------------------------

class TestFire:
    def test_fire_consumes_one_round(self, combat):
        turret = _turret()
        interceptor = combat.fire(turret, (400.0, 300.0))
        assert interceptor is not None
        assert turret.ammunition == 29
        assert interceptor.launch == (50.0, 550.0)
        assert interceptor.position == (50.0, 550.0)
        assert interceptor.target == (400.0, 300.0)
        assert interceptor.speed == INTERCEPTOR_SPEED
        assert interceptor.turret_id == "t1"

    def test_fire_rejected_without_ammo(self, combat):
        turret = _turret(ammo=0)
        assert combat.fire(turret, (400.0, 300.0)) is None
        assert turret.ammunition == 0
        assert combat.interceptors == []

    def test_fire_rejected_when_destroyed(self, combat):
        assert combat.fire(_turret(destroyed=True), (400.0, 300.0)) is None

    def test_fire_publishes_event(self):
        bus = EventBus()
        q = bus.subscribe("interceptor_launched")
        combat = CombatSystem(bus, IdAllocator())
        combat.fire(_turret(), (400.0, 300.0))
        msg = q.get_nowait()
        assert msg["data"]["turret_id"] == "t1"
        assert msg["data"]["ammunition"] == 29


class TestInterceptorFlight:
    def test_position_interpolates(self, combat):
        interceptor = combat.fire(_turret(), (450.0, 150.0))
        combat.tick_interceptors(16.0 * 25)  # progress 0.5
        assert interceptor.progress == pytest.approx(0.5)
        assert interceptor.position == pytest.approx((250.0, 350.0))

    def test_detonates_once_at_target(self, combat):
        combat.fire(_turret(), (400.0, 300.0))
        for _ in range(60):
            combat.tick_interceptors(16.0)
        assert combat.interceptors == []
        blasts = combat.blasts
        assert len(blasts) == 1
        assert blasts[0].center == (400.0, 300.0)

    def test_exploded_guard(self, combat):
        interceptor = combat.fire(_turret(), (400.0, 300.0))
        interceptor.progress = 1.0
        interceptor.exploded = True
        combat.tick_interceptors(16.0)
        assert combat.blasts == []
        assert combat.interceptors == []

    def test_overshoot_lands_on_target(self, combat):
        interceptor = combat.fire(_turret(), (400.0, 300.0))
        combat.tick_interceptors(16.0 * 200)
        assert interceptor.position == (400.0, 300.0)
        assert interceptor.exploded


# --------------------------------------------------------------------------
# Blast lifecycle and collisions
# --------------------------------------------------------------------------

class TestBlastLifecycle:
    def test_detonate_defaults(self, combat):
        blast = combat.detonate((400.0, 300.0))
        assert blast.max_radius == BLAST_MAX_RADIUS
        assert blast.duration == BLAST_DURATION
        assert blast.radius == 0.0

    def test_tick_grows_then_shrinks(self, combat):
        blast = combat.detonate((0.0, 0.0))
        combat.tick_blasts(250.0)
        assert blast.radius == pytest.approx(20.0)
        combat.tick_blasts(250.0)
        assert blast.radius == pytest.approx(40.0)
        combat.tick_blasts(250.0)
        assert blast.radius == pytest.approx(20.0)

    def test_expired_blasts_removed(self, combat):
        combat.detonate((0.0, 0.0))
        combat.tick_blasts(999.0)
        combat.remove_expired_blasts()
        assert len(combat.blasts) == 1
        combat.tick_blasts(1.0)
        combat.remove_expired_blasts()
        assert combat.blasts == []


class TestCollisions:
    def test_inside_radius_destroyed_outside_spared(self, combat):
        blast = combat.detonate((400.0, 300.0))
        blast.radius = 40.0
        near = _threat("threat-near", (430.0, 300.0))
        far = _threat("threat-far", (450.0, 300.0))
        threats = [near, far]

        destroyed = combat.resolve_collisions(threats)

        assert destroyed == [near]
        assert threats == [far]

    def test_boundary_is_exclusive(self, combat):
        blast = combat.detonate((0.0, 0.0))
        blast.radius = 40.0
        threats = [_threat("threat-edge", (40.0, 0.0))]
        assert combat.resolve_collisions(threats) == []

    def test_secondary_blast_at_threat_position(self, combat):
        blast = combat.detonate((400.0, 300.0))
        blast.radius = 40.0
        combat.resolve_collisions([_threat("threat-1", (410.0, 310.0))])
        centers = [b.center for b in combat.blasts]
        assert (410.0, 310.0) in centers
        secondary = [b for b in combat.blasts if b.center == (410.0, 310.0)][0]
        assert secondary.radius == 0.0

    def test_threat_destroyed_at_most_once(self, combat):
        for _ in range(3):
            b = combat.detonate((0.0, 0.0))
            b.radius = 40.0
        threats = [_threat("threat-1", (5.0, 5.0))]
        destroyed = combat.resolve_collisions(threats)
        assert len(destroyed) == 1
        # 3 originals + 1 secondary
        assert len(combat.blasts) == 4

    def test_intercept_event_carries_points(self):
        bus = EventBus()
        q = bus.subscribe("threat_intercepted")
        combat = CombatSystem(bus, IdAllocator())
        combat.detonate((0.0, 0.0)).radius = 10.0
        combat.resolve_collisions([_threat("threat-9", (1.0, 1.0))])
        msgs = drain(q)
        assert len(msgs) == 1
        assert msgs[0]["data"]["threat_id"] == "threat-9"
        assert msgs[0]["data"]["points"] == 20

    def test_chain_reaction_over_frames(self, combat):
        first = combat.detonate((0.0, 0.0))
        first.radius = 40.0
        a = _threat("threat-a", (30.0, 0.0))
        b = _threat("threat-b", (65.0, 0.0))
        threats = [a, b]

        assert combat.resolve_collisions(threats) == [a]
        # b is out of the first blast's reach but within a's growing blast
        for _ in range(40):
            combat.tick_blasts(16.0)
            if combat.resolve_collisions(threats):
                break
        assert threats == []

    def test_clear(self, combat):
        combat.fire(_turret(), (1.0, 1.0))
        combat.detonate((0.0, 0.0))
        combat.clear()
        assert combat.interceptors == []
        assert combat.blasts == []
