"""test_production.py — Production countdowns and the feedback orb pool.

Covers:
1. Fire timing: first step, exact rate, no double fire on big steps
2. production_system credits the Ledger and claims orbs
3. FeedbackPool claim / flight / release, exhaustion

Run: python test_production.py   (or pytest)
"""
from __future__ import annotations
import math, random, sys, traceback

# ── Bootstrap ────────────────────────────────────────────────────────
from core.tuning import load as _load_tuning
_load_tuning()

from pygame.math import Vector3

from components import Transform
from core.ecs import World
from core.events import EventBus
from core.save import MemorySave
from data.variants import CATALOG, Variant
from logic.feedback import FeedbackPool
from logic.formation import FormationLayout
from logic.ledger import Ledger
from logic.production import new_automaton, production_system, step_unit


# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    print(f"  [FAIL] {label}")
    if detail:
        for line in detail.strip().splitlines():
            print(f"         {line}")

EPS = 1e-6


# ── Helpers ──────────────────────────────────────────────────────────

def _world(pool_capacity: int = 50) -> tuple[World, Ledger, FormationLayout, FeedbackPool]:
    world = World()
    ledger = Ledger(MemorySave())
    layout = FormationLayout()
    pool = FeedbackPool(capacity=pool_capacity, travel_duration=0.5, rest_epsilon=0.1)
    world.set_res(ledger)
    world.set_res(layout)
    world.set_res(pool)
    world.set_res(EventBus())
    return world, ledger, layout, pool


def _spawn(world, layout, ledger, variant, time_left):
    ledger.increase_owned(variant)
    eid = layout.add_unit(world, variant, time_left=time_left)
    layout.relayout(world, variant)
    return eid


# ════════════════════════════════════════════════════════════════════════
#  Countdown
# ════════════════════════════════════════════════════════════════════════

def test_zero_time_left_fires_on_first_step():
    unit = new_automaton(Variant.HELLMITE, time_left=0.0)
    assert step_unit(unit, 1 / 60, EPS)
    assert math.isclose(unit.time_left, CATALOG[Variant.HELLMITE].cooldown)
    assert unit.since_tick == 0.0


def test_exactly_once_per_cooldown():
    cooldown = CATALOG[Variant.HELLMITE].cooldown        # 2.5 s
    cycles = 4
    for divisor in (1, 2, 5, 10, 25, 50):
        dt = cooldown / divisor
        unit = new_automaton(Variant.HELLMITE, time_left=0.0)
        fires = sum(step_unit(unit, dt, EPS) for _ in range(cycles * divisor))
        assert fires == cycles, f"dt={dt}: {fires} fires over {cycles} cooldowns"


def test_large_step_fires_once():
    unit = new_automaton(Variant.HELLMITE, time_left=0.3)
    assert step_unit(unit, 100.0, EPS)
    # Reset to a full cooldown, no carry-over that could fire again
    assert math.isclose(unit.time_left, unit.cooldown)
    assert not step_unit(unit, 0.0, EPS)


def test_counting_unit_does_not_fire_early():
    unit = new_automaton(Variant.ABYSSOPOD, time_left=1.0)
    assert not step_unit(unit, 0.5, EPS)
    assert unit.since_tick is None
    assert step_unit(unit, 0.5, EPS)


def test_random_phase_in_range():
    rng = random.Random(7)
    cooldown = CATALOG[Variant.LORGNER].cooldown
    for _ in range(200):
        unit = new_automaton(Variant.LORGNER, rng=rng)
        assert 0.0 <= unit.time_left < cooldown


# ════════════════════════════════════════════════════════════════════════
#  production_system
# ════════════════════════════════════════════════════════════════════════

def test_production_credits_ledger_and_claims_orb():
    world, ledger, layout, pool = _world()
    eid = _spawn(world, layout, ledger, Variant.ABYSSOPOD, time_left=0.0)
    pos = Vector3(world.get(eid, Transform).position)

    assert production_system(world, 1 / 60) == 1
    assert ledger.get_currency() == 20
    assert ledger.get_income_by_variant(Variant.ABYSSOPOD) == 20
    active = pool.active_tokens()
    assert len(active) == 1
    assert active[0].start.distance_to(pos) < 1e-9


def test_production_rate_over_time():
    world, ledger, layout, pool = _world()
    _spawn(world, layout, ledger, Variant.HELLMITE, time_left=0.0)
    dt = 0.125                      # 20 steps per 2.5 s cooldown
    for _ in range(20 * 6):
        production_system(world, dt)
    assert ledger.get_currency() == 6


def test_exhausted_pool_still_credits_income():
    world, ledger, layout, pool = _world(pool_capacity=1)
    for _ in range(3):
        _spawn(world, layout, ledger, Variant.HELLMITE, time_left=0.0)
    seen = []
    world.res(EventBus).subscribe("ProductionTicked", seen.append)

    assert production_system(world, 1 / 60) == 3
    assert ledger.get_currency() == 3
    assert len(pool.active_tokens()) == 1
    world.res(EventBus).drain()
    assert [e.token for e in seen].count(None) == 2


def test_production_without_ledger_is_noop():
    world = World()
    eid = world.spawn()
    world.add(eid, new_automaton(Variant.HELLMITE, time_left=0.0))
    world.add(eid, Transform())
    assert production_system(world, 1.0) == 0


# ════════════════════════════════════════════════════════════════════════
#  FeedbackPool
# ════════════════════════════════════════════════════════════════════════

def test_pool_capacity_two_third_claim_dropped():
    pool = FeedbackPool(capacity=2, travel_duration=0.5, rest_epsilon=0.1)
    a = pool.claim(Vector3(4.0, 0.0, 0.0))
    b = pool.claim(Vector3(0.0, 0.0, -6.0))
    assert (a, b) == (0, 1)
    pool.update(0.1)
    snapshot = [(Vector3(t.start), Vector3(t.position), t.progress)
                for t in pool.tokens]

    assert pool.claim(Vector3(1.0, 0.0, 1.0)) is None
    after = [(Vector3(t.start), Vector3(t.position), t.progress)
             for t in pool.tokens]
    assert snapshot == after


def test_token_flies_linearly_to_origin():
    pool = FeedbackPool(capacity=1, travel_duration=0.5, rest_epsilon=0.1)
    h = pool.claim(Vector3(10.0, 0.0, 0.0))
    pool.update(0.25)
    tok = pool.token(h)
    assert tok.active
    assert math.isclose(tok.position.x, 5.0, abs_tol=1e-9)
    pool.update(0.25)
    assert not tok.active
    assert tok.position.length() == 0.0
    assert pool.available_count() == 1


def test_released_token_is_reused_first():
    pool = FeedbackPool(capacity=3, travel_duration=0.5, rest_epsilon=0.1)
    assert pool.claim(Vector3(3.0, 0.0, 0.0)) == 0
    pool.update(0.6)
    assert pool.claim(Vector3(2.0, 0.0, 0.0)) == 0
    assert pool.claim(Vector3(2.0, 0.0, 0.0)) == 1


def test_fresh_pool_is_all_available():
    pool = FeedbackPool(capacity=50)
    assert pool.capacity == 50
    assert pool.available_count() == 50
    assert pool.active_tokens() == []


# ════════════════════════════════════════════════════════════════════════
#  Runner
# ════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    tests = [(name, fn) for name, fn in list(globals().items())
             if name.startswith("test_") and callable(fn)]
    print("\n=== Production + Feedback ===")
    for name, fn in tests:
        try:
            fn()
            ok(name)
        except Exception:
            fail(name, traceback.format_exc())
    print(f"\n{'='*60}")
    print(f"  Production Tests: {_passed} passed, {_failed} failed")
    print(f"{'='*60}")
    sys.exit(1 if _failed else 0)
