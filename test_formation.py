"""test_formation.py — Ring layout of automatons around the portal.

Covers:
1. Even spacing 2π·i/n after every population change
2. Same layout regardless of how units were added
3. Facing, radius, orbital rotation
4. Production nudge is cosmetic only

Run: python test_formation.py   (or pytest)
"""
from __future__ import annotations
import math, random, sys, traceback

# ── Bootstrap ────────────────────────────────────────────────────────
from core.tuning import load as _load_tuning
_load_tuning()

from components import Automaton, Transform
from core.ecs import World
from core.save import MemorySave
from data.variants import CATALOG, Variant
from logic.formation import TAU, FormationLayout, formation_system
from logic.ledger import Ledger


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


# ── Helpers ──────────────────────────────────────────────────────────

def _expected(n: int) -> list[float]:
    return [TAU * i / n for i in range(n)]


def _same_angles(got: list[float], want: list[float]) -> bool:
    if len(got) != len(want):
        return False
    for a, b in zip(sorted(got), sorted(want)):
        d = abs(a - b) % TAU
        if min(d, TAU - d) > 1e-9:
            return False
    return True


def _setup() -> tuple[World, Ledger, FormationLayout]:
    world = World()
    ledger = Ledger(MemorySave())
    layout = FormationLayout(nudge_amount=0.1, nudge_recovery=0.5)
    world.set_res(ledger)
    world.set_res(layout)
    return world, ledger, layout


def _position_angle(tf: Transform) -> float:
    return math.atan2(tf.position.z, tf.position.x) % TAU


# ════════════════════════════════════════════════════════════════════════
#  Spacing
# ════════════════════════════════════════════════════════════════════════

def test_even_spacing_after_each_purchase():
    world, ledger, layout = _setup()
    for n in range(1, 9):
        ledger.increase_owned(Variant.GAPING_DUBINE)
        changed = formation_system(world, 1 / 60, random.Random(n))
        assert changed == [Variant.GAPING_DUBINE]
        assert _same_angles(layout.angles(Variant.GAPING_DUBINE), _expected(n))
        eids = layout.rings[Variant.GAPING_DUBINE].eids
        measured = [_position_angle(world.get(e, Transform)) for e in eids]
        assert _same_angles(measured, _expected(n))


def test_layout_independent_of_insertion_order():
    # One at a time, re-laying out after each …
    w1, l1, lay1 = _setup()
    for _ in range(5):
        l1.increase_owned(Variant.HELLMITE)
        formation_system(w1, 0.0)
    # … versus a restored batch of five
    w2, l2, lay2 = _setup()
    for _ in range(5):
        l2.increase_owned(Variant.HELLMITE)
    formation_system(w2, 0.0)

    a1 = lay1.angles(Variant.HELLMITE)
    a2 = lay2.angles(Variant.HELLMITE)
    assert _same_angles(a1, _expected(5))
    assert _same_angles(a2, _expected(5))


def test_units_sit_on_ring_radius_facing_centre():
    world, ledger, layout = _setup()
    for _ in range(7):
        ledger.increase_owned(Variant.LORGNER)
    formation_system(world, 0.0)
    radius = CATALOG[Variant.LORGNER].distance_from_origin
    for eid in layout.rings[Variant.LORGNER].eids:
        tf = world.get(eid, Transform)
        assert math.isclose(tf.position.length(), radius, rel_tol=1e-9)
        assert tf.position.y == 0.0
        # Walking `radius` along the facing direction lands on the portal
        tip_x = tf.position.x + math.cos(tf.facing) * radius
        tip_z = tf.position.z + math.sin(tf.facing) * radius
        assert abs(tip_x) < 1e-9 and abs(tip_z) < 1e-9
        assert tf.scale == CATALOG[Variant.LORGNER].scale


def test_sync_spawns_only_missing_units():
    world, ledger, layout = _setup()
    for _ in range(3):
        ledger.increase_owned(Variant.ABYSSOPOD)
    assert layout.sync_population(world, ledger) == [Variant.ABYSSOPOD]
    assert layout.sync_population(world, ledger) == []
    assert world.count(Automaton) == 3
    assert layout.count(Variant.ABYSSOPOD) == 3


def test_spawned_units_have_random_phase():
    world, ledger, layout = _setup()
    for _ in range(30):
        ledger.increase_owned(Variant.HELLMITE)
    layout.sync_population(world, ledger, random.Random(3))
    cooldown = CATALOG[Variant.HELLMITE].cooldown
    phases = [u.time_left for _, u in world.all_of(Automaton)]
    assert all(0.0 <= t < cooldown for t in phases)
    assert len(set(phases)) > 1


# ════════════════════════════════════════════════════════════════════════
#  Rotation + nudge
# ════════════════════════════════════════════════════════════════════════

def test_orbit_rotates_at_variant_rate():
    world, ledger, layout = _setup()
    for _ in range(4):
        ledger.increase_owned(Variant.ABYSSOPOD)
    formation_system(world, 0.0)
    layout.update(world, 2.0)
    rotation = CATALOG[Variant.ABYSSOPOD].rotation        # -0.05 rad/s
    want = [(a + rotation * 2.0) % TAU for a in _expected(4)]
    assert _same_angles(layout.angles(Variant.ABYSSOPOD), want)


def test_relayout_resets_orbit_phase():
    world, ledger, layout = _setup()
    ledger.increase_owned(Variant.HELLMITE)
    formation_system(world, 0.0)
    for _ in range(100):
        formation_system(world, 0.1)
    assert layout.rings[Variant.HELLMITE].phase != 0.0
    ledger.increase_owned(Variant.HELLMITE)
    formation_system(world, 0.1)
    assert _same_angles(layout.angles(Variant.HELLMITE), _expected(2))


def test_nudge_pulls_inward_then_recovers():
    world, ledger, layout = _setup()
    ledger.increase_owned(Variant.STRUTHIOS)
    formation_system(world, 0.0)
    eid = layout.rings[Variant.STRUTHIOS].eids[0]
    unit = world.get(eid, Automaton)
    tf = world.get(eid, Transform)
    radius = CATALOG[Variant.STRUTHIOS].distance_from_origin
    time_left = unit.time_left

    unit.since_tick = 0.0
    layout.update(world, 0.0)
    assert math.isclose(tf.position.length(), radius - 0.1, rel_tol=1e-9)

    unit.since_tick = 0.25
    layout.update(world, 0.0)
    assert math.isclose(tf.position.length(), radius - 0.05, rel_tol=1e-9)

    unit.since_tick = 0.5
    layout.update(world, 0.0)
    assert math.isclose(tf.position.length(), radius, rel_tol=1e-9)

    # Never touches the production timer
    assert unit.time_left == time_left


def test_unit_that_never_ticked_is_not_nudged():
    world, ledger, layout = _setup()
    ledger.increase_owned(Variant.HELLMITE)
    formation_system(world, 0.0)
    eid = layout.rings[Variant.HELLMITE].eids[0]
    world.get(eid, Automaton).time_left = CATALOG[Variant.HELLMITE].cooldown - 0.01
    layout.update(world, 0.0)
    radius = CATALOG[Variant.HELLMITE].distance_from_origin
    assert math.isclose(world.get(eid, Transform).position.length(), radius)


# ════════════════════════════════════════════════════════════════════════
#  Runner
# ════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    tests = [(name, fn) for name, fn in list(globals().items())
             if name.startswith("test_") and callable(fn)]
    print("\n=== Formation ===")
    for name, fn in tests:
        try:
            fn()
            ok(name)
        except Exception:
            fail(name, traceback.format_exc())
    print(f"\n{'='*60}")
    print(f"  Formation Tests: {_passed} passed, {_failed} failed")
    print(f"{'='*60}")
    sys.exit(1 if _failed else 0)
