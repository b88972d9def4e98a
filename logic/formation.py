"""logic/formation.py — Rings of automatons around the portal.

Every variant orbits the origin on its own ring at
``distance_from_origin``.  For ``n`` units, unit ``i`` (purchase order)
sits at angle ``2π·i/n + phase``, facing the centre.

    layout = FormationLayout()
    world.set_res(layout)
    changed = layout.sync_population(world, ledger)   # spawn bought units
    for v in changed:
        layout.relayout(world, v)                      # even spacing
    layout.update(world, dt)                           # orbit + nudge

A purchase always triggers a *full* re-layout of that ring: the spacing
depends on the new total, so every unit moves.  Re-layout also resets
the ring's orbital phase, which then keeps turning at ``rotation``
rad/s.

Right after a unit produces, its radius is pulled in by
``nudge_amount`` and eased back out over ``nudge_recovery`` seconds.
That is purely visual; production timers are never touched here.
"""

from __future__ import annotations
import math
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Collection

from pygame.math import Vector3

from components import Automaton, Transform
from core.tuning import get as _tun
from data.variants import AUTOMATONS, CATALOG, Variant, VariantCatalog
from logic.ledger import Ledger
from logic.production import new_automaton

if TYPE_CHECKING:
    from core.ecs import World

TAU = 2.0 * math.pi


@dataclass
class Ring:
    """One variant's units, in purchase order, plus its orbital phase."""
    eids: list[int] = field(default_factory=list)
    phase: float = 0.0     # rad

    def angle(self, index: int) -> float:
        return TAU * index / len(self.eids) + self.phase


def ring_point(radius: float, angle: float) -> Vector3:
    return Vector3(radius * math.cos(angle), 0.0, radius * math.sin(angle))


def facing_centre(angle: float) -> float:
    """Yaw that points from a ring position at *angle* back to the origin."""
    return (angle + math.pi) % TAU


class FormationLayout:
    """Per-variant rings.  Stored as a world resource."""

    def __init__(self, catalog: VariantCatalog = CATALOG,
                 nudge_amount: float | None = None,
                 nudge_recovery: float | None = None):
        self.catalog = catalog
        self.nudge_amount = (float(_tun("formation", "nudge_amount", 0.1))
                             if nudge_amount is None else nudge_amount)
        self.nudge_recovery = (float(_tun("formation", "nudge_recovery", 0.5))
                               if nudge_recovery is None else nudge_recovery)
        self.rings: dict[Variant, Ring] = {v: Ring() for v in AUTOMATONS}

    def count(self, variant: Variant) -> int:
        ring = self.rings.get(variant)
        return len(ring.eids) if ring else 0

    def angles(self, variant: Variant) -> list[float]:
        """Current angle of every unit on the ring, in purchase order."""
        ring = self.rings.get(variant)
        if not ring or not ring.eids:
            return []
        return [ring.angle(i) % TAU for i in range(len(ring.eids))]

    # ── population ───────────────────────────────────────────────────

    def add_unit(self, world: "World", variant: Variant,
                 rng: random.Random | None = None,
                 time_left: float | None = None) -> int:
        """Spawn one unit and append it to its ring (no re-layout)."""
        stats = self.catalog[variant]
        eid = world.spawn()
        world.add(eid, new_automaton(variant, self.catalog, rng, time_left))
        world.add(eid, Transform(scale=stats.scale))
        self.rings[variant].eids.append(eid)
        return eid

    def sync_population(self, world: "World", ledger: Ledger,
                        rng: random.Random | None = None) -> list[Variant]:
        """Spawn units until every ring matches the Ledger's owned count.

        Returns the variants whose population changed.
        """
        changed: list[Variant] = []
        for variant, ring in self.rings.items():
            missing = ledger.get_owned(variant) - len(ring.eids)
            if missing <= 0:
                continue
            for _ in range(missing):
                self.add_unit(world, variant, rng)
            changed.append(variant)
        return changed

    # ── placement ────────────────────────────────────────────────────

    def relayout(self, world: "World", variant: Variant) -> None:
        """Evenly respace every unit of *variant* on its ring."""
        ring = self.rings[variant]
        ring.phase = 0.0
        radius = self.catalog[variant].distance_from_origin
        for i, eid in enumerate(ring.eids):
            tf = world.get(eid, Transform)
            if tf is None:
                continue
            angle = ring.angle(i)
            tf.position = ring_point(radius, angle)
            tf.facing = facing_centre(angle)

    def nudged_radius(self, radius: float, unit: Automaton | None) -> float:
        if unit is None or unit.since_tick is None:
            return radius
        if unit.since_tick >= self.nudge_recovery:
            return radius
        t = unit.since_tick / self.nudge_recovery
        return radius - self.nudge_amount * (1.0 - t)

    def update(self, world: "World", dt: float,
               hold: Collection[Variant] = ()) -> None:
        """Turn each ring by ``rotation * dt`` and apply production nudges.

        Rings in *hold* keep their phase this frame (they were just
        re-laid out).
        """
        for variant, ring in self.rings.items():
            if not ring.eids:
                continue
            stats = self.catalog[variant]
            if variant not in hold:
                ring.phase = (ring.phase + stats.rotation * dt) % TAU
            for i, eid in enumerate(ring.eids):
                tf = world.get(eid, Transform)
                if tf is None:
                    continue
                angle = ring.angle(i)
                radius = self.nudged_radius(
                    stats.distance_from_origin, world.get(eid, Automaton))
                tf.position = ring_point(radius, angle)
                tf.facing = facing_centre(angle)


def formation_system(world: "World", dt: float,
                     rng: random.Random | None = None) -> list[Variant]:
    """Spawn bought units, re-layout changed rings, then orbit.

    Returns the variants that were re-laid out this frame.
    """
    layout = world.res(FormationLayout)
    ledger = world.res(Ledger)
    if layout is None or ledger is None:
        return []
    changed = layout.sync_population(world, ledger, rng)
    for variant in changed:
        layout.relayout(world, variant)
    layout.update(world, dt, hold=changed)
    return changed
