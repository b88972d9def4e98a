"""logic/production.py — Per-unit production countdowns.

Each Automaton counts ``time_left`` down by ``dt``.  When it reaches
zero the unit *fires*: its variant's ``currency_per_tick`` is credited
to the Ledger, the countdown restarts at the full cooldown, and one
feedback orb is sent from the unit toward the portal if the pool has
one free.

Two rules keep the income rate exact:
  - a unit fires at most once per step, however large ``dt`` is;
  - ``fire_epsilon`` absorbs float drift, so a step size that evenly
    divides the cooldown fires exactly once per cooldown.
"""

from __future__ import annotations
import random
from typing import TYPE_CHECKING

from components import Automaton, Transform
from core.events import EventBus, ProductionTicked
from core.tuning import get as _tun
from data.variants import CATALOG, Variant, VariantCatalog
from logic.feedback import FeedbackPool
from logic.ledger import Ledger

if TYPE_CHECKING:
    from core.ecs import World


def new_automaton(variant: Variant, catalog: VariantCatalog = CATALOG,
                  rng: random.Random | None = None,
                  time_left: float | None = None) -> Automaton:
    """Build a fresh unit with a random phase in ``[0, cooldown)``.

    Random phases keep a freshly restored population from all ticking
    on the same frame.
    """
    stats = catalog[variant]
    if time_left is None:
        r = rng.random() if rng is not None else random.random()
        time_left = r * stats.cooldown
    return Automaton(
        variant=variant,
        currency_per_tick=stats.currency_per_tick,
        cooldown=stats.cooldown,
        time_left=time_left,
    )


def step_unit(unit: Automaton, dt: float, epsilon: float = 0.0) -> bool:
    """Advance one unit's countdown.  Returns True if it fired this step."""
    if unit.since_tick is not None:
        unit.since_tick += dt
    if unit.time_left > epsilon:
        unit.time_left -= dt
    if unit.time_left <= epsilon:
        unit.time_left = unit.cooldown
        unit.since_tick = 0.0
        return True
    return False


def production_system(world: "World", dt: float) -> int:
    """Tick every unit, crediting income for each that fires.

    Returns the number of production ticks this step.
    """
    ledger = world.res(Ledger)
    if ledger is None:
        return 0
    pool = world.res(FeedbackPool)
    bus = world.res(EventBus)
    epsilon = float(_tun("production", "fire_epsilon", 1e-6))

    fired = 0
    for eid, unit, tf in world.query(Automaton, Transform):
        if not step_unit(unit, dt, epsilon):
            continue
        fired += 1
        ledger.add_income(unit.variant, unit.currency_per_tick)
        handle = pool.claim(tf.position) if pool is not None else None
        if bus is not None:
            bus.emit(ProductionTicked(
                eid=eid, variant=unit.variant, amount=unit.currency_per_tick,
                x=tf.position.x, z=tf.position.z, token=handle,
            ))
    return fired
