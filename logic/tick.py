"""logic/tick.py — System tick orchestration.

Houses the per-frame system pipeline plus the world setup every scene
and test starts from.

Usage::

    from logic.tick import setup_world, tick_systems
    world = World()
    setup_world(world, JsonFileSave())
    ...
    tick_systems(world, dt)          # once per frame

Frame order (fixed):
    1. production        — countdowns, income, orb claims
    2. formation         — spawn bought units, re-layout, orbit/nudge
    3. feedback orbs     — fly toward the portal
    4. portal pulse      — cosmetic
    5. event bus drain
    6. ledger flush      — save only if something changed
"""

from __future__ import annotations
import random
from typing import TYPE_CHECKING

from components import InterfaceState, PortalState
from core.events import EventBus
from core.save import SaveBackend
from core.tuning import get as _tun
from data.variants import CATALOG, VariantCatalog
from logic.feedback import FeedbackPool
from logic.formation import FormationLayout, formation_system
from logic.ledger import Ledger
from logic.production import production_system

if TYPE_CHECKING:
    from core.ecs import World


def setup_world(world: "World", backend: SaveBackend,
                catalog: VariantCatalog = CATALOG,
                rng: random.Random | None = None) -> Ledger:
    """Restore the Ledger and install every economy resource.

    Units for the restored owned counts are spawned immediately with
    random phases, so the first frame already shows full rings.
    """
    ledger = Ledger.restore(backend, catalog)
    world.set_res(ledger)
    world.set_res(InterfaceState())
    portal = PortalState()
    world.set_res(portal)

    bus = EventBus()

    def _pulse(_event) -> None:
        portal.scale = float(_tun("portal", "click_scale", 1.5))

    bus.subscribe("PortalClicked", _pulse)
    world.set_res(bus)
    world.set_res(FeedbackPool())
    layout = FormationLayout(catalog)
    world.set_res(layout)
    for variant in layout.sync_population(world, ledger, rng):
        layout.relayout(world, variant)
    return ledger


def portal_pulse_system(world: "World", dt: float) -> None:
    """Ease the portal's scale toward 1.0 (or the hover scale)."""
    state = world.res(PortalState)
    if state is None:
        return
    target = float(_tun("portal", "hover_scale", 1.10)) if state.hovered else 1.0
    rate = float(_tun("portal", "scale_rate", 10.0))
    state.scale += (target - state.scale) * min(1.0, dt * rate)


def tick_systems(world: "World", dt: float, *,
                 rng: random.Random | None = None) -> int:
    """Run all economy systems for one frame.

    Returns the number of production ticks that fired.
    """
    fired = production_system(world, dt)
    formation_system(world, dt, rng)

    pool = world.res(FeedbackPool)
    if pool:
        pool.update(dt)

    portal_pulse_system(world, dt)

    bus = world.res(EventBus)
    if bus:
        bus.drain()

    ledger = world.res(Ledger)
    if ledger:
        ledger.flush()
    return fired
