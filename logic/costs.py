"""logic/costs.py — Cost curve and prerequisite gating.

Pure functions over a Ledger and a VariantCatalog; nothing here keeps
state.  ``purchase()`` is the only way the automaton population grows.

    cost = floor(base_cost * ratio ** owned)

The price is computed in floating point and truncated, which is what
existing saves were priced with.  Past ~2**64 it saturates, and a
saturated price is never charged: that variant is sold out.

Portal gating (``[chain] portal_gate`` in tuning.toml):

    "currency"       Portal needs ``portal_threshold`` currency, and the
                     first automaton after it needs ``required_previous``
                     currency (there is no Portal to own).
    "unconditional"  both are always met.
"""

from __future__ import annotations

from core.events import EventBus, AutomatonPurchased, PortalClicked
from core.tuning import get as _tun
from data.variants import (
    CATALOG, U64_MAX, Variant, VariantCatalog, predecessor,
)
from logic.ledger import Ledger

GATE_CURRENCY = "currency"
GATE_UNCONDITIONAL = "unconditional"


def portal_gate() -> str:
    gate = _tun("chain", "portal_gate", GATE_CURRENCY)
    if gate not in (GATE_CURRENCY, GATE_UNCONDITIONAL):
        print(f"[ECON] Unknown portal_gate {gate!r} — using {GATE_CURRENCY!r}")
        return GATE_CURRENCY
    return gate


def cost_to_purchase(ledger: Ledger, variant: Variant,
                     catalog: VariantCatalog = CATALOG) -> int:
    return catalog[variant].price(ledger.get_owned(variant))


def can_afford(ledger: Ledger, variant: Variant,
               catalog: VariantCatalog = CATALOG) -> bool:
    cost = cost_to_purchase(ledger, variant, catalog)
    return cost < U64_MAX and ledger.get_currency() >= cost


def prerequisites_met(ledger: Ledger, variant: Variant,
                      catalog: VariantCatalog = CATALOG,
                      gate: str | None = None) -> bool:
    """Is *variant* unlocked?

    Only the immediate predecessor is checked: owning enough of N-1 is
    sufficient regardless of how N-2 stands now.
    """
    if gate is None:
        gate = portal_gate()
    prev = predecessor(variant)

    if prev is None:
        if gate == GATE_UNCONDITIONAL:
            return True
        threshold = int(_tun("chain", "portal_threshold", 0))
        return ledger.get_currency() >= threshold

    required = catalog[variant].required_previous
    if prev is Variant.PORTAL:
        if gate == GATE_UNCONDITIONAL:
            return True
        return ledger.get_currency() >= required
    return ledger.get_owned(prev) >= required


def purchase(ledger: Ledger, variant: Variant,
             catalog: VariantCatalog = CATALOG,
             bus: EventBus | None = None,
             gate: str | None = None) -> bool:
    """Try to buy one *variant*.  Returns True if it went through.

    A refusal (Portal, locked, sold out, or too expensive) changes
    nothing.
    """
    if variant is Variant.PORTAL:
        return False
    if not prerequisites_met(ledger, variant, catalog, gate):
        return False
    cost = cost_to_purchase(ledger, variant, catalog)
    if cost >= U64_MAX:
        return False
    if not ledger.purchase(variant, cost):
        return False
    owned = ledger.get_owned(variant)
    print(f"[ECON] Bought {variant} #{owned} for {cost}")
    if bus is not None:
        bus.emit(AutomatonPurchased(variant=variant, cost=cost, owned=owned))
    return True


def click_portal(ledger: Ledger, bus: EventBus | None = None) -> int:
    """Manual income: one click on the portal.  Returns the amount credited."""
    amount = int(_tun("portal", "click_yield", 1))
    ledger.add_income(Variant.PORTAL, amount)
    if bus is not None:
        bus.emit(PortalClicked(amount=amount))
    return amount
