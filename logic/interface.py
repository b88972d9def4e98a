"""logic/interface.py — Read-only view of the economy for the HUD.

The presentation layer never touches the Ledger directly.  It reads a
``VariantSnapshot`` per variant, asks for a named HUD text element, and
writes only ``InterfaceState.hovered``.

Text elements (by name):
    score_text                  current currency
    hovered_name_quantity_text  "Hellmite: 12"
    hovered_rate_total_text     "Rate: 4.80/s, Generated: 1154"
    hovered_cost_text           ": $37"

An element name with no binding is logged and rendered empty.
"""

from __future__ import annotations
from dataclasses import dataclass

from components import InterfaceState
from data.variants import CATALOG, Variant, VariantCatalog
from logic.costs import can_afford, cost_to_purchase, prerequisites_met
from logic.ledger import Ledger


@dataclass(frozen=True)
class VariantSnapshot:
    variant: Variant
    owned: int
    cost: int
    affordable: bool
    unlocked: bool
    income: int
    rate: float            # currency per second from every owned unit


def production_rate(ledger: Ledger, variant: Variant,
                    catalog: VariantCatalog = CATALOG) -> float:
    """``currency_per_tick / cooldown * owned`` for *variant*."""
    stats = catalog[variant]
    return stats.currency_per_tick / stats.cooldown * ledger.get_owned(variant)


def hovered_rate(ledger: Ledger, state: InterfaceState,
                 catalog: VariantCatalog = CATALOG) -> float:
    if state.hovered is None:
        return 0.0
    return production_rate(ledger, state.hovered, catalog)


def variant_snapshot(ledger: Ledger, variant: Variant,
                     catalog: VariantCatalog = CATALOG) -> VariantSnapshot:
    return VariantSnapshot(
        variant=variant,
        owned=ledger.get_owned(variant),
        cost=cost_to_purchase(ledger, variant, catalog),
        affordable=can_afford(ledger, variant, catalog),
        unlocked=prerequisites_met(ledger, variant, catalog),
        income=ledger.get_income_by_variant(variant),
        rate=production_rate(ledger, variant, catalog),
    )


def total_rate(ledger: Ledger, catalog: VariantCatalog = CATALOG) -> float:
    return sum(production_rate(ledger, v, catalog) for v in catalog)


# ── HUD text bindings ────────────────────────────────────────────────

def _score(ledger, state, catalog) -> str:
    return f"{ledger.get_currency()}"


def _name_quantity(ledger, state, catalog) -> str:
    if state.hovered is None:
        return ""
    return f"{state.hovered}: {ledger.get_owned(state.hovered)}"


def _rate_total(ledger, state, catalog) -> str:
    if state.hovered is None:
        return ""
    rate = hovered_rate(ledger, state, catalog)
    generated = ledger.get_income_by_variant(state.hovered)
    return f"Rate: {rate:.2f}/s, Generated: {generated}"


def _cost(ledger, state, catalog) -> str:
    if state.hovered is None or state.hovered is Variant.PORTAL:
        return ""
    return f": ${cost_to_purchase(ledger, state.hovered, catalog)}"


TEXT_BINDINGS = {
    "score_text": _score,
    "hovered_name_quantity_text": _name_quantity,
    "hovered_rate_total_text": _rate_total,
    "hovered_cost_text": _cost,
}


def hud_text(name: str, ledger: Ledger, state: InterfaceState,
             catalog: VariantCatalog = CATALOG) -> str:
    """Text for the HUD element called *name* ("" if unknown)."""
    binding = TEXT_BINDINGS.get(name)
    if binding is None:
        print(f"[UI] Unknown text element with name: {name}")
        return ""
    return binding(ledger, state, catalog)


def variant_by_name(name: str) -> Variant | None:
    """Resolve a variant name coming from the UI; warn if it is unknown."""
    try:
        return Variant.from_name(name)
    except KeyError:
        print(f"[UI] Unknown variant name: {name}")
        return None
