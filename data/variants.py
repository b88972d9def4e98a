"""data/variants.py — Automaton variant table.

The variant order *is* the prerequisite chain::

    Portal → Hellmite → Abyssopod → … → WoolyChionoescent

Each automaton unlocks once the player owns ``required_previous`` of the
variant declared immediately before it.  Portal is the manual-click
income source; it has no predecessor and is never bought.

Units:
    distance_from_origin   world units (ring radius)
    cooldown               s between production ticks
    currency_per_tick      currency credited per tick
    rotation               rad/s orbital speed (sign = direction)
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Mapping


class Variant(Enum):
    PORTAL = "Portal"
    HELLMITE = "Hellmite"
    ABYSSOPOD = "Abyssopod"
    GAPING_DUBINE = "GapingDubine"
    GAZING_HOKU = "GazingHoku"
    LORGNER = "Lorgner"
    PELTE_LACERTE = "PelteLacerte"
    STRUTHIOS = "Struthios"
    WOOLY_CHIONOESCENT = "WoolyChionoescent"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Variant":
        """Look up a variant by its display/save name.  Raises KeyError."""
        for v in cls:
            if v.value == name:
                return v
        raise KeyError(name)


# Declaration order of the enum is the chain order.
CHAIN: tuple[Variant, ...] = tuple(Variant)

# Purchasable automatons, in chain order (number keys 1-8 in the game).
AUTOMATONS: tuple[Variant, ...] = CHAIN[1:]

# Quantities are unsigned 64-bit; arithmetic saturates at the top.
U64_MAX = 2 ** 64 - 1


@dataclass(frozen=True)
class VariantStats:
    distance_from_origin: float
    cooldown: float
    currency_per_tick: int
    scale: float
    base_cost: int
    ratio: float
    required_previous: int
    rotation: float

    def price(self, owned: int) -> int:
        """``floor(base_cost * ratio ** owned)``, saturating at ``U64_MAX``.

        Computed in floating point and truncated, which is what existing
        saves were priced with.
        """
        try:
            raw = self.base_cost * float(self.ratio) ** owned
        except OverflowError:
            return U64_MAX
        if math.isinf(raw) or raw >= U64_MAX:
            return U64_MAX
        return math.floor(raw)

    def owned_limit(self) -> int:
        """Most units that can ever be bought: the first count whose
        price has saturated.  Unbounded when the price never grows.
        """
        if self.ratio <= 1.0 or self.base_cost <= 0:
            return U64_MAX
        owned = 0
        while self.price(owned) < U64_MAX:
            owned += 1
        return owned


class CatalogError(ValueError):
    """Raised when a variant table does not cover every variant exactly once."""


class VariantCatalog(Mapping[Variant, VariantStats]):
    """Immutable ``Variant → VariantStats`` lookup, checked for totality.

    Built from a sequence of ``(variant, stats)`` pairs so duplicate
    entries can be detected instead of silently overwritten.
    """

    def __init__(self, entries):
        table: dict[Variant, VariantStats] = {}
        for variant, stats in entries:
            if variant in table:
                raise CatalogError(f"duplicate stats for {variant}")
            table[variant] = stats
        missing = [v for v in Variant if v not in table]
        if missing:
            raise CatalogError(
                "missing stats for " + ", ".join(str(v) for v in missing))
        for variant, stats in table.items():
            if stats.cooldown <= 0:
                raise CatalogError(f"{variant} cooldown must be > 0")
            if variant is not Variant.PORTAL and stats.ratio <= 1.0:
                raise CatalogError(f"{variant} ratio must be > 1.0")
        self._table = table

    def __getitem__(self, variant: Variant) -> VariantStats:
        return self._table[variant]

    def __iter__(self) -> Iterator[Variant]:
        # Chain order, regardless of the order entries were given in
        return (v for v in CHAIN if v in self._table)

    def __len__(self) -> int:
        return len(self._table)

    def replace(self, variant: Variant, stats: VariantStats) -> "VariantCatalog":
        """Return a copy with one variant's stats swapped out."""
        return VariantCatalog(
            (v, stats if v is variant else s) for v, s in self._table.items())


def predecessor(variant: Variant) -> Variant | None:
    """The variant immediately before *variant* in the chain (None for Portal)."""
    i = CHAIN.index(variant)
    return CHAIN[i - 1] if i > 0 else None


VARIANT_STATS: tuple[tuple[Variant, VariantStats], ...] = (
    (Variant.HELLMITE, VariantStats(
        distance_from_origin=2.5, cooldown=2.5, currency_per_tick=1,
        scale=0.25, base_cost=25, ratio=1.05, required_previous=25,
        rotation=0.05)),
    (Variant.ABYSSOPOD, VariantStats(
        distance_from_origin=3.5, cooldown=7.5, currency_per_tick=20,
        scale=0.35, base_cost=100, ratio=1.1, required_previous=20,
        rotation=-0.05)),
    (Variant.GAPING_DUBINE, VariantStats(
        distance_from_origin=5.0, cooldown=15.0, currency_per_tick=45,
        scale=0.5, base_cost=500, ratio=1.25, required_previous=15,
        rotation=0.05)),
    (Variant.GAZING_HOKU, VariantStats(
        distance_from_origin=7.0, cooldown=30.0, currency_per_tick=120,
        scale=0.6, base_cost=2500, ratio=1.45, required_previous=10,
        rotation=-0.05)),
    (Variant.LORGNER, VariantStats(
        distance_from_origin=10.0, cooldown=50.0, currency_per_tick=625,
        scale=0.75, base_cost=12500, ratio=1.6, required_previous=8,
        rotation=0.05)),
    (Variant.PELTE_LACERTE, VariantStats(
        distance_from_origin=13.0, cooldown=60.0, currency_per_tick=1500,
        scale=0.8, base_cost=62500, ratio=1.75, required_previous=6,
        rotation=-0.05)),
    (Variant.STRUTHIOS, VariantStats(
        distance_from_origin=16.0, cooldown=90.0, currency_per_tick=5000,
        scale=0.9, base_cost=62500, ratio=1.8, required_previous=5,
        rotation=0.05)),
    (Variant.WOOLY_CHIONOESCENT, VariantStats(
        distance_from_origin=20.0, cooldown=120.0, currency_per_tick=150000,
        scale=1.0, base_cost=1562500, ratio=2.0, required_previous=2,
        rotation=-0.05)),
    # Not automated; kept in the table for UI display
    (Variant.PORTAL, VariantStats(
        distance_from_origin=0.0, cooldown=1.0, currency_per_tick=0,
        scale=0.0, base_cost=0, ratio=1.0, required_previous=0,
        rotation=0.0)),
)

CATALOG = VariantCatalog(VARIANT_STATS)
