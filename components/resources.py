"""components.resources — World-level singletons (not per-entity)."""

from __future__ import annotations
from dataclasses import dataclass

from data.variants import Variant


@dataclass
class InterfaceState:
    """Selection slot written by the presentation layer.

    The core only reads ``hovered`` to decide which variant's rate, cost
    and totals the HUD shows.
    """
    hovered: Variant | None = None


@dataclass
class PortalState:
    """Cosmetic pulse of the portal sphere."""
    hovered: bool = False
    scale: float = 1.0
