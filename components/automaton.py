"""components.automaton — Production unit state."""

from __future__ import annotations
from dataclasses import dataclass

from data.variants import Variant


@dataclass
class Automaton:
    """One owned production unit.

    Not persisted: the Ledger's owned count is the source of truth and
    units are respawned from it on startup.

    ``time_left`` counts down to the next production tick (s).
    ``since_tick`` is the time since the last tick, or None if the unit
    has not produced yet; the formation nudge reads it.
    """
    variant: Variant
    currency_per_tick: int = 0
    cooldown: float = 1.0
    time_left: float = 0.0
    since_tick: float | None = None
