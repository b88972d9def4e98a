"""core/events.py — Lightweight event bus.

Lets the economy *signal* things (a purchase went through, a unit
produced, the portal was clicked) without knowing who listens: the
scene flashes a confirmation, an audio layer could play a pickup sound.
The bus lives as an ECS resource::

    from core.events import EventBus
    bus = world.res(EventBus)
    bus.emit(AutomatonPurchased(variant=Variant.HELLMITE, cost=25, owned=1))

Consumers subscribe with a callable::

    bus.subscribe("AutomatonPurchased", my_handler)

And ``tick_systems`` drains once per frame.

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; those are processed in the same drain.
"""

from __future__ import annotations
import traceback
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

from data.variants import Variant


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class AutomatonPurchased:
    """A purchase cleared the cost gate."""
    variant: Variant
    cost: int = 0
    owned: int = 0          # owned count after the purchase


@dataclass
class ProductionTicked:
    """A unit's cooldown expired and its income was credited."""
    eid: int
    variant: Variant
    amount: int = 0
    x: float = 0.0
    z: float = 0.0
    token: int | None = None   # feedback token claimed, if any


@dataclass
class PortalClicked:
    """The player clicked the portal for manual income."""
    amount: int = 0


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Fire-and-forget event bus stored as an ECS resource."""

    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[str, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """Register *handler* to receive events of *event_type*.

        *event_type* is the class name, e.g. ``"ProductionTicked"``.
        """
        self._subs[event_type].append(handler)

    def drain(self) -> int:
        """Process all queued events.  Returns number processed."""
        processed = 0
        safety = 1000  # prevent infinite loops
        while self._queue and safety > 0:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                name = type(event).__name__
                self._stats[name] += 1
                for handler in self._subs.get(name, []):
                    try:
                        handler(event)
                    except Exception as exc:
                        print(f"[EVENT] handler error for {name}: {exc}")
                        traceback.print_exc()
            processed += len(batch)
            safety -= 1
        return processed

    def stats(self) -> dict[str, int]:
        """Return cumulative event counts by type."""
        return dict(self._stats)

    def pending_count(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return f"EventBus(pending={len(self._queue)}, subs={len(self._subs)})"
