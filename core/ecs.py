"""
core/ecs.py — Entity-Component-System

Entities are ints. Components are any object, stored by type.
Singletons (the Ledger, the FeedbackPool, the FormationLayout …) are
stored as *resources* and fetched by type.

    w = World()
    e = w.spawn()
    w.add(e, Automaton(variant=Variant.HELLMITE, ...))
    w.add(e, Transform())

    for eid, unit, tf in w.query(Automaton, Transform):
        unit.time_left -= dt
"""

from __future__ import annotations
from typing import Any, Iterator


class World:
    def __init__(self):
        self._next_id = 0
        self._stores: dict[type, dict[int, Any]] = {}
        self._resources: dict[type, Any] = {}

    # -- Entities --

    def spawn(self) -> int:
        self._next_id += 1
        return self._next_id

    # -- Components --

    def add(self, eid: int, comp: Any):
        self._stores.setdefault(type(comp), {})[eid] = comp

    def get(self, eid: int, comp_type: type) -> Any | None:
        return self._stores.get(comp_type, {}).get(eid)

    # -- Queries --

    def query(self, *types: type) -> Iterator[tuple]:
        """Yield (eid, comp1, comp2, ...) for entities that have ALL types.

        Entities come out in spawn order, so systems that iterate units
        see them in purchase order.
        """
        if not types:
            return
        buckets = [self._stores.get(t, {}) for t in types]
        smallest = min(buckets, key=len)
        for eid in sorted(smallest):
            if all(eid in b for b in buckets):
                yield (eid, *(b[eid] for b in buckets))

    def query_one(self, *types: type) -> tuple | None:
        """Return first match or None."""
        for result in self.query(*types):
            return result
        return None

    def all_of(self, comp_type: type) -> Iterator[tuple[int, Any]]:
        """Yield (eid, component) for every entity with this type."""
        yield from self._stores.get(comp_type, {}).items()

    def count(self, comp_type: type) -> int:
        return sum(1 for _ in self.all_of(comp_type))

    # -- Resources (singletons, not tied to entities) --

    def set_res(self, resource: Any):
        self._resources[type(resource)] = resource

    def res(self, res_type: type) -> Any | None:
        return self._resources.get(res_type)
