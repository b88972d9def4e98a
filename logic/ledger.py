"""logic/ledger.py — Authoritative economic state.

The Ledger holds the currency balance, how many automatons of each
variant the player owns, and how much each variant has ever produced.
It is stored as a world resource and is the only shared mutable state
in the game.

Snapshot schema (JSON)::

    {
      "currency": 1234,
      "owned_by_variant": {"Hellmite": 12, "Abyssopod": 3},
      "income_by_variant": {"Portal": 80, "Hellmite": 1154}
    }

Every mutation marks the ledger dirty; ``tick_systems`` calls
``flush()`` once per frame, which writes the snapshot if anything
changed.  Persistence is best effort: read problems fall back to a
fresh ledger, write problems are logged and ignored.
"""

from __future__ import annotations
import json
from typing import Any

from core.save import SaveBackend, SaveError, MemorySave
from data.variants import CATALOG, U64_MAX, Variant, VariantCatalog


def _sat_add(a: int, b: int) -> int:
    return min(U64_MAX, a + b)


class SnapshotError(ValueError):
    """A persisted snapshot is not a well-formed ledger."""


class Ledger:
    def __init__(self, backend: SaveBackend | None = None):
        self.backend: SaveBackend = backend if backend is not None else MemorySave()
        self.currency: int = 0
        self.owned_by_variant: dict[Variant, int] = {}
        self.income_by_variant: dict[Variant, int] = {Variant.PORTAL: 0}
        self.dirty: bool = False

    # ── Reads ────────────────────────────────────────────────────────

    def get_currency(self) -> int:
        return self.currency

    def get_owned(self, variant: Variant) -> int:
        return self.owned_by_variant.get(variant, 0)

    def get_income_by_variant(self, variant: Variant) -> int:
        return self.income_by_variant.get(variant, 0)

    # ── Mutations ────────────────────────────────────────────────────

    def add_income(self, variant: Variant, amount: int) -> None:
        """Credit *amount* to the balance and to *variant*'s lifetime income."""
        if amount < 0:
            raise ValueError(f"income must be non-negative, got {amount}")
        self.currency = _sat_add(self.currency, amount)
        self.income_by_variant[variant] = _sat_add(
            self.income_by_variant.get(variant, 0), amount)
        self.dirty = True

    def increase_owned(self, variant: Variant) -> None:
        self.owned_by_variant[variant] = _sat_add(self.get_owned(variant), 1)
        self.dirty = True

    def purchase(self, variant: Variant, cost: int) -> bool:
        """Debit *cost* and add one *variant* as a single step.

        Returns False and changes nothing if the balance is short.
        Callers go through ``logic.costs.purchase``, which computes the
        cost and checks prerequisites first.
        """
        if cost < 0 or self.currency < cost:
            return False
        self.currency -= cost
        self.increase_owned(variant)
        return True

    # ── Snapshot codec ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "owned_by_variant": {
                str(v): n for v, n in self.owned_by_variant.items()},
            "income_by_variant": {
                str(v): n for v, n in self.income_by_variant.items()},
        }

    @classmethod
    def from_dict(cls, data: Any,
                  backend: SaveBackend | None = None,
                  catalog: VariantCatalog = CATALOG) -> "Ledger":
        """Build a ledger from a decoded snapshot.  Raises SnapshotError.

        Owned counts past what the cost curve lets anyone buy are
        rejected; every owned unit becomes an entity on startup.
        """
        if not isinstance(data, dict):
            raise SnapshotError("snapshot is not an object")
        ledger = cls(backend)
        ledger.currency = _quantity(data.get("currency", 0), "currency")
        ledger.owned_by_variant = _variant_map(
            data.get("owned_by_variant", {}), "owned_by_variant")
        for variant, owned in ledger.owned_by_variant.items():
            limit = catalog[variant].owned_limit()
            if owned > limit:
                raise SnapshotError(
                    f"owned_by_variant.{variant} = {owned} exceeds {limit}")
        income = _variant_map(
            data.get("income_by_variant", {}), "income_by_variant")
        income.setdefault(Variant.PORTAL, 0)
        ledger.income_by_variant = income
        return ledger

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ledger):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        owned = sum(self.owned_by_variant.values())
        return f"Ledger(currency={self.currency}, owned={owned})"

    # ── Persistence ──────────────────────────────────────────────────

    @classmethod
    def restore(cls, backend: SaveBackend,
                catalog: VariantCatalog = CATALOG) -> "Ledger":
        """Load the ledger from *backend*, or a fresh one if that fails.

        Never raises: a missing, unreadable or malformed snapshot is
        logged and replaced by default state.
        """
        try:
            text = backend.read()
        except SaveError as ex:
            print(f"[SAVE] {ex} — starting fresh")
            return cls(backend)
        if text is None:
            print(f"[SAVE] No save at {backend.describe()} — starting fresh")
            return cls(backend)
        # SnapshotError, JSONDecodeError and over-long integer literals are
        # all ValueErrors; deeply nested arrays hit the recursion limit
        try:
            ledger = cls.from_dict(json.loads(text), backend, catalog)
        except (ValueError, RecursionError) as ex:
            print(f"[SAVE] Corrupt save at {backend.describe()} ({ex}) — starting fresh")
            return cls(backend)
        print(f"[SAVE] Restored {ledger!r} from {backend.describe()}")
        return ledger

    def save(self) -> bool:
        """Write the full snapshot.  Returns False (and logs) on failure."""
        text = json.dumps(self.to_dict(), indent=2, sort_keys=True)
        try:
            self.backend.write(text)
        except SaveError as ex:
            print(f"[SAVE] Error writing save: {ex}")
            return False
        self.dirty = False
        return True

    def flush(self) -> bool:
        """Save if anything changed since the last successful save."""
        if not self.dirty:
            return False
        return self.save()


def _quantity(value: Any, label: str) -> int:
    # bool is an int subclass; a snapshot with true/false is malformed
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotError(f"{label} is not an integer: {value!r}")
    if value < 0 or value > U64_MAX:
        raise SnapshotError(f"{label} out of range: {value}")
    return value


def _variant_map(raw: Any, label: str) -> dict[Variant, int]:
    if not isinstance(raw, dict):
        raise SnapshotError(f"{label} is not an object")
    result: dict[Variant, int] = {}
    for name, value in raw.items():
        try:
            variant = Variant.from_name(name)
        except KeyError:
            raise SnapshotError(f"{label} has unknown variant {name!r}") from None
        result[variant] = _quantity(value, f"{label}.{name}")
    return result
