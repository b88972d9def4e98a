"""logic/feedback.py — Pooled "orb" tokens that fly from a unit to the portal.

Usage:
    pool = FeedbackPool()
    world.set_res(pool)

    # When a unit produces:
    handle = pool.claim(transform.position)   # None if every orb is busy

    # Once per frame (tick_systems does this):
    pool.update(dt)

The pool never grows.  A token is free again once it is back at the
origin and its travel time has elapsed; ``claim`` takes the first free
one.  Missing a visual is fine — production never depends on it.
"""

from __future__ import annotations

from pygame.math import Vector3

from core.tuning import get as _tun

ORIGIN = Vector3(0.0, 0.0, 0.0)


class FeedbackToken:
    __slots__ = ("start", "position", "progress", "active")

    def __init__(self, travel_duration: float):
        self.start = Vector3(ORIGIN)
        self.position = Vector3(ORIGIN)
        # Starts "arrived" so a fresh token is immediately claimable
        self.progress = travel_duration
        self.active = False

    def __repr__(self) -> str:
        return (f"FeedbackToken(pos={tuple(self.position)}, "
                f"progress={self.progress:.2f}, active={self.active})")


class FeedbackPool:
    """Fixed set of reusable tokens.  Stored as a world resource."""

    def __init__(self, capacity: int | None = None,
                 travel_duration: float | None = None,
                 rest_epsilon: float | None = None):
        if capacity is None:
            capacity = int(_tun("feedback", "capacity", 50))
        if travel_duration is None:
            travel_duration = float(_tun("feedback", "travel_duration", 0.5))
        if rest_epsilon is None:
            rest_epsilon = float(_tun("feedback", "rest_epsilon", 0.1))
        self.travel_duration = travel_duration
        self.rest_epsilon = rest_epsilon
        self._tokens = [FeedbackToken(travel_duration) for _ in range(capacity)]

    @property
    def capacity(self) -> int:
        return len(self._tokens)

    @property
    def tokens(self) -> list[FeedbackToken]:
        return self._tokens

    def token(self, handle: int) -> FeedbackToken:
        return self._tokens[handle]

    def _at_rest(self, tok: FeedbackToken) -> bool:
        return (not tok.active
                and tok.position.distance_to(ORIGIN) < self.rest_epsilon
                and tok.progress >= self.travel_duration)

    def available_count(self) -> int:
        return sum(1 for t in self._tokens if self._at_rest(t))

    def active_tokens(self) -> list[FeedbackToken]:
        return [t for t in self._tokens if t.active]

    # ── claim / tick ─────────────────────────────────────────────────

    def claim(self, at: Vector3) -> int | None:
        """Send the first free token out from *at*.  Returns its handle."""
        for i, tok in enumerate(self._tokens):
            if self._at_rest(tok):
                tok.start = Vector3(at)
                tok.position = Vector3(at)
                tok.progress = 0.0
                tok.active = True
                return i
        return None

    def update(self, dt: float):
        for tok in self._tokens:
            if not tok.active:
                continue
            tok.progress += dt
            if tok.progress >= self.travel_duration:
                tok.position = Vector3(ORIGIN)
                tok.active = False
                continue
            t = tok.progress / self.travel_duration
            tok.position = tok.start.lerp(ORIGIN, t)
