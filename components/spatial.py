"""components.spatial — Placement of automatons in the world.

Positions are in world units on the ground plane: ``x`` and ``z`` vary,
``y`` stays 0.  The portal sits at the origin.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from pygame.math import Vector3


@dataclass
class Transform:
    position: Vector3 = field(default_factory=lambda: Vector3(0.0, 0.0, 0.0))
    facing: float = 0.0    # rad, yaw about +y; points at the ring centre
    scale: float = 1.0
