"""components — ECS component dataclasses, organised by domain.

Submodules
----------
automaton      Automaton (one per owned production unit)
spatial        Transform
resources      InterfaceState, PortalState

All public names are re-exported here so code can do
``from components import Automaton``.
"""

from components.automaton import Automaton
from components.spatial import Transform
from components.resources import InterfaceState, PortalState

__all__ = [
    "Automaton",
    "Transform",
    "InterfaceState", "PortalState",
]
