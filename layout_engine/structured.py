# layout_engine/structured.py
"""
STRUCTURED LAYOUT: The Validated Intermediate Description
=========================================================

PURPOSE:
--------
The parser turns a loosely-structured LayoutRequest into a StructuredLayout:
every referenced type has been checked against the graph context, every
qualitative force ("strong attraction") has been quantified, and every
constraint is an explicit descriptor.

The compiler consumes ONLY this structure. It never looks at the request.

LAYOUT TYPES:
-------------
    hierarchical-grouping  ->  'hierarchical-force'
    force-directed         ->  'force-directed'
    radial                 ->  'radial'
    temporal               ->  'temporal'
    semantic               ->  'semantic'

A StructuredLayout is published whole: the parser builds it completely
before returning it, and nothing mutates it afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LayoutType(str, Enum):
    HIERARCHICAL_FORCE = 'hierarchical-force'
    FORCE_DIRECTED = 'force-directed'
    RADIAL = 'radial'
    TEMPORAL = 'temporal'
    SEMANTIC = 'semantic'


@dataclass(frozen=True)
class ForceSpec:
    """
    A quantified pairwise force.

    kind : 'spring' | 'attraction' | 'repulsion'
        Springs and attractions use `strength` as a spring constant and
        `distance` as rest length. Repulsions carry a negative charge in
        `strength` (already scaled by the charge factor).
    """
    strength: float
    distance: float
    kind: str = 'spring'


@dataclass(frozen=True)
class HierarchyEntry:
    type: str
    level: int
    role: str  # 'parent' | 'child' | 'related' (or a request-supplied role)
    group_by: Optional[str] = None


@dataclass(frozen=True)
class GroupSpec:
    """Children of one type arranged around connected parents of another."""
    parent: str
    children: str
    relationship: str
    arrangement: str = 'circular'
    radius: float = 3.0


@dataclass(frozen=True)
class GlobalForces:
    charge: float
    gravity: float
    damping: float


@dataclass(frozen=True)
class NodeForce:
    """
    Per-type override for force-directed layouts. Only `charge` reaches
    the simulation; `mass` is recorded for callers and never divides.
    """
    charge: float
    mass: float = 1.0


@dataclass(frozen=True)
class RingSpec:
    node_type: str
    radius: float
    angle: str = 'distribute'  # 'fixed' | 'distribute'


# =============================================================================
# Constraint descriptors
# =============================================================================

@dataclass(frozen=True)
class VerticalConstraint:
    """Nodes of `higher` type sit at least `min_distance` above connected `lower` nodes."""
    higher: str
    lower: str
    min_distance: float = 2.0
    kind: str = field(default='vertical', init=False)


@dataclass(frozen=True)
class ProximityConstraint:
    """Nodes of `node_type` stay within `max_distance` of a connected `near_to` node."""
    node_type: str
    near_to: str
    max_distance: float = 5.0
    kind: str = field(default='proximity', init=False)


@dataclass(frozen=True)
class SeparationConstraint:
    """Nodes of `node_type` keep at least `min_distance` from each other."""
    node_type: Optional[str]
    min_distance: float = 10.0
    kind: str = field(default='separation', init=False)


@dataclass(frozen=True)
class ConstraintSpec:
    """Any other constraint descriptor. The compiler skips kinds it does not know."""
    kind: str
    params: Dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass
class StructuredLayout:
    """
    Validated, fully quantified layout description.

    Only the fields relevant to `type` are populated; the rest keep their
    empty defaults.

    Attributes:
    -----------
    type : LayoutType
    hierarchy : List[HierarchyEntry]
        Ordered role levels (hierarchical layouts)
    groups : List[GroupSpec]
        Parent/children grouping rules (hierarchical layouts)
    forces : Dict[str, ForceSpec]
        Pair key ("Person-Company", "Person-Company via WorksAt",
        "default") -> quantified force
    constraints : list
        Constraint descriptors
    metadata : Dict[str, Any]
        original_prompt, strategy, timestamp (or strategy/reason for the
        fallback layout)
    global_forces : Optional[GlobalForces]
        charge / gravity / damping (force-directed layouts)
    node_forces : Dict[str, NodeForce]
        Per-type charge overrides (force-directed layouts)
    center, rings, radial_weight, tangential_weight
        Radial layouts
    time_axis, time_property, grouping
        Temporal layouts
    attributes, algorithm, dimensions
        Semantic layouts
    warnings : List[Warning]
        Soft problems found while parsing (unknown relationships/strategies)
    """
    type: LayoutType
    hierarchy: List[HierarchyEntry] = field(default_factory=list)
    groups: List[GroupSpec] = field(default_factory=list)
    forces: Dict[str, ForceSpec] = field(default_factory=dict)
    constraints: List[Any] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    global_forces: Optional[GlobalForces] = None
    node_forces: Dict[str, NodeForce] = field(default_factory=dict)

    center: Optional[str] = None
    rings: List[RingSpec] = field(default_factory=list)
    radial_weight: Optional[float] = None
    tangential_weight: Optional[float] = None

    time_axis: Optional[str] = None
    time_property: Optional[str] = None
    grouping: Dict[str, str] = field(default_factory=dict)

    attributes: List[str] = field(default_factory=list)
    algorithm: Optional[str] = None
    dimensions: int = 3

    warnings: List[Warning] = field(default_factory=list)
