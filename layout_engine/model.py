# layout_engine/model.py
"""
GRAPH SNAPSHOT MODEL: GraphNode, GraphEdge, GraphSnapshot
=========================================================

PURPOSE:
--------
The layout engine borrows a snapshot of the property graph for one
compile + update session. This module defines that snapshot:

- GraphNode: identity, a type tag, a mutable 3D position and free-form
  properties. Mass is implicitly 1.0.
- GraphEdge: a directed, typed connection (source -> target).
- GraphSnapshot: the node list and edge list handed to the compiler.

OWNERSHIP:
----------
Positions are the ONLY thing the engine writes. `ExecutableLayout.update()`
mutates `GraphNode.position` in place; everything else is read-only.

Nodes are identified by id (any hashable: int or str). Two GraphNode
objects with the same id are the same graph node as far as the engine is
concerned.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional

import numpy as np


@dataclass(eq=False)
class GraphNode:
    """
    A node in the visualized graph.

    Parameters:
    -----------
    id : Hashable
        Stable identifier (edges refer to nodes by this value)

    type : str
        Node type tag, e.g. 'Company', 'Person'

    position : array-like, shape (3,)
        Current (x, y, z) position. Stored as a float ndarray and
        mutated in place by the update function.

    properties : Dict[str, Any]
        Property values (used by temporal and semantic layouts)

    Examples:
    ---------
    >>> n = GraphNode(1, 'Company', (0.0, 2.0, 0.0))
    >>> n.position
    array([0., 2., 0.])
    """
    id: Hashable
    type: str
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    properties: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        position = np.array(self.position, dtype=float).reshape(-1)
        if position.shape != (3,):
            raise ValueError(
                f"Node {self.id!r} position must have 3 components, got {position.shape[0]}"
            )
        self.position = position

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphNode":
        """Build a node from a `{id, type, position?, properties?}` mapping."""
        position = data.get('position')
        if isinstance(position, dict):
            position = (position.get('x', 0.0), position.get('y', 0.0), position.get('z', 0.0))
        return cls(
            id=data['id'],
            type=data['type'],
            position=np.zeros(3) if position is None else position,
            properties=dict(data.get('properties') or {}),
        )


@dataclass(frozen=True)
class GraphEdge:
    """
    A directed, typed edge between two nodes.

    Parameters:
    -----------
    source : Hashable
        Id of the start node ("from")
    target : Hashable
        Id of the end node ("to")
    type : str
        Relationship type tag, e.g. 'WorksAt'
    attrs : Optional[Dict[str, Any]]
        Optional edge attributes (never read by the engine)

    Notes:
    ------
    An edge whose endpoints are not both in the snapshot is ignored by
    the compiler's edge index. It is not an error.
    """
    source: Hashable
    target: Hashable
    type: str
    attrs: Optional[Dict[str, Any]] = field(default=None, compare=False, hash=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphEdge":
        """Build an edge from a `{from, to, type, attrs?}` mapping."""
        return cls(
            source=data['from'] if 'from' in data else data['source'],
            target=data['to'] if 'to' in data else data['target'],
            type=data['type'],
            attrs=data.get('attrs'),
        )


@dataclass
class GraphSnapshot:
    """The node and edge collections handed to the compiler."""
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphSnapshot":
        return cls(
            nodes=[GraphNode.from_dict(n) for n in data.get('nodes', [])],
            edges=[GraphEdge.from_dict(e) for e in data.get('edges', [])],
        )
