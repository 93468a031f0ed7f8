# layout_engine/kernel/index.py
"""
NODE AND EDGE INDICES: Dense Arena Addressing
=============================================

PURPOSE:
--------
Every per-frame computation works on an (n, 3) position array, not on node
objects. This module owns the mapping between the two:

    node id  ->  dense index i  ->  positions[i]

It plays the same role for the layout kernel that a DOF manager plays for
a stiffness assembly: once the mapping exists, force and constraint code
never has to know what a "node" is.

Both indices are built ONCE per compile, in O(n + m):

    NodeIndex.by_id     id -> dense index
    NodeIndex.by_type   type -> int array of dense indices (arena order)
    EdgeIndex.by_pair   (source id, target id) -> edges
    EdgeIndex.by_type   edge type -> edges

USAGE:
------
    nodes = NodeIndex.build(snapshot.nodes)
    edges = EdgeIndex.build(snapshot.edges, nodes)

    positions = nodes.gather()              # (n, 3) copy, arena order
    pairs = edges.index_pairs(edges.by_type['WorksAt'], nodes)   # (m, 2)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional, Set, Tuple

import numpy as np

from ..model import GraphEdge, GraphNode

logger = logging.getLogger(__name__)


@dataclass
class NodeIndex:
    """
    Dense arena over the snapshot's nodes.

    Attributes:
    -----------
    nodes : List[GraphNode]
        Nodes in arena order (snapshot order)
    by_id : Dict[Hashable, int]
        Node id -> dense index
    by_type : Dict[str, np.ndarray]
        Node type -> dense indices of nodes with that type

    Examples:
    ---------
    >>> idx = NodeIndex.build([GraphNode(1, 'Company'), GraphNode(2, 'Person')])
    >>> idx.by_id[2]
    1
    >>> idx.indices('Person')
    array([1])
    """
    nodes: List[GraphNode]
    by_id: Dict[Hashable, int]
    by_type: Dict[str, np.ndarray]

    @classmethod
    def build(cls, nodes: Iterable[GraphNode]) -> "NodeIndex":
        """
        Raises:
        -------
        ValueError
            If two nodes share an id
        """
        arena: List[GraphNode] = []
        by_id: Dict[Hashable, int] = {}
        type_lists: Dict[str, List[int]] = {}

        for node in nodes:
            if node.id in by_id:
                raise ValueError(f"Duplicate node id {node.id!r} in snapshot")
            i = len(arena)
            arena.append(node)
            by_id[node.id] = i
            type_lists.setdefault(node.type, []).append(i)

        by_type = {t: np.array(ix, dtype=int) for t, ix in type_lists.items()}
        return cls(nodes=arena, by_id=by_id, by_type=by_type)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: Hashable) -> bool:
        return node_id in self.by_id

    def indices(self, node_type: Optional[str]) -> np.ndarray:
        """Dense indices of `node_type` (all nodes if None, empty if unknown)."""
        if node_type is None:
            return np.arange(len(self.nodes), dtype=int)
        return self.by_type.get(node_type, np.zeros(0, dtype=int))

    def gather(self, nodes: Optional[Iterable[GraphNode]] = None) -> np.ndarray:
        """
        Copy positions into an (n, 3) array in arena order.

        Parameters:
        -----------
        nodes : Optional[Iterable[GraphNode]]
            Live node objects whose positions override the snapshot's.
            Nodes with ids outside the arena are ignored.
        """
        positions = np.array([node.position for node in self.nodes], dtype=float).reshape(-1, 3)
        if nodes is not None:
            for node in nodes:
                i = self.by_id.get(node.id)
                if i is not None:
                    positions[i] = node.position
        return positions


@dataclass
class EdgeIndex:
    """
    Edge lookups by ordered endpoint pair and by type.

    Only edges whose endpoints both exist in the NodeIndex are kept;
    the rest are counted in `dropped` and otherwise ignored.
    """
    edges: List[GraphEdge] = field(default_factory=list)
    by_pair: Dict[Tuple[Hashable, Hashable], List[GraphEdge]] = field(default_factory=dict)
    by_type: Dict[str, List[GraphEdge]] = field(default_factory=dict)
    neighbors: Dict[Hashable, Set[Hashable]] = field(default_factory=dict)
    dropped: int = 0

    @classmethod
    def build(cls, edges: Iterable[GraphEdge], node_index: NodeIndex) -> "EdgeIndex":
        index = cls()
        for edge in edges:
            if edge.source not in node_index or edge.target not in node_index:
                index.dropped += 1
                logger.debug("Ignoring edge %r -> %r: endpoint not in snapshot", edge.source, edge.target)
                continue
            index.edges.append(edge)
            index.by_pair.setdefault((edge.source, edge.target), []).append(edge)
            index.by_type.setdefault(edge.type, []).append(edge)
            index.neighbors.setdefault(edge.source, set()).add(edge.target)
            index.neighbors.setdefault(edge.target, set()).add(edge.source)
        return index

    def connected(self, a: Hashable, b: Hashable) -> bool:
        """True if an edge joins a and b in either direction."""
        return (a, b) in self.by_pair or (b, a) in self.by_pair

    def index_pairs(self, edges: Iterable[GraphEdge], node_index: NodeIndex) -> np.ndarray:
        """(m, 2) array of dense (source, target) indices for the given edges."""
        pairs = [(node_index.by_id[e.source], node_index.by_id[e.target]) for e in edges]
        return np.array(pairs, dtype=int).reshape(-1, 2)
