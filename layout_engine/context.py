# layout_engine/context.py
"""
Graph context: what types, relationships and properties exist right now.

The parser validates layout requests against this. It is normally derived
from the current snapshot with `analyze_graph()`, but any caller that
already knows the schema can build one directly.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set

from .model import GraphSnapshot


@dataclass
class GraphContext:
    """
    Read-only schema summary of a graph snapshot.

    Attributes:
    -----------
    node_types : Set[str]
        Node type tags present in the graph
    relationship_types : Set[str]
        Edge type tags present in the graph
    properties : List[str]
        Property names qualified as "Type.property"
    node_count, edge_count : int
        Snapshot size
    statistics : Dict[str, Any]
        avg_degree, node_type_distribution, relationship_distribution
    """
    node_types: Set[str] = field(default_factory=set)
    relationship_types: Set[str] = field(default_factory=set)
    properties: List[str] = field(default_factory=list)
    node_count: int = 0
    edge_count: int = 0
    statistics: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_types(
        cls,
        node_types: Iterable[str],
        relationship_types: Iterable[str] = (),
        properties: Iterable[str] = (),
    ) -> "GraphContext":
        return cls(
            node_types=set(node_types),
            relationship_types=set(relationship_types),
            properties=list(properties),
        )

    def property_names(self) -> List[str]:
        """Unqualified property names, in the order they were discovered."""
        return [prop.split('.', 1)[1] if '.' in prop else prop for prop in self.properties]


def _distribution(tags: Iterable[str]) -> Dict[str, int]:
    return dict(Counter(tag or 'unknown' for tag in tags))


def analyze_graph(snapshot: GraphSnapshot) -> GraphContext:
    """
    Build a GraphContext from a snapshot.

    Parameters:
    -----------
    snapshot : GraphSnapshot
        Nodes and edges of the current graph

    Returns:
    --------
    GraphContext
        Types, "Type.property" names (first-seen order, no duplicates)
        and basic statistics.
    """
    context = GraphContext(node_count=len(snapshot.nodes), edge_count=len(snapshot.edges))

    seen_properties = set()
    for node in snapshot.nodes:
        context.node_types.add(node.type)
        for prop in node.properties:
            qualified = f"{node.type}.{prop}"
            if qualified not in seen_properties:
                seen_properties.add(qualified)
                context.properties.append(qualified)

    for edge in snapshot.edges:
        context.relationship_types.add(edge.type)

    n_nodes = len(snapshot.nodes)
    context.statistics = {
        'avg_degree': (2 * len(snapshot.edges) / n_nodes) if n_nodes else 0.0,
        'node_type_distribution': _distribution(n.type for n in snapshot.nodes),
        'relationship_distribution': _distribution(e.type for e in snapshot.edges),
    }
    return context
