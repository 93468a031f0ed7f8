# layout_engine/config.py
"""
Engine configuration and empirically chosen constants.

These numbers were tuned by eye against real company/person/project graphs.
Keep them as named fields rather than re-deriving them.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class EngineConfig:
    """Configuration shared by the parser, compiler and executor."""

    # Qualitative -> quantitative force mapping: level -> (strength, distance)
    force_levels: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        'strong': (0.8, 2.0),
        'medium': (0.5, 3.0),
        'weak': (0.2, 5.0),
    })
    default_force_level: str = 'medium'
    repulsion_charge_scale: float = 500.0

    # Relationship extraction, tried in order (case-insensitive)
    relationship_patterns: List[str] = field(default_factory=lambda: [
        r'(\w+) relationship',
        r'via (\w+)',
        r'through (\w+)',
        r'^(\w+)$',
    ])

    # Temporal property discovery, in order of preference
    time_properties: List[str] = field(default_factory=lambda: [
        'createdAt', 'created', 'date', 'timestamp',
        'joinedAt', 'since', 'startDate', 'founded',
    ])
    default_time_property: str = 'createdAt'
    default_time_axis: str = 'z'

    # Force-directed globals
    default_charge: float = -100.0
    fallback_charge: float = -200.0
    high_priority_charge: float = -500.0
    normal_priority_charge: float = -200.0
    priority_node_mass: float = 2.0
    gravity: float = 0.1
    damping: float = 0.9
    edge_strength: float = 0.5
    edge_distance: float = 3.0

    # Hierarchical grouping
    group_radius: float = 3.0
    parent_repulsion: float = -500.0
    parent_repulsion_cutoff: float = 10.0
    parent_child_strength: float = 0.8
    circular_pull: float = 0.5

    # Global repulsion
    repulsion_cutoff: float = 100.0
    theta: float = 0.8

    # Radial rings
    ring_radii: Tuple[float, float, float] = (0.0, 3.0, 6.0)
    radial_weight: float = 0.8
    tangential_weight: float = 0.3

    # Constraints
    vertical_min_distance: float = 2.0
    proximity_max_distance: float = 5.0
    separation_min_distance: float = 10.0

    # Temporal placement
    time_span: float = 20.0
    lane_spacing: float = 4.0
    level_spacing: float = 3.0
    axis_pull: float = 0.5

    # Semantic placement
    semantic_dimensions: int = 3
    semantic_algorithm: str = 'pca'
    semantic_scale: float = 10.0
    semantic_pull: float = 0.5

    # Simulation defaults
    iterations: int = 500
    tolerance: float = 0.001
    time_step: float = 0.016

    # Executor
    moved_threshold: float = 0.1
    log_every: int = 50

    log_level: str = 'INFO'
    log_format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


DEFAULT_CONFIG = EngineConfig()
