# layout_engine/parser.py
"""
LAYOUT PARSER: Request + Graph Context -> StructuredLayout
==========================================================

PURPOSE:
--------
Validate a LayoutRequest against the current graph and expand it into a
StructuredLayout the compiler can execute.

RESPONSIBILITIES:
-----------------
1. Check that requested node types exist (hard error)
2. Check that named relationships exist (soft warning, kept verbatim)
3. Build the strategy-specific structure (hierarchy, rings, axes, ...)
4. Quantify qualitative force descriptions
5. Derive spatial constraints

CONTRACT:
---------
`parse()` never raises. Any failure is logged and replaced with the
default force-directed layout, whose metadata is
`{'strategy': 'default', 'reason': 'parsing-failed'}`.

STRATEGY -> LAYOUT TYPE:
------------------------
    hierarchical-grouping  ->  hierarchical-force
    force-directed         ->  force-directed
    radial                 ->  radial
    temporal               ->  temporal
    semantic               ->  semantic
    (anything else)        ->  force-directed, with an UnknownStrategyWarning
"""

import logging
import re
import time
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .context import GraphContext
from .request import LayoutRequest, RoleSpec, Strategy
from .structured import (
    ForceSpec,
    GlobalForces,
    GroupSpec,
    HierarchyEntry,
    LayoutType,
    NodeForce,
    ProximityConstraint,
    RingSpec,
    SeparationConstraint,
    StructuredLayout,
    VerticalConstraint,
)


class ValidationError(ValueError):
    """Raised when a request references a node type the graph does not have."""
    pass


class UnknownRelationshipWarning(UserWarning):
    """A request names a relationship type the graph does not have."""
    pass


class UnknownStrategyWarning(UserWarning):
    """A request uses a strategy tag the parser does not know."""
    pass


def extract_relationship(description: str, patterns: Optional[List[str]] = None) -> str:
    """
    Pull a relationship name out of a free-text grouping description.

    Patterns are tried in order; the first capture wins. If nothing
    matches, the description is returned unchanged.

    Examples:
    ---------
    >>> extract_relationship("WorksAt relationship to Company")
    'WorksAt'
    >>> extract_relationship("via WorksOn")
    'WorksOn'
    >>> extract_relationship("Knows")
    'Knows'
    """
    if patterns is None:
        patterns = DEFAULT_CONFIG.relationship_patterns
    for pattern in patterns:
        match = re.search(pattern, description, re.IGNORECASE)
        if match:
            return match.group(1)
    return description


def _describe(value: Union[str, Mapping[str, str]]) -> str:
    # {"repulsion": "strong"} -> "strong repulsion"
    if isinstance(value, Mapping):
        return ' '.join(f"{v} {k}" for k, v in value.items())
    return str(value)


def parse_force_value(
    description: Union[str, Mapping[str, str]],
    config: EngineConfig = DEFAULT_CONFIG,
) -> ForceSpec:
    """
    Convert a qualitative force description into numbers.

    Strength level (first of strong / medium / weak found) fixes
    (strength, distance). A "repulsion" is turned into a negative charge
    scaled by `config.repulsion_charge_scale`; an "attraction" keeps the
    spring strength. Anything unrecognized is a medium spring.

    Examples:
    ---------
    >>> parse_force_value("strong attraction")
    ForceSpec(strength=0.8, distance=2.0, kind='attraction')
    >>> parse_force_value("weak repulsion")
    ForceSpec(strength=-100.0, distance=5.0, kind='repulsion')
    """
    text = _describe(description).lower()

    strength, distance = config.force_levels[config.default_force_level]
    for level, (level_strength, level_distance) in config.force_levels.items():
        if level in text:
            strength, distance = level_strength, level_distance
            break

    kind = 'spring'
    if 'repulsion' in text:
        kind = 'repulsion'
        strength = -abs(strength) * config.repulsion_charge_scale
    elif 'attraction' in text:
        kind = 'attraction'

    return ForceSpec(strength=strength, distance=distance, kind=kind)


class LayoutParser:
    """
    Turns layout requests into validated StructuredLayouts.

    Parameters:
    -----------
    config : EngineConfig
        Numeric defaults and heuristic tables
    logger : Optional[logging.Logger]
        Where to report progress and soft warnings (module logger if None)
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    # =========================================================================
    # Entry point
    # =========================================================================

    def parse(self, request: Union[LayoutRequest, Dict[str, Any]], context: GraphContext) -> StructuredLayout:
        """
        Parse a layout request into a StructuredLayout.

        Parameters:
        -----------
        request : LayoutRequest or dict
            The structured request (dicts are validated first)
        context : GraphContext
            Types and properties of the current graph

        Returns:
        --------
        StructuredLayout
            Never raises; returns `default_layout()` on any failure.
        """
        try:
            if not isinstance(request, LayoutRequest):
                request = LayoutRequest.model_validate(request)
            self.logger.info("Parsing layout request: %s", request.strategy)

            warnings: List[Warning] = []
            self.validate(request, context, warnings)

            try:
                strategy = Strategy(request.strategy)
            except ValueError:
                warning = UnknownStrategyWarning(
                    f"Unknown strategy '{request.strategy}', falling back to force-directed"
                )
                self.logger.warning(str(warning))
                warnings.append(warning)
                strategy = Strategy.FORCE_DIRECTED

            if strategy is Strategy.HIERARCHICAL_GROUPING:
                layout = self.parse_hierarchical_grouping(request, context)
            elif strategy is Strategy.FORCE_DIRECTED:
                layout = self.parse_force_directed(request, context)
            elif strategy is Strategy.RADIAL:
                layout = self.parse_radial(request, context)
            elif strategy is Strategy.TEMPORAL:
                layout = self.parse_temporal(request, context)
            elif strategy is Strategy.SEMANTIC:
                layout = self.parse_semantic(request, context)
            else:
                raise ValidationError(f"Unhandled strategy: {strategy}")

            layout.constraints = self.parse_constraints(request)
            layout.warnings = warnings
            layout.metadata = {
                'original_prompt': request.original_prompt,
                'strategy': request.strategy,
                'timestamp': time.time(),
            }
            self.logger.info(
                "Parsing complete: %s (%d constraints, %d warnings)",
                layout.type.value, len(layout.constraints), len(warnings),
            )
            return layout

        except Exception as err:
            self.logger.error("Parsing failed, using default layout: %s", err, exc_info=True)
            return self.default_layout()

    def validate(self, request: LayoutRequest, context: GraphContext, warnings: List[Warning]) -> None:
        """
        Check the request against the graph.

        Unknown node types raise ValidationError. Unknown relationships
        append an UnknownRelationshipWarning and parsing continues.
        """
        for slot_name in ('primary', 'secondary', 'tertiary'):
            slot: Optional[RoleSpec] = getattr(request, slot_name)
            if slot is not None and slot.node_type and slot.node_type not in context.node_types:
                raise ValidationError(f"Node type '{slot.node_type}' not found in graph ({slot_name})")

        relationships = []
        if request.secondary is not None and request.secondary.group_by:
            relationships.append(self.extract_relationship(request.secondary.group_by))
        for key in request.layout.modifications:
            if ' via ' in key:
                relationships.append(key.split(' via ', 1)[1].strip())

        for relationship in relationships:
            if relationship not in context.relationship_types:
                warning = UnknownRelationshipWarning(
                    f"Relationship '{relationship}' not found in graph, keeping it as given"
                )
                self.logger.warning(str(warning))
                warnings.append(warning)

    # =========================================================================
    # Strategy parsers
    # =========================================================================

    def parse_hierarchical_grouping(self, request: LayoutRequest, context: GraphContext) -> StructuredLayout:
        """
        Example: "Show companies with their employees grouped around them"
        """
        layout = StructuredLayout(type=LayoutType.HIERARCHICAL_FORCE)

        if request.primary is not None:
            layout.hierarchy.append(HierarchyEntry(type=request.primary.node_type, level=0, role='parent'))
        if request.secondary is not None:
            layout.hierarchy.append(HierarchyEntry(
                type=request.secondary.node_type, level=1, role='child',
                group_by=request.secondary.group_by,
            ))
        if request.tertiary is not None:
            layout.hierarchy.append(HierarchyEntry(
                type=request.tertiary.node_type, level=2,
                role=request.tertiary.role or 'related',
            ))

        if request.secondary is not None and request.secondary.group_by:
            if request.primary is None or not request.primary.node_type:
                raise ValidationError("groupBy needs a primary node type to group around")
            layout.groups.append(GroupSpec(
                parent=request.primary.node_type,
                children=request.secondary.node_type,
                relationship=self.extract_relationship(request.secondary.group_by),
                arrangement='circular',
                radius=self.config.group_radius,
            ))

        layout.forces = self.parse_force_modifications(request.layout.modifications)
        return layout

    def parse_force_directed(self, request: LayoutRequest, context: GraphContext) -> StructuredLayout:
        cfg = self.config
        layout = StructuredLayout(
            type=LayoutType.FORCE_DIRECTED,
            global_forces=GlobalForces(charge=cfg.default_charge, gravity=cfg.gravity, damping=cfg.damping),
        )

        if request.primary is not None and request.primary.node_type:
            high = request.primary.spatial_priority == 'high'
            layout.node_forces[request.primary.node_type] = NodeForce(
                charge=cfg.high_priority_charge if high else cfg.normal_priority_charge,
                mass=cfg.priority_node_mass,
            )

        # Only pair keys ("A-B") become edge forces
        layout.forces = {
            key: force
            for key, force in self.parse_force_modifications(request.layout.modifications).items()
            if '-' in key
        }
        return layout

    def parse_radial(self, request: LayoutRequest, context: GraphContext) -> StructuredLayout:
        return StructuredLayout(
            type=LayoutType.RADIAL,
            center=request.primary.node_type if request.primary is not None else 'auto',
            rings=self.parse_rings(request),
            radial_weight=self.config.radial_weight,
            tangential_weight=self.config.tangential_weight,
        )

    def parse_temporal(self, request: LayoutRequest, context: GraphContext) -> StructuredLayout:
        axes = request.layout.group_by_axis
        return StructuredLayout(
            type=LayoutType.TEMPORAL,
            time_axis=request.layout.time_axis or self.config.default_time_axis,
            time_property=self.find_time_property(context),
            grouping={'x': axes.get('x', 'type'), 'y': axes.get('y', 'hierarchy')},
        )

    def parse_semantic(self, request: LayoutRequest, context: GraphContext) -> StructuredLayout:
        if request.layout.attributes:
            attributes = list(request.layout.attributes)
        else:
            attributes = list(context.properties)
        return StructuredLayout(
            type=LayoutType.SEMANTIC,
            attributes=attributes,
            algorithm=request.layout.algorithm or self.config.semantic_algorithm,
            dimensions=self.config.semantic_dimensions,
        )

    # =========================================================================
    # Shared helpers
    # =========================================================================

    def extract_relationship(self, description: str) -> str:
        return extract_relationship(description, self.config.relationship_patterns)

    def parse_force_value(self, description: Union[str, Mapping[str, str]]) -> ForceSpec:
        return parse_force_value(description, self.config)

    def parse_force_modifications(self, modifications: Mapping[str, Any]) -> Dict[str, ForceSpec]:
        return {key: self.parse_force_value(value) for key, value in modifications.items()}

    def parse_constraints(self, request: LayoutRequest) -> list:
        cfg = self.config
        constraints = []

        if request.primary is not None and request.secondary is not None:
            constraints.append(VerticalConstraint(
                higher=request.primary.node_type,
                lower=request.secondary.node_type,
                min_distance=cfg.vertical_min_distance,
            ))

        if request.tertiary is not None and request.tertiary.near_to:
            constraints.append(ProximityConstraint(
                node_type=request.tertiary.node_type,
                near_to=request.tertiary.near_to,
                max_distance=cfg.proximity_max_distance,
            ))

        spacing = request.visual.spacing if request.visual is not None else None
        if spacing and 'well separated' in spacing:
            constraints.append(SeparationConstraint(
                node_type=request.primary.node_type if request.primary is not None else None,
                min_distance=cfg.separation_min_distance,
            ))

        return constraints

    def parse_rings(self, request: LayoutRequest) -> List[RingSpec]:
        radii = self.config.ring_radii
        rings = []
        if request.primary is not None:
            rings.append(RingSpec(node_type=request.primary.node_type, radius=radii[0], angle='fixed'))
        if request.secondary is not None:
            rings.append(RingSpec(node_type=request.secondary.node_type, radius=radii[1], angle='distribute'))
        if request.tertiary is not None:
            rings.append(RingSpec(node_type=request.tertiary.node_type, radius=radii[2], angle='distribute'))
        return rings

    def find_time_property(self, context: GraphContext) -> str:
        """First graph property (in discovery order) that looks like a timestamp."""
        preferred = set(self.config.time_properties)
        for name in context.property_names():
            if name in preferred:
                return name
        return self.config.default_time_property

    def default_layout(self) -> StructuredLayout:
        """Safe centered force-directed layout used when parsing fails."""
        cfg = self.config
        self.logger.info("Using default force-directed layout")
        return StructuredLayout(
            type=LayoutType.FORCE_DIRECTED,
            global_forces=GlobalForces(charge=cfg.fallback_charge, gravity=cfg.gravity, damping=cfg.damping),
            forces={'default': ForceSpec(strength=cfg.edge_strength, distance=cfg.edge_distance)},
            metadata={'strategy': 'default', 'reason': 'parsing-failed'},
        )
