# layout_engine/compiler.py
"""
LAYOUT COMPILER: StructuredLayout + Snapshot -> ExecutableLayout
================================================================

PURPOSE:
--------
Resolve a StructuredLayout against the concrete nodes and edges of one
graph snapshot, producing a runnable simulation:

    ExecutableLayout
        forces       tuple of ForceEntry(name, kind, params)
        constraints  tuple of ConstraintEntry(name, kind, params)
        node_index   id <-> dense index, by type
        edge_index   by (source, target), by type
        config       SimulationConfig(iterations, tolerance, damping, time_step)
        state        SimulationState(iteration, total_energy, converged)

Type names, relationship names and pair keys are all resolved HERE, once.
After compile, every force and constraint is just arrays of dense indices
and a few floats. `update()` never looks anything up by name.

FORCE SETS PER LAYOUT TYPE:
---------------------------
hierarchical-force
    parent-repulsion              (only with more than one parent node)
    <Parent>-<Children>-attraction  springs child <-> parent per group
    circular-layout-<parent id>   children on a circle around each parent
    center-gravity

force-directed
    charge                        global repulsion (per-type overrides)
    <EdgeType>-springs            one per edge type
    gravity

radial
    ring-<Type>                   one per ring
    charge, gravity

temporal
    time-axis, lane-<axis>, level-<axis>   axis-masked position targets
    charge, edge-springs

semantic
    semantic-position             PCA placement targets
    charge

ERRORS:
-------
The compiler does not fall back to a default layout. Unsupported layout
types, empty snapshots and duplicate node ids raise CompilationError;
anything unexpected is wrapped in CompilationError with the cause chained.
Unknown constraint kinds are logged and skipped.
"""

import logging
from collections import deque
from dataclasses import asdict, dataclass, field, is_dataclass, replace
from numbers import Real
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG, EngineConfig
from .kernel import constraints as kconstraints
from .kernel import forces as kforces
from .kernel.constraints import ConstraintKind, ProximityParams, SeparationParams, VerticalParams
from .kernel.forces import (
    CircularParams,
    ForceKind,
    GravityParams,
    RepulsionParams,
    RingParams,
    SpringParams,
    TargetParams,
)
from .kernel.index import EdgeIndex, NodeIndex
from .kernel.integrate import SimulationConfig, SimulationState, euler_step
from .model import GraphEdge, GraphNode, GraphSnapshot
from .structured import ConstraintSpec, ForceSpec, GlobalForces, LayoutType, StructuredLayout


class CompilationError(RuntimeError):
    """Raised when a StructuredLayout cannot be turned into an ExecutableLayout."""
    pass


AXES = {'x': 0, 'y': 1, 'z': 2}
ORIGIN = np.zeros(3)


# =============================================================================
# Compiled entries
# =============================================================================

@dataclass(frozen=True, eq=False)
class ForceEntry:
    """A named force: kind + params, evaluated by the kernel dispatcher."""
    name: str
    kind: ForceKind
    params: Any

    def apply(self, positions: np.ndarray) -> np.ndarray:
        return kforces.evaluate(self.kind, self.params, positions)


@dataclass(frozen=True, eq=False)
class ConstraintEntry:
    """A named constraint: kind + params, evaluated by the kernel dispatcher."""
    name: str
    kind: ConstraintKind
    params: Any

    def apply(self, positions: np.ndarray) -> np.ndarray:
        return kconstraints.evaluate(self.kind, self.params, positions)


@dataclass(eq=False)
class ExecutableLayout:
    """
    A compiled, runnable layout simulation.

    The force and constraint tuples are fixed at compile time. A new
    layout request produces a new ExecutableLayout; it never edits an
    existing one. Only `state` (and the node positions passed to
    `update`) change afterwards.

    Attributes:
    -----------
    type : LayoutType
    forces : Tuple[ForceEntry, ...]
    constraints : Tuple[ConstraintEntry, ...]
    node_index : NodeIndex
    edge_index : EdgeIndex
    config : SimulationConfig
    metadata : Dict[str, Any]
        Carried over from the StructuredLayout
    state : SimulationState
    """
    type: LayoutType
    forces: Tuple[ForceEntry, ...]
    constraints: Tuple[ConstraintEntry, ...]
    node_index: NodeIndex
    edge_index: EdgeIndex
    config: SimulationConfig
    metadata: Dict[str, Any] = field(default_factory=dict)
    state: SimulationState = field(default_factory=SimulationState)

    @property
    def force_names(self) -> List[str]:
        return [entry.name for entry in self.forces]

    def force(self, name: str) -> Optional[ForceEntry]:
        """Look up a force entry by name (None if absent)."""
        for entry in self.forces:
            if entry.name == name:
                return entry
        return None

    def accelerations(self, positions: np.ndarray) -> np.ndarray:
        """Sum of all forces and constraint corrections (unit mass)."""
        total = np.zeros_like(positions)
        for entry in self.forces:
            total += entry.apply(positions)
        for entry in self.constraints:
            total += entry.apply(positions)
        return total

    def update(self, nodes: Optional[Iterable[GraphNode]] = None, delta_time: Optional[float] = None) -> SimulationState:
        """
        Advance the simulation by one frame.

        Positions are gathered in arena order (live `nodes` override the
        snapshot), every force and constraint is evaluated, and each given
        node is moved in place by one explicit Euler step.

        Parameters:
        -----------
        nodes : Optional[Iterable[GraphNode]]
            Nodes to move. Defaults to the snapshot's nodes. Nodes whose
            id is not in the compiled snapshot are left alone.
        delta_time : Optional[float]
            Frame time step. Defaults to `config.time_step`. Zero moves nothing.

        Returns:
        --------
        SimulationState
            A copy of the state after this frame
        """
        if nodes is None:
            nodes = self.node_index.nodes
        nodes = list(nodes)
        if delta_time is None:
            delta_time = self.config.time_step

        positions = self.node_index.gather(nodes)
        acc = self.accelerations(positions)

        rows = [self.node_index.by_id.get(node.id) for node in nodes]
        moved = [(node, i) for node, i in zip(nodes, rows) if i is not None]
        index = np.array([i for _, i in moved], dtype=int)
        velocity, energy = euler_step(acc[index], delta_time)

        for (node, _), v in zip(moved, velocity):
            node.position += v

        self.state.iteration += 1
        self.state.total_energy = energy
        self.state.converged = energy < self.config.tolerance
        return replace(self.state)

    def reset(self) -> None:
        self.state.reset()


# =============================================================================
# Helpers
# =============================================================================

def _time_value(value: Any) -> Optional[float]:
    """Numeric, ISO-8601 string, date or datetime -> seconds (None if unusable)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Real):
        value = float(value)
        return value if np.isfinite(value) else None
    try:
        stamp = pd.Timestamp(value)
    except (ValueError, TypeError):
        return None
    if pd.isna(stamp):
        return None
    return stamp.value / 1e9


def _descriptor_fields(descriptor: Any) -> Tuple[Optional[str], Dict[str, Any]]:
    if isinstance(descriptor, ConstraintSpec):
        return descriptor.kind, dict(descriptor.params)
    if is_dataclass(descriptor):
        fields = asdict(descriptor)
        return fields.pop('kind', None), fields
    if isinstance(descriptor, dict):
        fields = dict(descriptor)
        return fields.pop('kind', fields.pop('type', None)), fields
    return getattr(descriptor, 'kind', None), {}


def _feature_matrix(nodes: Sequence[GraphNode], attributes: Sequence[str]) -> np.ndarray:
    """
    Build a numeric feature matrix from node properties.

    Numeric columns are z-scored (missing -> 0), booleans become 0/1,
    anything else is one-hot encoded. Attributes may be qualified
    ("Person.age") or bare ("age").
    """
    names = list(dict.fromkeys(a.split('.', 1)[1] if '.' in a else a for a in attributes))
    frame = pd.DataFrame([{name: node.properties.get(name) for name in names} for node in nodes], columns=names)

    columns = []
    for name in names:
        col = frame[name]
        if col.isna().all():
            continue
        if pd.api.types.is_bool_dtype(col):
            columns.append(col.astype(float).rename(name))
        elif pd.api.types.is_numeric_dtype(col):
            std = col.std(ddof=0)
            if std > 0:
                columns.append(((col - col.mean()) / std).fillna(0.0).rename(name))
        else:
            dummies = pd.get_dummies(col.dropna().astype(str), prefix=name, dtype=float)
            columns.append(dummies.reindex(frame.index, fill_value=0.0))

    if not columns:
        return np.zeros((len(nodes), 0))
    return pd.concat(columns, axis=1).to_numpy(dtype=float)


def pca_project(features: np.ndarray, dimensions: int = 3) -> np.ndarray:
    """
    Project rows of `features` onto their top principal components.

    Returns an (n, dimensions) array, zero-padded when there are fewer
    informative components than requested.
    """
    n = features.shape[0]
    coords = np.zeros((n, dimensions))
    if n < 2 or features.shape[1] == 0:
        return coords

    centered = features - features.mean(axis=0)
    _, _, vt = np.linalg.svd(centered, full_matrices=False)
    k = min(dimensions, vt.shape[0])
    coords[:, :k] = centered @ vt[:k].T
    return coords


def _bfs_depth(node_index: NodeIndex, edge_index: EdgeIndex) -> np.ndarray:
    """Breadth-first depth from source nodes (no incoming edges). Unreached -> 0."""
    n = len(node_index)
    depth = np.full(n, -1, dtype=int)
    children: Dict[int, List[int]] = {}
    has_incoming = np.zeros(n, dtype=bool)
    for edge in edge_index.edges:
        s, t = node_index.by_id[edge.source], node_index.by_id[edge.target]
        children.setdefault(s, []).append(t)
        has_incoming[t] = True

    queue = deque(int(i) for i in np.flatnonzero(~has_incoming))
    for i in queue:
        depth[i] = 0
    while queue:
        i = queue.popleft()
        for j in children.get(i, ()):
            if depth[j] < 0:
                depth[j] = depth[i] + 1
                queue.append(j)

    depth[depth < 0] = 0
    return depth


# =============================================================================
# Compiler
# =============================================================================

class LayoutCompiler:
    """
    Compiles StructuredLayouts into ExecutableLayouts.

    Parameters:
    -----------
    config : EngineConfig
        Force constants and simulation defaults
    logger : Optional[logging.Logger]
        Where to report progress (module logger if None)
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def compile(self, layout: StructuredLayout, snapshot: GraphSnapshot) -> ExecutableLayout:
        """
        Compile a layout against a snapshot.

        Parameters:
        -----------
        layout : StructuredLayout
            Output of LayoutParser.parse
        snapshot : GraphSnapshot
            Nodes and edges to lay out. Positions are read at compile time
            only to build the index; `update` reads them again every frame.

        Returns:
        --------
        ExecutableLayout

        Raises:
        -------
        CompilationError
            Unsupported layout type, empty node set, duplicate node ids,
            or any internal failure (chained)
        """
        try:
            layout_type = LayoutType(layout.type)
        except ValueError as err:
            raise CompilationError(f"Unsupported layout type: {layout.type!r}") from err

        if not snapshot.nodes:
            raise CompilationError("Cannot compile a layout for an empty node set")

        self.logger.info(
            "Compiling %s layout for %d nodes, %d edges",
            layout_type.value, len(snapshot.nodes), len(snapshot.edges),
        )

        try:
            node_index = NodeIndex.build(snapshot.nodes)
        except ValueError as err:
            raise CompilationError(str(err)) from err

        try:
            edge_index = EdgeIndex.build(snapshot.edges, node_index)
            if edge_index.dropped:
                self.logger.debug("Dropped %d edges with missing endpoints", edge_index.dropped)

            if layout_type is LayoutType.HIERARCHICAL_FORCE:
                forces = self.compile_hierarchical(layout, node_index, edge_index)
            elif layout_type is LayoutType.FORCE_DIRECTED:
                forces = self.compile_force_directed(layout, node_index, edge_index)
            elif layout_type is LayoutType.RADIAL:
                forces = self.compile_radial(layout, node_index, edge_index)
            elif layout_type is LayoutType.TEMPORAL:
                forces = self.compile_temporal(layout, node_index, edge_index)
            elif layout_type is LayoutType.SEMANTIC:
                forces = self.compile_semantic(layout, node_index, edge_index)
            else:
                raise CompilationError(f"Unsupported layout type: {layout_type.value}")

            constraints = self.compile_constraints(layout.constraints, node_index, edge_index)
        except CompilationError:
            raise
        except Exception as err:
            raise CompilationError(f"Failed to compile {layout_type.value} layout: {err}") from err

        cfg = self.config
        damping = layout.global_forces.damping if layout.global_forces is not None else cfg.damping
        executable = ExecutableLayout(
            type=layout_type,
            forces=tuple(forces),
            constraints=tuple(constraints),
            node_index=node_index,
            edge_index=edge_index,
            config=SimulationConfig(
                iterations=cfg.iterations,
                tolerance=cfg.tolerance,
                damping=damping,
                time_step=cfg.time_step,
            ),
            metadata=dict(layout.metadata),
        )
        self.logger.info(
            "Compiled %s layout: %d forces, %d constraints",
            layout_type.value, len(executable.forces), len(executable.constraints),
        )
        return executable

    # =========================================================================
    # Shared force builders
    # =========================================================================

    def _charge(self, strength: float, members: Optional[np.ndarray] = None, charges: Optional[np.ndarray] = None,
                name: str = 'charge') -> ForceEntry:
        return ForceEntry(name, ForceKind.REPULSION, RepulsionParams(
            members=members,
            strength=strength,
            cutoff=self.config.repulsion_cutoff,
            theta=self.config.theta,
            charges=charges,
        ))

    def _gravity(self, strength: float, name: str = 'gravity') -> ForceEntry:
        return ForceEntry(name, ForceKind.GRAVITY, GravityParams(strength=strength, center=ORIGIN.copy()))

    # =========================================================================
    # Per-type compilers
    # =========================================================================

    def compile_hierarchical(self, layout: StructuredLayout, node_index: NodeIndex, edge_index: EdgeIndex) -> List[ForceEntry]:
        cfg = self.config
        forces: List[ForceEntry] = []

        parent_types = list(dict.fromkeys(h.type for h in layout.hierarchy if h.role == 'parent'))
        parents = np.concatenate([node_index.indices(t) for t in parent_types]) if parent_types else np.zeros(0, dtype=int)
        if len(parents) > 1:
            forces.append(ForceEntry('parent-repulsion', ForceKind.REPULSION, RepulsionParams(
                members=parents,
                strength=cfg.parent_repulsion,
                cutoff=cfg.parent_repulsion_cutoff,
                theta=cfg.theta,
            )))

        # parent index -> (children, radius), across every group
        circles: Dict[int, Tuple[List[int], float]] = {}
        for group in layout.groups:
            # child index -> parent indices, in edge order
            pairs: List[Tuple[int, int]] = []
            for edge in edge_index.by_type.get(group.relationship, ()):
                s, t = node_index.by_id[edge.source], node_index.by_id[edge.target]
                s_type, t_type = node_index.nodes[s].type, node_index.nodes[t].type
                if s_type == group.children and t_type == group.parent:
                    pairs.append((s, t))
                elif s_type == group.parent and t_type == group.children:
                    pairs.append((t, s))

            if not pairs:
                self.logger.debug("No %s edges between %s and %s", group.relationship, group.children, group.parent)
                continue

            pairs = list(dict.fromkeys(pairs))
            strength = self._group_strength(layout.forces, group.parent, group.children, group.relationship)
            forces.append(ForceEntry(
                f"{group.parent}-{group.children}-attraction",
                ForceKind.SPRING,
                SpringParams(pairs=np.array(pairs, dtype=int), strength=strength, rest_length=group.radius),
            ))

            for child, parent in pairs:
                circles.setdefault(parent, ([], group.radius))[0].append(child)

        for parent, (children, radius) in circles.items():
            forces.append(ForceEntry(
                f"circular-layout-{node_index.nodes[parent].id}",
                ForceKind.CIRCULAR,
                CircularParams(
                    center=parent,
                    members=np.array(children, dtype=int),
                    radius=radius,
                    weight=cfg.circular_pull,
                ),
            ))

        forces.append(self._gravity(cfg.gravity, name='center-gravity'))
        return forces

    def _group_strength(self, specs: Dict[str, ForceSpec], parent: str, children: str, relationship: str) -> float:
        keys = (
            f"{children}-{parent} via {relationship}",
            f"{parent}-{children} via {relationship}",
            f"{children}-{parent}",
            f"{parent}-{children}",
        )
        for key in keys:
            spec = specs.get(key)
            if spec is not None and spec.kind != 'repulsion':
                return spec.strength
        return self.config.parent_child_strength

    def compile_force_directed(self, layout: StructuredLayout, node_index: NodeIndex, edge_index: EdgeIndex) -> List[ForceEntry]:
        cfg = self.config
        globals_ = layout.global_forces or GlobalForces(charge=cfg.default_charge, gravity=cfg.gravity, damping=cfg.damping)
        forces: List[ForceEntry] = []

        charges = None
        if layout.node_forces:
            charges = np.full(len(node_index), globals_.charge, dtype=float)
            for node_type, node_force in layout.node_forces.items():
                charges[node_index.indices(node_type)] = node_force.charge
        forces.append(self._charge(globals_.charge, charges=charges))

        for edge_type, edges in edge_index.by_type.items():
            spec = self.edge_spring(layout.forces, edge_type, edges, node_index)
            forces.append(ForceEntry(f"{edge_type}-springs", ForceKind.SPRING, SpringParams(
                pairs=edge_index.index_pairs(edges, node_index),
                strength=spec.strength,
                rest_length=spec.distance,
            )))

        forces.append(self._gravity(globals_.gravity))
        return forces

    def edge_spring(self, specs: Dict[str, ForceSpec], edge_type: str, edges: List[GraphEdge],
                    node_index: NodeIndex) -> ForceSpec:
        """
        Pick the one spring shared by every edge of `edge_type`.

        Lookup order: edge type, "SourceType-TargetType" for the endpoint
        type pairs in edge order, any "... via <EdgeType>" key, "default",
        then the configured edge spring. Repulsion entries are never springs.
        """
        pair_keys = [
            f"{node_index.nodes[node_index.by_id[e.source]].type}-{node_index.nodes[node_index.by_id[e.target]].type}"
            for e in edges
        ]
        candidates = [edge_type] + list(dict.fromkeys(pair_keys))
        candidates += [key for key in specs if key.endswith(f" via {edge_type}")]
        candidates.append('default')

        for key in candidates:
            spec = specs.get(key)
            if spec is not None and spec.kind != 'repulsion':
                return spec
        return ForceSpec(strength=self.config.edge_strength, distance=self.config.edge_distance)

    def compile_radial(self, layout: StructuredLayout, node_index: NodeIndex, edge_index: EdgeIndex) -> List[ForceEntry]:
        cfg = self.config
        forces: List[ForceEntry] = []

        radial_weight = cfg.radial_weight if layout.radial_weight is None else layout.radial_weight
        tangential_weight = cfg.tangential_weight if layout.tangential_weight is None else layout.tangential_weight

        for ring in layout.rings:
            members = node_index.indices(ring.node_type)
            if len(members) == 0:
                continue
            forces.append(ForceEntry(f"ring-{ring.node_type}", ForceKind.RING, RingParams(
                members=members,
                radius=ring.radius,
                center=ORIGIN.copy(),
                radial_weight=radial_weight,
                tangential_weight=tangential_weight,
                distribute=ring.angle != 'fixed' and ring.radius > 0,
            )))

        forces.append(self._charge(cfg.default_charge))
        forces.append(self._gravity(cfg.gravity))
        return forces

    def compile_temporal(self, layout: StructuredLayout, node_index: NodeIndex, edge_index: EdgeIndex) -> List[ForceEntry]:
        cfg = self.config
        forces: List[ForceEntry] = []

        time_axis = layout.time_axis or cfg.default_time_axis
        if time_axis not in AXES:
            raise CompilationError(f"Unknown time axis: {time_axis!r}")

        # Time values -> [-span/2, span/2] along the time axis
        values = [_time_value(node.properties.get(layout.time_property)) for node in node_index.nodes]
        timed = np.array([i for i, v in enumerate(values) if v is not None], dtype=int)
        if len(timed):
            t = np.array([values[i] for i in timed], dtype=float)
            lo, hi = t.min(), t.max()
            norm = (t - lo) / (hi - lo) if hi > lo else np.full(len(t), 0.5)
            forces.append(self._axis_target('time-axis', timed, norm * cfg.time_span - cfg.time_span / 2, time_axis))
        else:
            self.logger.warning("No node has a usable '%s' value; skipping time axis", layout.time_property)

        everyone = np.arange(len(node_index), dtype=int)
        for axis, criterion in layout.grouping.items():
            if axis == time_axis or axis not in AXES:
                continue
            if criterion == 'type':
                lanes = list(node_index.by_type)
                offset = (len(lanes) - 1) / 2
                lane_of = {t: (k - offset) * cfg.lane_spacing for k, t in enumerate(lanes)}
                targets = np.array([lane_of[node.type] for node in node_index.nodes], dtype=float)
                forces.append(self._axis_target(f"lane-{axis}", everyone, targets, axis))
            elif criterion == 'hierarchy':
                depth = _bfs_depth(node_index, edge_index)
                forces.append(self._axis_target(f"level-{axis}", everyone, -depth * cfg.level_spacing, axis))
            else:
                self.logger.warning("Unknown temporal grouping %r on axis %s; ignoring", criterion, axis)

        forces.append(self._charge(cfg.default_charge))
        if edge_index.edges:
            forces.append(ForceEntry('edge-springs', ForceKind.SPRING, SpringParams(
                pairs=edge_index.index_pairs(edge_index.edges, node_index),
                strength=cfg.edge_strength,
                rest_length=cfg.edge_distance,
            )))
        return forces

    def _axis_target(self, name: str, members: np.ndarray, values: np.ndarray, axis: str) -> ForceEntry:
        targets = np.zeros((len(members), 3))
        targets[:, AXES[axis]] = values
        mask = np.zeros(3)
        mask[AXES[axis]] = 1.0
        return ForceEntry(name, ForceKind.TARGET, TargetParams(
            members=members, targets=targets, weight=self.config.axis_pull, axes=mask,
        ))

    def compile_semantic(self, layout: StructuredLayout, node_index: NodeIndex, edge_index: EdgeIndex) -> List[ForceEntry]:
        cfg = self.config
        algorithm = (layout.algorithm or cfg.semantic_algorithm).lower()
        if algorithm != 'pca':
            self.logger.warning("Semantic algorithm %r is not supported, using PCA", algorithm)

        features = _feature_matrix(node_index.nodes, layout.attributes)
        dimensions = min(max(int(layout.dimensions), 1), 3)
        coords = np.zeros((len(node_index), 3))
        coords[:, :dimensions] = pca_project(features, dimensions)

        extent = np.abs(coords).max()
        if extent > 0:
            coords *= cfg.semantic_scale / extent

        forces = [
            ForceEntry('semantic-position', ForceKind.TARGET, TargetParams(
                members=np.arange(len(node_index), dtype=int),
                targets=coords,
                weight=cfg.semantic_pull,
                axes=np.ones(3),
            )),
            self._charge(cfg.default_charge),
        ]
        return forces

    # =========================================================================
    # Constraints
    # =========================================================================

    def compile_constraints(self, descriptors: Iterable[Any], node_index: NodeIndex, edge_index: EdgeIndex) -> List[ConstraintEntry]:
        """
        Resolve constraint descriptors into index pairs.

        Unknown kinds are logged and skipped.
        """
        compiled: List[ConstraintEntry] = []
        for descriptor in descriptors:
            kind_tag, fields = _descriptor_fields(descriptor)
            try:
                kind = ConstraintKind(kind_tag)
            except ValueError:
                self.logger.warning("Unknown constraint type %r, skipping", kind_tag)
                continue

            if kind is ConstraintKind.VERTICAL:
                higher, lower = fields['higher'], fields['lower']
                pairs = []
                for child in node_index.indices(lower):
                    parent = self._first_neighbor(node_index.nodes[child].id, higher, node_index, edge_index)
                    if parent is not None:
                        pairs.append((child, parent))
                compiled.append(ConstraintEntry(f"vertical-{higher}-{lower}", kind, VerticalParams(
                    pairs=np.array(pairs, dtype=int).reshape(-1, 2),
                    min_distance=fields.get('min_distance', self.config.vertical_min_distance),
                )))

            elif kind is ConstraintKind.PROXIMITY:
                node_type, near_to = fields['node_type'], fields['near_to']
                typed = near_to in node_index.by_type
                pairs = []
                for i in node_index.indices(node_type):
                    for neighbor in edge_index.neighbors.get(node_index.nodes[i].id, ()):
                        j = node_index.by_id[neighbor]
                        if not typed or node_index.nodes[j].type == near_to:
                            pairs.append((i, j))
                compiled.append(ConstraintEntry(f"proximity-{node_type}-{near_to}", kind, ProximityParams(
                    pairs=np.array(pairs, dtype=int).reshape(-1, 2),
                    max_distance=fields.get('max_distance', self.config.proximity_max_distance),
                )))

            elif kind is ConstraintKind.SEPARATION:
                node_type = fields.get('node_type')
                compiled.append(ConstraintEntry(f"separation-{node_type or 'all'}", kind, SeparationParams(
                    members=node_index.indices(node_type),
                    min_distance=fields.get('min_distance', self.config.separation_min_distance),
                )))

        return compiled

    @staticmethod
    def _first_neighbor(node_id: Hashable, node_type: str, node_index: NodeIndex, edge_index: EdgeIndex) -> Optional[int]:
        """Lowest dense index among connected nodes of `node_type`."""
        candidates = [
            node_index.by_id[other]
            for other in edge_index.neighbors.get(node_id, ())
            if node_index.nodes[node_index.by_id[other]].type == node_type
        ]
        return min(candidates) if candidates else None
