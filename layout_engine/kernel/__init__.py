# layout_engine/kernel - Dense-index force/constraint primitives
"""
KERNEL: THE NUMERIC FOUNDATION
==============================

Everything in here works on an (n, 3) position array and integer indices.
Nothing knows about layout strategies, node types or requests.

- index.py        node id <-> dense index, edge lookups
- forces.py       force kinds + params, one stateless `evaluate`
- constraints.py  constraint kinds + params, one stateless `evaluate`
- integrate.py    explicit Euler step, simulation config/state

The compiler decides WHICH forces exist; the kernel only computes them.
"""

from .index import NodeIndex, EdgeIndex
from .forces import (
    ForceKind,
    SpringParams,
    RepulsionParams,
    GravityParams,
    CircularParams,
    RingParams,
    TargetParams,
)
from .constraints import ConstraintKind, VerticalParams, ProximityParams, SeparationParams
from .integrate import SimulationConfig, SimulationState, euler_step

__all__ = [
    'NodeIndex', 'EdgeIndex',
    'ForceKind', 'SpringParams', 'RepulsionParams', 'GravityParams',
    'CircularParams', 'RingParams', 'TargetParams',
    'ConstraintKind', 'VerticalParams', 'ProximityParams', 'SeparationParams',
    'SimulationConfig', 'SimulationState', 'euler_step',
]
