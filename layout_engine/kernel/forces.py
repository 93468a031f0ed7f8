# layout_engine/kernel/forces.py
"""
FORCE PRIMITIVES: Spring, Repulsion, Gravity, Circular, Ring, Target
====================================================================

PURPOSE:
--------
The numeric building blocks every layout is made of. Each primitive takes
the (n, 3) position array and a small parameter struct and returns an
(n, 3) array of force vectors aligned to the same dense index.

Forces are DATA, not closures: a force is (kind, params), and `evaluate()`
is the single stateless dispatcher that interprets it. That keeps every
force inspectable, comparable in tests, and free of hidden state.

CONVENTIONS:
------------
- Unit mass everywhere: force == acceleration.
- Springs (Hooke):      f = k (d - L) * unit(b - a)    applied +f to a, -f to b
- Repulsion (charge):   f_a = -q (a - b) / |a - b|^3   with q < 0 pushing apart
- Gravity:              f = g (center - p)
- Pairs at zero distance contribute nothing (no direction to push along).

SCALING:
--------
Repulsion is the naive all-pairs O(n^2) sum, vectorized with numpy. It is
exact and order-independent. Past a few thousand nodes it no longer fits a
16 ms frame; `theta` is carried on RepulsionParams for a Barnes-Hut octree
evaluator, which would trade exactness for O(n log n).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np


class ForceKind(str, Enum):
    SPRING = 'spring'
    REPULSION = 'repulsion'
    GRAVITY = 'gravity'
    CIRCULAR = 'circular'
    RING = 'ring'
    TARGET = 'target'


@dataclass(frozen=True, eq=False)
class SpringParams:
    """
    pairs : np.ndarray, shape (m, 2)
        Dense (a, b) index pairs joined by a spring
    strength : float
        Spring constant k
    rest_length : float
        Rest length L
    """
    pairs: np.ndarray
    strength: float
    rest_length: float


@dataclass(frozen=True, eq=False)
class RepulsionParams:
    """
    members : Optional[np.ndarray]
        Dense indices that repel each other (all nodes if None)
    strength : float
        Charge q; negative values push apart
    cutoff : float
        Pairs farther apart than this do not interact
    theta : float
        Barnes-Hut opening angle (unused by the exact evaluator)
    charges : Optional[np.ndarray]
        Per-member charge, aligned to `members`; overrides `strength`.
        The force on a from b uses b's charge.
    """
    members: Optional[np.ndarray]
    strength: float
    cutoff: float
    theta: float = 0.8
    charges: Optional[np.ndarray] = None


@dataclass(frozen=True, eq=False)
class GravityParams:
    strength: float
    center: np.ndarray
    members: Optional[np.ndarray] = None


@dataclass(frozen=True, eq=False)
class CircularParams:
    """
    Pulls `members` toward evenly spaced points on a circle of `radius`
    around node `center`, in the x-z plane at the center's height.
    Member k targets angle k * 2*pi / len(members).
    """
    center: int
    members: np.ndarray
    radius: float
    weight: float


@dataclass(frozen=True, eq=False)
class RingParams:
    """
    Places `members` on a ring of `radius` around the `center` point
    (x-z plane). The pull toward each member's slot is split into a radial
    part (weight `radial_weight`) and a tangential part
    (`tangential_weight`). With distribute=False every member is pulled
    straight to the center point.
    """
    members: np.ndarray
    radius: float
    center: np.ndarray
    radial_weight: float
    tangential_weight: float
    distribute: bool = True


@dataclass(frozen=True, eq=False)
class TargetParams:
    """
    Pulls each member toward its own target position, only along the
    axes enabled in `axes` (a 0/1 mask of shape (3,)).
    """
    members: np.ndarray
    targets: np.ndarray
    weight: float
    axes: np.ndarray


ForceParams = Union[SpringParams, RepulsionParams, GravityParams, CircularParams, RingParams, TargetParams]


def spring_forces(positions: np.ndarray, params: SpringParams) -> np.ndarray:
    forces = np.zeros_like(positions)
    if len(params.pairs) == 0:
        return forces

    a = params.pairs[:, 0]
    b = params.pairs[:, 1]
    delta = positions[b] - positions[a]
    dist = np.linalg.norm(delta, axis=1)

    ok = dist > 0
    scale = np.zeros_like(dist)
    scale[ok] = params.strength * (dist[ok] - params.rest_length) / dist[ok]
    f = delta * scale[:, None]

    # Equal and opposite: stretched springs pull a toward b and b toward a
    np.add.at(forces, a, f)
    np.add.at(forces, b, -f)
    return forces


def repulsion_forces(positions: np.ndarray, params: RepulsionParams) -> np.ndarray:
    forces = np.zeros_like(positions)
    members = np.arange(len(positions)) if params.members is None else params.members
    if len(members) < 2:
        return forces

    sub = positions[members]
    diff = sub[:, None, :] - sub[None, :, :]          # (k, k, 3): a - b
    d2 = np.einsum('ijk,ijk->ij', diff, diff)

    mask = (d2 > 0) & (d2 < params.cutoff * params.cutoff)
    inv_d3 = np.zeros_like(d2)
    inv_d3[mask] = d2[mask] ** -1.5

    if params.charges is None:
        f = -params.strength * np.einsum('ijk,ij->ik', diff, inv_d3)
    else:
        f = -np.einsum('ijk,ij,j->ik', diff, inv_d3, params.charges)
    np.add.at(forces, members, f)
    return forces


def gravity_forces(positions: np.ndarray, params: GravityParams) -> np.ndarray:
    forces = np.zeros_like(positions)
    members = np.arange(len(positions)) if params.members is None else params.members
    forces[members] = params.strength * (params.center - positions[members])
    return forces


def circular_forces(positions: np.ndarray, params: CircularParams) -> np.ndarray:
    forces = np.zeros_like(positions)
    k = len(params.members)
    if k == 0:
        return forces

    angles = np.arange(k) * (2 * np.pi / k)
    center = positions[params.center]
    targets = np.empty((k, 3))
    targets[:, 0] = center[0] + np.cos(angles) * params.radius
    targets[:, 1] = center[1]
    targets[:, 2] = center[2] + np.sin(angles) * params.radius

    forces[params.members] = params.weight * (targets - positions[params.members])
    return forces


def ring_forces(positions: np.ndarray, params: RingParams) -> np.ndarray:
    forces = np.zeros_like(positions)
    k = len(params.members)
    if k == 0:
        return forces

    p = positions[params.members]
    c = params.center

    if not params.distribute or params.radius <= 0:
        delta = c - p
        delta[:, 1] = 0.0
        forces[params.members] = params.radial_weight * delta
        return forces

    angles = np.arange(k) * (2 * np.pi / k)
    slots = np.column_stack([np.cos(angles), np.zeros(k), np.sin(angles)])
    targets = c + params.radius * slots
    targets[:, 1] = p[:, 1]
    delta = targets - p

    # Radial direction in the x-z plane; fall back to the slot direction at the center
    outward = p - c
    outward[:, 1] = 0.0
    norm = np.linalg.norm(outward, axis=1)
    unit = slots.copy()
    ok = norm > 0
    unit[ok] = outward[ok] / norm[ok][:, None]

    radial = np.einsum('ij,ij->i', delta, unit)[:, None] * unit
    tangential = delta - radial
    forces[params.members] = params.radial_weight * radial + params.tangential_weight * tangential
    return forces


def target_forces(positions: np.ndarray, params: TargetParams) -> np.ndarray:
    forces = np.zeros_like(positions)
    if len(params.members) == 0:
        return forces
    forces[params.members] = params.weight * (params.targets - positions[params.members]) * params.axes
    return forces


def evaluate(kind: ForceKind, params: ForceParams, positions: np.ndarray) -> np.ndarray:
    """
    Evaluate one force on the current positions.

    Parameters:
    -----------
    kind : ForceKind
        Which primitive to run
    params : ForceParams
        The matching parameter struct
    positions : np.ndarray, shape (n, 3)

    Returns:
    --------
    np.ndarray, shape (n, 3)
        Force on every node (zero rows for nodes the force ignores)

    Raises:
    -------
    ValueError
        If `kind` is not a known ForceKind
    """
    if kind is ForceKind.SPRING:
        return spring_forces(positions, params)
    elif kind is ForceKind.REPULSION:
        return repulsion_forces(positions, params)
    elif kind is ForceKind.GRAVITY:
        return gravity_forces(positions, params)
    elif kind is ForceKind.CIRCULAR:
        return circular_forces(positions, params)
    elif kind is ForceKind.RING:
        return ring_forces(positions, params)
    elif kind is ForceKind.TARGET:
        return target_forces(positions, params)
    raise ValueError(f"Unknown force kind: {kind!r}")
