# layout_engine/kernel/constraints.py
"""
CONSTRAINT CORRECTIONS: Vertical, Proximity, Separation
=======================================================

PURPOSE:
--------
Constraints are not forces. A force describes a field that the simulation
relaxes into; a constraint inspects the current geometry and emits a
correction only where a rule is violated. The update step adds both into
the same accumulator, so a correction is scaled by the time step exactly
like a force.

RULES:
------
VERTICAL     parent.y - child.y >= min_distance
             violated -> child gets (0, (parent.y - min_distance) - child.y, 0)

PROXIMITY    |node - nearest candidate| <= max_distance
             violated -> node is pulled along the line to the candidate by
             the overshoot (dist - max_distance)

SEPARATION   |a - b| >= min_distance for every member pair
             violated -> a and b each pushed apart by half the shortfall

Pair tables (which child has which parent, which node may be near which)
are resolved by the compiler once, from the edge index. These functions
only do the per-frame geometry.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np


class ConstraintKind(str, Enum):
    VERTICAL = 'vertical'
    PROXIMITY = 'proximity'
    SEPARATION = 'separation'


@dataclass(frozen=True, eq=False)
class VerticalParams:
    """
    pairs : np.ndarray, shape (m, 2)
        Dense (child, parent) index pairs; at most one parent per child
    min_distance : float
    """
    pairs: np.ndarray
    min_distance: float


@dataclass(frozen=True, eq=False)
class ProximityParams:
    """
    pairs : np.ndarray, shape (m, 2)
        Dense (node, candidate) index pairs; a node may have several
        candidates and is held near the closest one
    max_distance : float
    """
    pairs: np.ndarray
    max_distance: float


@dataclass(frozen=True, eq=False)
class SeparationParams:
    members: np.ndarray
    min_distance: float


ConstraintParams = Union[VerticalParams, ProximityParams, SeparationParams]


def vertical_corrections(positions: np.ndarray, params: VerticalParams) -> np.ndarray:
    corrections = np.zeros_like(positions)
    if len(params.pairs) == 0:
        return corrections

    child = params.pairs[:, 0]
    parent = params.pairs[:, 1]
    child_y = positions[child, 1]
    parent_y = positions[parent, 1]

    violated = (parent_y - child_y) < params.min_distance
    dy = (parent_y - params.min_distance) - child_y
    np.add.at(corrections[:, 1], child[violated], dy[violated])
    return corrections


def proximity_corrections(positions: np.ndarray, params: ProximityParams) -> np.ndarray:
    corrections = np.zeros_like(positions)
    if len(params.pairs) == 0:
        return corrections

    node = params.pairs[:, 0]
    candidate = params.pairs[:, 1]
    delta = positions[candidate] - positions[node]
    dist = np.linalg.norm(delta, axis=1)

    # Keep the closest candidate per node: sort by (node, dist), take first of each run
    order = np.lexsort((dist, node))
    first = np.ones(len(order), dtype=bool)
    first[1:] = node[order][1:] != node[order][:-1]
    nearest = order[first]

    far = nearest[dist[nearest] > params.max_distance]
    if len(far) == 0:
        return corrections

    overshoot = (dist[far] - params.max_distance) / dist[far]
    corrections[node[far]] = delta[far] * overshoot[:, None]
    return corrections


def separation_corrections(positions: np.ndarray, params: SeparationParams) -> np.ndarray:
    corrections = np.zeros_like(positions)
    if len(params.members) < 2:
        return corrections

    sub = positions[params.members]
    diff = sub[:, None, :] - sub[None, :, :]
    dist = np.sqrt(np.einsum('ijk,ijk->ij', diff, diff))

    close = (dist > 0) & (dist < params.min_distance)
    push = np.zeros_like(dist)
    push[close] = 0.5 * (params.min_distance - dist[close]) / dist[close]

    np.add.at(corrections, params.members, np.einsum('ijk,ij->ik', diff, push))
    return corrections


def evaluate(kind: ConstraintKind, params: ConstraintParams, positions: np.ndarray) -> np.ndarray:
    """Per-node (n, 3) corrections for one constraint; zero rows where satisfied."""
    if kind is ConstraintKind.VERTICAL:
        return vertical_corrections(positions, params)
    elif kind is ConstraintKind.PROXIMITY:
        return proximity_corrections(positions, params)
    elif kind is ConstraintKind.SEPARATION:
        return separation_corrections(positions, params)
    raise ValueError(f"Unknown constraint kind: {kind!r}")
