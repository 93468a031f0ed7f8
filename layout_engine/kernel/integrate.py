# layout_engine/kernel/integrate.py
"""Explicit Euler integration step and simulation bookkeeping."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SimulationConfig:
    """Iteration cap, convergence tolerance, damping and frame time step."""
    iterations: int = 500
    tolerance: float = 0.001
    damping: float = 0.9
    time_step: float = 0.016


@dataclass
class SimulationState:
    """Mutable per-layout counters. Owned by one ExecutableLayout."""
    iteration: int = 0
    total_energy: float = float('inf')
    converged: bool = False

    def reset(self) -> None:
        self.iteration = 0
        self.total_energy = float('inf')
        self.converged = False


def euler_step(accelerations: np.ndarray, delta_time: float) -> tuple[np.ndarray, float]:
    """
    One forward-Euler step with unit mass.

    Args:
        accelerations: Summed forces and corrections per node (n, 3)
        delta_time: Frame time step in seconds

    Returns:
        velocity: Displacement to add to each position (n, 3)
        energy: Sum of displacement magnitudes over all nodes

    Note:
        Energy is a raw sum, not a mean. The same tolerance is therefore
        stricter for large graphs than for small ones.
    """
    velocity = accelerations * delta_time
    energy = float(np.linalg.norm(velocity, axis=1).sum()) if len(velocity) else 0.0
    return velocity, energy
