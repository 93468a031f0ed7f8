# layout_engine/executor.py
"""
LAYOUT EXECUTOR: Run a Compiled Layout to Convergence Offline
=============================================================

PURPOSE:
--------
The render loop drives `ExecutableLayout.update()` one frame at a time.
Tests, scripts and notebooks often want the END state instead: run the
simulation until it settles, then look at where everything went.

    executor = LayoutExecutor()
    result = executor.execute(executable)

    result.converged          # did energy drop under tolerance?
    result.iterations         # frames taken
    result.moved              # nodes that moved more than 0.1 units
    result.history            # DataFrame: iteration, energy, converged
    result.final_positions    # {node id: (3,) array}

The executor does not sleep or yield. It is a tight loop over `update`.

TRANSITIONS:
------------
`ExecutionResult.transition(node, progress)` places a node part way
between its initial and final position, shaped by an easing function.
A VR client animates into a new layout by calling it with progress
running from 0 to 1.

    linear               t
    ease_in_out_cubic    slow start, slow finish (default)
    ease_out_elastic     overshoots and settles
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, Iterable, Optional

import numpy as np
import pandas as pd

from .compiler import ExecutableLayout
from .config import DEFAULT_CONFIG, EngineConfig
from .model import GraphNode


def linear(t: float) -> float:
    return t


def ease_in_out_cubic(t: float) -> float:
    return 4 * t ** 3 if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


def ease_out_elastic(t: float) -> float:
    if t <= 0:
        return 0.0
    if t >= 1:
        return 1.0
    c4 = (2 * math.pi) / 3
    return 2 ** (-10 * t) * math.sin((t * 10 - 0.75) * c4) + 1


EASINGS: Dict[str, Callable[[float], float]] = {
    'linear': linear,
    'ease_in_out_cubic': ease_in_out_cubic,
    'ease_out_elastic': ease_out_elastic,
}


@dataclass
class ExecutionResult:
    """
    Outcome of one offline run.

    Attributes:
    -----------
    converged : bool
    iterations : int
    elapsed : float
        Wall-clock seconds spent in the loop
    moved : int
        Nodes displaced by more than the moved threshold
    initial_positions, final_positions : Dict[Hashable, np.ndarray]
    history : pd.DataFrame
        One row per frame: iteration, energy, converged
    easing : str
        Default easing for `transition`
    """
    converged: bool
    iterations: int
    elapsed: float
    moved: int
    initial_positions: Dict[Hashable, np.ndarray]
    final_positions: Dict[Hashable, np.ndarray]
    history: pd.DataFrame = field(repr=False)
    easing: str = 'ease_in_out_cubic'

    def displacement(self) -> pd.Series:
        """Distance each node travelled, indexed by node id."""
        ids = list(self.final_positions)
        return pd.Series(
            [float(np.linalg.norm(self.final_positions[i] - self.initial_positions[i])) for i in ids],
            index=ids,
            name='displacement',
        )

    def transition(self, node: GraphNode, progress: float, easing: Optional[str] = None) -> Optional[np.ndarray]:
        """
        Move `node` to its eased position at `progress` in [0, 1].

        Returns the new position, or None when the node was not part of
        the run (its position is left alone).

        Raises:
        -------
        KeyError
            If `easing` is not one of EASINGS
        """
        start = self.initial_positions.get(node.id)
        end = self.final_positions.get(node.id)
        if start is None or end is None:
            return None

        ease = EASINGS[easing or self.easing]
        t = ease(min(max(float(progress), 0.0), 1.0))
        node.position[:] = start + (end - start) * t
        return node.position


class LayoutExecutor:
    """
    Runs an ExecutableLayout until it converges or hits its iteration cap.

    Parameters:
    -----------
    config : EngineConfig
        Supplies the moved threshold and progress log interval
    logger : Optional[logging.Logger]
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def execute(
        self,
        executable: ExecutableLayout,
        nodes: Optional[Iterable[GraphNode]] = None,
        delta_time: Optional[float] = None,
        max_iterations: Optional[int] = None,
        easing: str = 'ease_in_out_cubic',
    ) -> ExecutionResult:
        """
        Parameters:
        -----------
        executable : ExecutableLayout
        nodes : Optional[Iterable[GraphNode]]
            Nodes to move (the compiled snapshot's nodes if None)
        delta_time : Optional[float]
            Time step per frame (executable.config.time_step if None)
        max_iterations : Optional[int]
            Frame cap (executable.config.iterations if None)
        easing : str
            Default easing stored on the result

        Returns:
        --------
        ExecutionResult
        """
        if easing not in EASINGS:
            raise KeyError(f"Unknown easing '{easing}'. Available: {sorted(EASINGS)}")

        nodes = list(executable.node_index.nodes if nodes is None else nodes)
        dt = executable.config.time_step if delta_time is None else delta_time
        cap = executable.config.iterations if max_iterations is None else max_iterations

        initial = {node.id: node.position.copy() for node in nodes}
        rows = []

        self.logger.info("Executing %s layout on %d nodes", executable.type.value, len(nodes))
        start = time.perf_counter()

        state = executable.state
        for step in range(cap):
            state = executable.update(nodes, dt)
            rows.append({'iteration': state.iteration, 'energy': state.total_energy, 'converged': state.converged})
            if self.config.log_every and (step + 1) % self.config.log_every == 0:
                self.logger.debug("Iteration %d: energy=%.6f", state.iteration, state.total_energy)
            if state.converged:
                break

        elapsed = time.perf_counter() - start
        final = {node.id: node.position.copy() for node in nodes}
        moved = self.count_moved(initial, final)

        if state.converged:
            self.logger.info("Converged after %d iterations (%.3fs), %d nodes moved", state.iteration, elapsed, moved)
        else:
            self.logger.info("Stopped at iteration cap %d (energy=%.6f)", cap, state.total_energy)

        return ExecutionResult(
            converged=state.converged,
            iterations=len(rows),
            elapsed=elapsed,
            moved=moved,
            initial_positions=initial,
            final_positions=final,
            history=pd.DataFrame(rows, columns=['iteration', 'energy', 'converged']),
            easing=easing,
        )

    def count_moved(self, initial: Dict[Hashable, np.ndarray], final: Dict[Hashable, np.ndarray]) -> int:
        threshold = self.config.moved_threshold
        return sum(
            1 for node_id, end in final.items()
            if node_id in initial and np.linalg.norm(end - initial[node_id]) > threshold
        )
