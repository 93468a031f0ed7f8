# tests/test_update.py
"""
UPDATE TESTS: The Per-Frame Integration Step
============================================

A small chain graph that is easy to reason about:

    (-4,0,0) --Knows-- (0,0,0) --Knows-- (4,0,0)

With charge -100, gravity 0.1 and edge springs (0.5, rest 3), the end
nodes settle near x = +-6.9 and the middle node stays at the origin by
symmetry. Forward Euler with unit mass is plain gradient descent here, so
the total displacement per frame shrinks geometrically and drops under
the 0.001 tolerance well before the 500-frame cap.
"""

import numpy as np
import pytest

from layout_engine.compiler import LayoutCompiler
from layout_engine.context import analyze_graph
from layout_engine.kernel.integrate import SimulationState
from layout_engine.model import GraphEdge, GraphNode, GraphSnapshot
from layout_engine.parser import LayoutParser
from layout_engine.structured import LayoutType


def make_chain():
    return GraphSnapshot(
        nodes=[
            GraphNode('a', 'Person', (-4.0, 0.0, 0.0)),
            GraphNode('b', 'Person', (0.0, 0.0, 0.0)),
            GraphNode('c', 'Person', (4.0, 0.0, 0.0)),
        ],
        edges=[GraphEdge('a', 'b', 'Knows'), GraphEdge('b', 'c', 'Knows')],
    )


def make_executable(snapshot):
    structured = LayoutParser().parse({'strategy': 'force-directed'}, analyze_graph(snapshot))
    return LayoutCompiler().compile(structured, snapshot)


class TestUpdate:

    def test_zero_time_step_moves_nothing(self):
        snapshot = make_chain()
        executable = make_executable(snapshot)
        before = [node.position.copy() for node in snapshot.nodes]

        state = executable.update(snapshot.nodes, 0.0)

        for node, position in zip(snapshot.nodes, before):
            np.testing.assert_array_equal(node.position, position)
        assert state.iteration == 1
        assert state.total_energy == 0.0
        assert state.converged

    def test_positions_change_in_place(self):
        snapshot = make_chain()
        executable = make_executable(snapshot)
        array = snapshot.nodes[0].position

        executable.update(snapshot.nodes, 0.1)

        assert snapshot.nodes[0].position is array
        # Repulsion dominates at distance 4: the end node moves outward
        assert snapshot.nodes[0].position[0] < -4.0
        assert snapshot.nodes[2].position[0] > 4.0

    def test_state_counts_and_returns_copy(self):
        snapshot = make_chain()
        executable = make_executable(snapshot)

        first = executable.update(snapshot.nodes, 0.05)
        second = executable.update(snapshot.nodes, 0.05)

        assert isinstance(first, SimulationState)
        assert (first.iteration, second.iteration) == (1, 2)
        assert first is not executable.state
        assert second.total_energy > 0
        assert not second.converged

    def test_unknown_nodes_are_left_alone(self):
        snapshot = make_chain()
        executable = make_executable(snapshot)
        stranger = GraphNode('zz', 'Person', (1.0, 1.0, 1.0))

        executable.update(snapshot.nodes + [stranger], 0.1)
        np.testing.assert_array_equal(stranger.position, [1.0, 1.0, 1.0])

    def test_default_time_step_and_nodes(self):
        snapshot = make_chain()
        executable = make_executable(snapshot)
        state = executable.update()
        assert state.iteration == 1
        assert snapshot.nodes[0].position[0] < -4.0

    def test_step_is_summed_forces_times_dt(self):
        # Primary-type overrides change the charge, never the step size
        snapshot = GraphSnapshot(
            nodes=[GraphNode(1, 'Company', (3.0, 0.0, 0.0)), GraphNode(2, 'Person', (-3.0, 0.0, 0.0))],
            edges=[GraphEdge(2, 1, 'WorksAt')],
        )
        request = {'strategy': 'force-directed', 'primary': {'nodeType': 'Company'}}
        structured = LayoutParser().parse(request, analyze_graph(snapshot))
        assert structured.node_forces['Company'].mass == pytest.approx(2.0)
        executable = LayoutCompiler().compile(structured, snapshot)

        positions = np.array([node.position for node in snapshot.nodes])
        total = sum(entry.apply(positions) for entry in executable.forces + executable.constraints)

        executable.update(snapshot.nodes, 0.1)

        moved = np.array([node.position for node in snapshot.nodes]) - positions
        np.testing.assert_allclose(moved, total * 0.1)
        assert abs(moved[0, 0]) > 0.0

    def test_reset(self):
        snapshot = make_chain()
        executable = make_executable(snapshot)
        executable.update(snapshot.nodes, 0.1)
        executable.reset()
        assert executable.state.iteration == 0
        assert not executable.state.converged


class TestConvergence:

    def test_chain_converges_within_cap(self):
        snapshot = make_chain()
        executable = make_executable(snapshot)
        assert executable.type == LayoutType.FORCE_DIRECTED
        assert executable.config.iterations == 500
        assert executable.config.tolerance == pytest.approx(0.001)

        state = executable.state
        for _ in range(executable.config.iterations):
            state = executable.update(snapshot.nodes, 0.1)
            if state.converged:
                break

        assert state.converged
        assert state.iteration < 500

        a, b, c = (node.position for node in snapshot.nodes)
        np.testing.assert_allclose(b, 0.0, atol=1e-6)
        np.testing.assert_allclose(a, -c, atol=1e-6)
        assert 6.5 < c[0] < 7.3
        np.testing.assert_allclose(c[1:], 0.0, atol=1e-9)

    def test_hierarchical_layout_stays_finite(self):
        snapshot = GraphSnapshot(
            nodes=[GraphNode(1, 'Company', (0, 0, 0)), GraphNode(2, 'Person', (0, 0, 0)),
                   GraphNode(3, 'Person', (0.5, -1, 0))],
            edges=[GraphEdge(2, 1, 'WorksAt'), GraphEdge(3, 1, 'WorksAt')],
        )
        request = {
            'strategy': 'hierarchical-grouping',
            'primary': {'nodeType': 'Company'},
            'secondary': {'nodeType': 'Person', 'groupBy': 'WorksAt relationship'},
        }
        structured = LayoutParser().parse(request, analyze_graph(snapshot))
        executable = LayoutCompiler().compile(structured, snapshot)

        for _ in range(200):
            executable.update(snapshot.nodes, 0.05)

        positions = np.array([node.position for node in snapshot.nodes])
        assert np.all(np.isfinite(positions))
        # Vertical constraint keeps employees below their company
        assert positions[1, 1] < positions[0, 1]
        assert positions[2, 1] < positions[0, 1]
