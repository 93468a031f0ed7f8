# tests/test_tooling.py
"""
Templates, debug figures and logging setup.
"""

import logging

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import pytest

from layout_engine.context import GraphContext
from layout_engine.logging_config import setup_logging
from layout_engine.model import GraphEdge, GraphNode
from layout_engine.parser import LayoutParser
from layout_engine.request import LayoutRequest
from layout_engine.structured import LayoutType
from layout_engine.templates import TEMPLATES, get_template, list_templates
from layout_engine.viz import create_energy_figure, create_layout_figure, plot_layout_3d


class TestTemplates:

    def test_known_templates(self):
        assert set(TEMPLATES) == {'company-employee', 'project-centered', 'timeline'}
        assert [t['key'] for t in list_templates()] == list(TEMPLATES)

    @pytest.mark.parametrize('key, strategy', [
        ('company-employee', 'hierarchical-grouping'),
        ('project-centered', 'radial'),
        ('timeline', 'temporal'),
    ])
    def test_get_template(self, key, strategy):
        request = get_template(key)
        assert isinstance(request, LayoutRequest)
        assert request.strategy == strategy
        assert request.original_prompt == TEMPLATES[key]['example']

    def test_returns_fresh_request(self):
        assert get_template('timeline') is not get_template('timeline')

    def test_unknown_template(self):
        with pytest.raises(KeyError):
            get_template('spiral-galaxy')

    def test_company_employee_parses(self):
        context = GraphContext.from_types(['Company', 'Person'], ['WorksAt'])
        layout = LayoutParser().parse(get_template('company-employee'), context)

        assert layout.type == LayoutType.HIERARCHICAL_FORCE
        assert layout.groups[0].relationship == 'WorksAt'
        assert layout.forces['Person-Company via WorksAt'].strength == pytest.approx(0.8)


class TestViz:

    def make_graph(self):
        nodes = [
            GraphNode(1, 'Company', (0, 0, 0)),
            GraphNode(2, 'Person', (3, 0, 0)),
            GraphNode(3, 'Person', (-3, 0, 1)),
        ]
        edges = [GraphEdge(2, 1, 'WorksAt'), GraphEdge(3, 1, 'WorksAt'), GraphEdge(3, 99, 'Knows')]
        return nodes, edges

    def test_layout_figure_traces(self):
        nodes, edges = self.make_graph()
        fig = create_layout_figure(nodes, edges, title="Test")

        assert isinstance(fig, go.Figure)
        assert [trace.name for trace in fig.data] == ['Edges', 'Company', 'Person']
        # Two drawable edges, three points each (None separators included)
        assert len(fig.data[0].x) == 6
        assert len(fig.data[2].x) == 2

    def test_layout_figure_without_edges(self):
        nodes, edges = self.make_graph()
        fig = create_layout_figure(nodes, edges, show_edges=False)
        assert [trace.name for trace in fig.data] == ['Company', 'Person']

    def test_energy_figure(self):
        history = pd.DataFrame({'iteration': [1, 2, 3], 'energy': [1.0, 0.1, 0.0005], 'converged': [False, False, True]})
        fig = create_energy_figure(history, tolerance=0.001)
        assert len(fig.data) == 1
        np.testing.assert_allclose(fig.data[0].y, [1.0, 0.1, 0.0005])

    def test_plot_writes_html(self, tmp_path):
        nodes, edges = self.make_graph()
        outpath = tmp_path / 'figs' / 'layout.html'
        plot_layout_3d(nodes, edges, outpath=str(outpath), show=False)
        assert outpath.exists()


class TestLogging:

    def test_setup_is_idempotent(self):
        logger = setup_logging('layout_engine.test_setup', level='DEBUG')
        setup_logging('layout_engine.test_setup', level='WARNING')

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / 'logs' / 'engine.log'
        logger = setup_logging('layout_engine.test_file', log_file=log_file)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert log_file.exists()
        assert 'hello' in log_file.read_text()
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
