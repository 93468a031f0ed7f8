# layout_engine/viz/viz3d.py
"""
3D VISUALIZATION: Interactive Layout Viewer
===========================================

PURPOSE:
--------
Render a graph snapshot's current positions with Plotly, so a layout can
be checked on a desktop:
- Rotation/zoom/pan of the 3D scene
- One marker color per node type, with a legend entry each
- Edges drawn as line segments
- Energy-per-frame chart for an executor run
- Export to HTML for sharing

USAGE:
------
    fig = create_layout_figure(snapshot.nodes, snapshot.edges, title="Company/Person")
    fig.write_html("layout.html")

    result = LayoutExecutor().execute(executable)
    create_energy_figure(result.history).show()
"""

import logging
import os
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from ..model import GraphEdge, GraphNode

logger = logging.getLogger(__name__)

# Plotly's default qualitative sequence
PALETTE = [
    '#636EFA', '#EF553B', '#00CC96', '#AB63FA', '#FFA15A',
    '#19D3F3', '#FF6692', '#B6E880', '#FF97FF', '#FECB52',
]


def create_layout_figure(
    nodes: Sequence[GraphNode],
    edges: Iterable[GraphEdge] = (),
    title: str = "Graph Layout",
    show_edges: bool = True,
    marker_size: int = 6,
) -> go.Figure:
    """
    Create a Plotly figure of node positions.

    Parameters:
    -----------
    nodes : Sequence[GraphNode]
        Nodes to draw, at their current positions

    edges : Iterable[GraphEdge]
        Edges to draw. Edges with an endpoint not in `nodes` are skipped.

    title : str
        Plot title

    show_edges : bool
        Whether to draw edge segments

    marker_size : int
        Node marker size

    Returns:
    --------
    go.Figure
        One 'Edges' trace (if any were drawn) plus one marker trace per
        node type, in first-seen type order
    """
    fig = go.Figure()
    by_id = {node.id: node for node in nodes}

    # =========================================================================
    # DRAW EDGES
    # =========================================================================

    if show_edges:
        edge_x: List[Optional[float]] = []
        edge_y: List[Optional[float]] = []
        edge_z: List[Optional[float]] = []
        for edge in edges:
            a, b = by_id.get(edge.source), by_id.get(edge.target)
            if a is None or b is None:
                continue
            # None breaks the line between segments
            edge_x.extend([a.position[0], b.position[0], None])
            edge_y.extend([a.position[1], b.position[1], None])
            edge_z.extend([a.position[2], b.position[2], None])

        if edge_x:
            fig.add_trace(go.Scatter3d(
                x=edge_x, y=edge_y, z=edge_z,
                mode='lines',
                line=dict(color='lightgray', width=2),
                name='Edges',
                hoverinfo='skip',
            ))

    # =========================================================================
    # DRAW NODES
    # =========================================================================

    frame = pd.DataFrame({
        'id': [node.id for node in nodes],
        'type': [node.type for node in nodes],
        'x': [node.position[0] for node in nodes],
        'y': [node.position[1] for node in nodes],
        'z': [node.position[2] for node in nodes],
    })

    for k, (node_type, group) in enumerate(frame.groupby('type', sort=False)):
        fig.add_trace(go.Scatter3d(
            x=group['x'], y=group['y'], z=group['z'],
            mode='markers',
            marker=dict(size=marker_size, color=PALETTE[k % len(PALETTE)], line=dict(width=1, color='black')),
            name=str(node_type),
            text=[f"{node_type} {i}: ({x:.2f}, {y:.2f}, {z:.2f})"
                  for i, x, y, z in zip(group['id'], group['x'], group['y'], group['z'])],
            hoverinfo='text',
        ))

    # =========================================================================
    # LAYOUT
    # =========================================================================

    if len(frame):
        coords = frame[['x', 'y', 'z']].to_numpy(dtype=float)
        mid = (coords.max(axis=0) + coords.min(axis=0)) / 2
        half = max(float(np.ptp(coords, axis=0).max()), 1.0) / 2 + 0.5
    else:
        mid, half = np.zeros(3), 1.0

    fig.update_layout(
        title=dict(text=title, font=dict(size=16)),
        scene=dict(
            xaxis=dict(title='X', range=[mid[0] - half, mid[0] + half]),
            yaxis=dict(title='Y', range=[mid[1] - half, mid[1] + half]),
            zaxis=dict(title='Z', range=[mid[2] - half, mid[2] + half]),
            aspectmode='cube',
            camera=dict(eye=dict(x=1.5, y=1.5, z=1.0)),
        ),
        showlegend=True,
        legend=dict(x=0.02, y=0.98),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig


def create_energy_figure(history: pd.DataFrame, tolerance: Optional[float] = None,
                         title: str = "Layout Convergence") -> go.Figure:
    """
    Plot total displacement per frame from an ExecutionResult history.

    A dashed line marks `tolerance` when given. The y axis is logarithmic.
    """
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=history['iteration'], y=history['energy'],
        mode='lines',
        name='Energy',
        line=dict(color='steelblue', width=2),
    ))
    if tolerance is not None:
        fig.add_hline(y=tolerance, line_dash='dash', line_color='red', annotation_text='tolerance')

    fig.update_layout(
        title=dict(text=title, font=dict(size=16)),
        xaxis_title='Iteration',
        yaxis_title='Total displacement',
        yaxis_type='log',
        margin=dict(l=40, r=20, t=40, b=40),
    )
    return fig


def plot_layout_3d(
    nodes: Sequence[GraphNode],
    edges: Iterable[GraphEdge] = (),
    title: str = "Graph Layout",
    outpath: Optional[str] = None,
    show: bool = False,
    **kwargs
) -> go.Figure:
    """
    Create and optionally display/save a layout figure.

    Parameters:
    -----------
    nodes, edges, title:
        See create_layout_figure()

    outpath : Optional[str]
        If provided, save as HTML file

    show : bool
        Whether to display the figure

    Example:
    --------
    >>> fig = plot_layout_3d(snapshot.nodes, snapshot.edges, outpath="artifacts/layout.html")
    """
    fig = create_layout_figure(nodes, edges, title=title, **kwargs)

    if outpath:
        os.makedirs(os.path.dirname(outpath) or '.', exist_ok=True)
        fig.write_html(outpath)
        logger.info("Layout figure saved to: %s", outpath)

    if show:
        fig.show()

    return fig
