# layout_engine/viz - Debug Visualization
"""
VIZ: Debug Views of a Running Layout
====================================

- viz3d: node positions, edges and convergence history (Plotly)

Nothing here is needed by the engine itself. It exists so a layout can be
inspected in a notebook or saved as HTML without a VR headset.
"""

from .viz3d import create_energy_figure, create_layout_figure, plot_layout_3d

__all__ = ['create_layout_figure', 'create_energy_figure', 'plot_layout_3d']
