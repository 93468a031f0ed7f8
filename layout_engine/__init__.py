# layout_engine - Intent-Driven 3D Graph Layout
"""
LAYOUT ENGINE: From Arrangement Intent to Per-Frame Positions
=============================================================

This package provides:
- Validation of structured layout requests against the current graph
- Compilation into force/constraint simulations over a dense node index
- A per-frame update step driven by an external render loop
- Offline execution, canned templates and Plotly debug views

ARCHITECTURE:
-------------
    kernel/          Dense-index primitives (index, forces, constraints, Euler step)
    model.py         GraphNode, GraphEdge, GraphSnapshot
    context.py       GraphContext, analyze_graph
    request.py       LayoutRequest payload models (pydantic)
    structured.py    StructuredLayout and its parts
    parser.py        LayoutParser: request + context -> StructuredLayout
    compiler.py      LayoutCompiler: StructuredLayout + snapshot -> ExecutableLayout
    executor.py      LayoutExecutor: run to convergence, transitions
    templates.py     Canned requests
    config.py        EngineConfig constants
    viz/             Plotly figures

USAGE:
------
    context = analyze_graph(snapshot)
    structured = LayoutParser().parse(request, context)
    executable = LayoutCompiler().compile(structured, snapshot)

    # once per frame
    state = executable.update(snapshot.nodes, delta_time)
"""

from .config import DEFAULT_CONFIG, EngineConfig
from .model import GraphEdge, GraphNode, GraphSnapshot
from .context import GraphContext, analyze_graph
from .request import LayoutRequest, Strategy
from .structured import LayoutType, StructuredLayout
from .parser import LayoutParser, UnknownRelationshipWarning, UnknownStrategyWarning, ValidationError
from .compiler import CompilationError, ExecutableLayout, LayoutCompiler
from .executor import ExecutionResult, LayoutExecutor
from .templates import get_template

__version__ = "0.1.0"

__all__ = [
    'DEFAULT_CONFIG', 'EngineConfig',
    'GraphEdge', 'GraphNode', 'GraphSnapshot',
    'GraphContext', 'analyze_graph',
    'LayoutRequest', 'Strategy',
    'LayoutType', 'StructuredLayout',
    'LayoutParser', 'ValidationError', 'UnknownRelationshipWarning', 'UnknownStrategyWarning',
    'LayoutCompiler', 'ExecutableLayout', 'CompilationError',
    'LayoutExecutor', 'ExecutionResult',
    'get_template',
]
