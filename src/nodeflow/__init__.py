"""Dependency-graph evaluator: run named computations in dependency order."""

__all__ = [
    "CompiledGraph",
    "DependencyGraph",
    "EngineSettings",
    "GraphBuildError",
    "GraphSpec",
    "InvalidGraphError",
    "LazyView",
    "MissingDependencyError",
    "NoInitialValuesError",
    "NodeKind",
    "NodeSpec",
    "NodeflowError",
    "TaskTimeoutError",
    "build_graph_spec",
    "compile_graph",
    "compute_later",
    "compute_now",
    "compute_while",
    "explain_order",
    "get_cycles",
    "graph_problems",
    "is_lazy_view",
    "is_valid_graph",
    "node",
    "pnode",
]

from ._compiled import CompiledGraph, compile_graph, compute_later, compute_now, compute_while
from ._decorators import node, pnode
from ._errors import (
    InvalidGraphError,
    MissingDependencyError,
    NodeflowError,
    NoInitialValuesError,
    TaskTimeoutError,
)
from ._eval_engine import LazyView, is_lazy_view
from ._graph import DependencyGraph
from ._ir import GraphBuildError, GraphSpec, NodeKind, NodeSpec, build_graph_spec
from ._settings import EngineSettings
from ._validate import explain_order, get_cycles, graph_problems, is_valid_graph
