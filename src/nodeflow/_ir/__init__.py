"""Intermediate Representation (IR) module for nodeflow.

This module provides pure data structures for representing computation graphs
independent of how they are declared. The IR serves as a bridge between:
- User-facing declarations (plain mappings, `node`/`pnode` decorators)
- The validator, the ordering engine and the executors

Key types:
- NodeKind: Enum for node types (VALUE, PRODUCER, FUNCTION)
- NodeSpec: Specification of a single computation node
- GraphSpec: Ordered collection of NodeSpecs with insertion sequence numbers
- build_graph_spec: Function to build the IR from a plain mapping
"""

from ._builder import (
    GraphBuildError,
    build_graph_spec,
    coerce_node,
    collect_problems,
    infer_dependencies,
    make_node,
)
from ._graph_spec import GraphSpec
from ._node_spec import NodeKind, NodeSpec, is_identifier

__all__ = [
    "GraphBuildError",
    "GraphSpec",
    "NodeKind",
    "NodeSpec",
    "build_graph_spec",
    "coerce_node",
    "collect_problems",
    "infer_dependencies",
    "is_identifier",
    "make_node",
]
