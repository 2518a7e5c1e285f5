"""Graph query functions for CLI commands.

This module provides pure functions for querying a graph.
These are the functional core - no I/O, no Rich rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from nodeflow._validate import dependency_graph

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from nodeflow._ir import GraphSpec, NodeKind


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """Basic information about a node for listing."""

    key: str
    kind: NodeKind
    dependencies: tuple[str, ...]
    parallel: bool


@dataclass(frozen=True, slots=True)
class OrderRow:
    """One step of the evaluation order."""

    position: int
    key: str
    depth: int
    initial: bool
    parallel: bool


@dataclass(slots=True)
class TreeNode:
    """A node in a dependency tree for rendering."""

    key: str
    children: list[TreeNode]
    missing: bool = False


def list_nodes(spec: GraphSpec, *, parallel_only: bool = False) -> list[NodeInfo]:
    """List the nodes of a graph in declaration order.

    Args:
        spec: The graph to list.
        parallel_only: If True, only return nodes flagged for background execution.

    """
    return [
        NodeInfo(key=key, kind=node.kind, dependencies=node.dependencies, parallel=node.parallel)
        for key, node in spec.items()
        if node.parallel or not parallel_only
    ]


def get_order_rows(spec: GraphSpec, initial_keys: Iterable[str] = ()) -> list[OrderRow]:
    """Describe the evaluation order for a set of supplied initial keys."""
    key_set = set(initial_keys)
    depths = dependency_graph(spec.nodes).depth_order(key_set, spec.sequence)
    return [
        OrderRow(
            position=i,
            key=key,
            depth=depth,
            initial=depth == 0,
            parallel=spec[key].parallel,
        )
        for i, (key, depth) in enumerate(depths, start=1)
    ]


def get_dependency_tree(
    spec: GraphSpec,
    key: str,
    *,
    invert: bool = False,
    max_depth: int | None = None,
) -> TreeNode:
    """Build a dependency tree for visualization.

    Args:
        spec: The graph containing the node.
        key: The root node of the tree.
        invert: If False, show what the node depends on.
                If True, show what depends on the node (reverse dependencies).
        max_depth: Maximum depth to traverse (None for unlimited).

    Returns:
        TreeNode representing the dependency tree.

    Raises:
        KeyError: If the node is not found.

    """
    graph = dependency_graph(spec.nodes)

    if key not in spec:
        msg = f"Node not found: {key}"
        raise KeyError(msg)

    def build_tree(node_key: str, depth: int, visited: set[str]) -> TreeNode:
        children: list[TreeNode] = []

        if max_depth is not None and depth >= max_depth:
            return TreeNode(key=node_key, children=children)

        neighbors = sorted(graph.successors(node_key)) if invert else list(graph.predecessors(node_key))
        for neighbor in neighbors:
            if neighbor not in visited:
                visited.add(neighbor)
                if neighbor in graph:
                    children.append(build_tree(neighbor, depth + 1, visited))
                else:
                    children.append(TreeNode(key=neighbor, children=[], missing=True))

        return TreeNode(key=node_key, children=children)

    visited: set[str] = {key}
    return build_tree(key, 0, visited)


def parse_assignment(text: str) -> tuple[str, str]:
    """Split a ``KEY=VALUE`` command-line assignment.

    Raises:
        ValueError: If there is no '=' or the key is empty.

    """
    key, sep, value = text.partition("=")
    key = key.strip()
    if not sep or not key:
        msg = f"Expected KEY=VALUE, got '{text}'"
        raise ValueError(msg)
    return key, value


def summarize_results(values: Mapping[str, Any], spec: GraphSpec) -> list[tuple[str, str, bool]]:
    """Return (key, value repr, parallel) rows in graph order, then any extra keys."""
    ordered = [key for key in spec if key in values] + [key for key in values if key not in spec]
    return [(key, repr(values[key]), key in spec and spec[key].parallel) for key in ordered]
