"""Structural validation of graphs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ._graph import DependencyGraph
from ._ir import GraphSpec, collect_problems

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ._ir import NodeSpec

logger = logging.getLogger(__name__)


def dependency_graph(nodes: Mapping[str, NodeSpec]) -> DependencyGraph[str]:
    """Build the dependency relation of a set of nodes."""
    return DependencyGraph.from_dependencies({key: node.dependencies for key, node in nodes.items()})


def get_cycles(graph: Mapping[Any, Any]) -> list[list[str]]:
    """Return the dependency cycles of ``graph``.

    Entries that cannot be turned into nodes are left out.

    Example:
        >>> get_cycles({"a": lambda b: b, "b": lambda a: a})
        [['a', 'b', 'a'], ['b', 'a', 'b']]

    """
    nodes, _ = collect_problems(graph)
    return dependency_graph(nodes).cycles()


def graph_problems(graph: Mapping[Any, Any]) -> list[str]:
    """Validate ``graph`` and return a list of problem messages.

    Checks for:
    - Keys that are not identifiers
    - Values that cannot be turned into nodes
    - Cycles in the dependency relation

    Dependencies on keys that are not in the graph are not reported here;
    they may be supplied as initial values at run time.

    Returns:
        List of problem messages. Empty list if the graph is valid.

    """
    nodes, problems = collect_problems(graph)
    problems.extend(f"Cyclic dependency: {' -> '.join(cycle)}" for cycle in dependency_graph(nodes).cycles())
    if problems:
        logger.debug("Graph has %d problem(s)", len(problems))
    return problems


def is_valid_graph(graph: Mapping[Any, Any]) -> bool:
    """Return True if ``graph`` is a valid graph, False otherwise."""
    return not graph_problems(graph)


def explain_order(graph: Mapping[Any, Any], initial_keys: Iterable[str] = ()) -> list[tuple[str, int]]:
    """Return the evaluation order of ``graph`` with each node's depth score.

    Args:
        graph: The graph to order.
        initial_keys: Keys that will be supplied as initial values.

    Returns:
        List of (key, depth) pairs in evaluation order.

    Raises:
        ValueError: If the graph is invalid.

    """
    nodes, problems = collect_problems(graph)
    if problems:
        raise ValueError("; ".join(problems))
    spec = graph if isinstance(graph, GraphSpec) else GraphSpec.from_nodes(nodes)
    return dependency_graph(spec.nodes).depth_order(set(initial_keys), spec.sequence)
