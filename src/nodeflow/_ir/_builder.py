"""Builder functions to construct the IR from plain mappings and callables."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from ._graph_spec import GraphSpec
from ._node_spec import NodeSpec, is_identifier

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

_NAMED_PARAMETER_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class GraphBuildError(ValueError):
    """Raised when a mapping cannot be turned into a GraphSpec."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("; ".join(problems))


def infer_dependencies(func: Callable[..., Any]) -> tuple[str, ...]:
    """Infer a function's dependencies from its parameter names.

    Args:
        func: The function to inspect.

    Returns:
        Parameter names, in declaration order.

    Raises:
        ValueError: If the signature cannot be inspected, or if it has
            variadic or keyword-only parameters (they cannot be filled positionally).

    Example:
        >>> infer_dependencies(lambda xs, n: sum(xs) / n)
        ('xs', 'n')

    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as e:
        msg = f"Cannot infer dependencies of {func!r}: {e}"
        raise ValueError(msg) from e

    names: list[str] = []
    for param in signature.parameters.values():
        if param.kind not in _NAMED_PARAMETER_KINDS:
            msg = f"Cannot infer dependencies of {func!r}: parameter '{param.name}' is {param.kind.description}"
            raise ValueError(msg)
        names.append(param.name)
    return tuple(names)


def make_node(
    func: Callable[..., Any],
    deps: Iterable[str] | None = None,
    *,
    parallel: bool = False,
) -> NodeSpec:
    """Build a NodeSpec from a callable.

    With ``deps`` omitted the dependencies are inferred from the parameter
    names. A callable without dependencies becomes a producer.
    """
    dependencies = infer_dependencies(func) if deps is None else tuple(deps)
    if not dependencies:
        return NodeSpec.producer(func, parallel=parallel)
    return NodeSpec.function(func, dependencies, parallel=parallel)


def coerce_node(value: Any) -> NodeSpec:
    """Turn a graph entry into a NodeSpec.

    NodeSpecs are kept as-is, callables go through dependency inference
    and anything else becomes a literal value.

    Raises:
        ValueError: If a callable's dependencies cannot be inferred.

    """
    if isinstance(value, NodeSpec):
        return value
    if callable(value):
        return make_node(value)
    return NodeSpec.literal(value)


def collect_problems(graph: Mapping[Any, Any]) -> tuple[dict[str, NodeSpec], list[str]]:
    """Coerce every entry of ``graph``, collecting problems instead of raising.

    Returns:
        The successfully coerced nodes, and a list of problem messages.

    """
    nodes: dict[str, NodeSpec] = {}
    problems: list[str] = []

    for key, value in graph.items():
        if not is_identifier(key):
            problems.append(f"Key {key!r} is not a valid identifier")
            continue
        try:
            nodes[key] = coerce_node(value)
        except (TypeError, ValueError) as e:
            problems.append(f"Node '{key}' is invalid: {e}")

    return nodes, problems


def build_graph_spec(graph: Mapping[Any, Any]) -> GraphSpec:
    """Build a GraphSpec from a user-facing mapping.

    Args:
        graph: Mapping from node key to a NodeSpec, a callable or a plain value.
            A GraphSpec is returned unchanged.

    Returns:
        A GraphSpec whose sequence numbers follow the mapping's iteration order.

    Raises:
        GraphBuildError: If a key is not an identifier or a value cannot be coerced.

    Example:
        >>> spec = build_graph_spec({"xs": [1, 2, 3], "n": lambda xs: len(xs)})
        >>> spec["n"].dependencies
        ('xs',)

    """
    if isinstance(graph, GraphSpec):
        return graph

    nodes, problems = collect_problems(graph)
    if problems:
        raise GraphBuildError(problems)
    return GraphSpec.from_nodes(nodes)
