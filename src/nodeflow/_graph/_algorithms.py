"""Graph algorithms for dependency graph operations."""

from collections.abc import Collection, Hashable, Mapping, Sequence
from typing import TypeVar

T = TypeVar("T", bound=Hashable)

_EXHAUSTED = object()


def find_cycles(dependencies: Mapping[T, Sequence[T]]) -> list[list[T]]:
    """Find dependency cycles, at most one per root.

    For every node (in mapping order) a depth-first search follows dependency
    edges looking for a path back to that node. The first path found is
    reported as ``[root, ..., root]``. Edges into nodes absent from the
    mapping are ignored. The same cycle may be reported once per node on it.

    Args:
        dependencies: Mapping from node to the nodes it depends on, in order.

    Returns:
        List of cycle paths. Empty if the graph is acyclic.

    Example:
        >>> find_cycles({"a": ["b"], "b": ["a"], "c": ["a"]})
        [['a', 'b', 'a'], ['b', 'a', 'b']]

    """
    cycles: list[list[T]] = []
    for root in dependencies:
        path = _path_back_to(root, dependencies)
        if path is not None:
            cycles.append(path)
    return cycles


def _path_back_to(root: T, dependencies: Mapping[T, Sequence[T]]) -> list[T] | None:
    # Nodes fully explored without reaching root can never reach it later.
    explored: set[T] = set()
    path: list[T] = [root]
    stack = [iter(dependencies.get(root, ()))]

    while stack:
        dep = next(stack[-1], _EXHAUSTED)
        if dep is _EXHAUSTED:
            stack.pop()
            finished = path.pop()
            if finished != root:
                explored.add(finished)
            continue
        if dep == root:
            return [*path, root]
        if dep in explored or dep in path or dep not in dependencies:
            continue
        path.append(dep)
        stack.append(iter(dependencies[dep]))

    return None


def depth_scores(
    dependencies: Mapping[T, Collection[T]],
    initial: Collection[T],
) -> dict[T, int]:
    """Score every node by the length of its longest dependency chain.

    Initial nodes (those in ``initial`` and those without dependencies)
    score 0. Any other node scores one more than its highest-scoring
    non-initial dependency, and 1 if it depends only on initial nodes or on
    nodes absent from the mapping.

    Args:
        dependencies: Mapping from node to the nodes it depends on.
        initial: Nodes whose values are supplied rather than computed.

    Returns:
        Mapping from node to its depth score.

    Raises:
        ValueError: If the graph contains a cycle.

    Example:
        >>> depth_scores({"xs": [], "n": ["xs"], "m": ["xs", "n"]}, ["xs"])
        {'xs': 0, 'n': 1, 'm': 2}

    """
    initial_set = set(initial)
    scores: dict[T, int] = {}
    on_stack: set[T] = set()

    def is_initial(key: T) -> bool:
        return key in initial_set or not dependencies.get(key)

    for start in dependencies:
        if start in scores:
            continue
        stack = [start]
        while stack:
            key = stack[-1]
            if key in scores:
                stack.pop()
                continue
            if is_initial(key):
                scores[key] = 0
                stack.pop()
                continue
            pending = [
                dep for dep in dependencies[key] if dep in dependencies and not is_initial(dep) and dep not in scores
            ]
            if pending:
                if key in on_stack:
                    msg = f"Cycle detected in graph at {key!r}"
                    raise ValueError(msg)
                on_stack.add(key)
                stack.extend(reversed(pending))
                continue
            on_stack.discard(key)
            stack.pop()
            scores[key] = 1 + max(
                (scores[dep] for dep in dependencies[key] if dep in dependencies and not is_initial(dep)),
                default=0,
            )

    return scores


def order_by_depth(
    dependencies: Mapping[T, Collection[T]],
    initial: Collection[T],
    sequence: Mapping[T, int],
) -> list[tuple[T, int]]:
    """Order nodes so that every node comes after its dependencies.

    Nodes are sorted by depth score, ties broken by ``sequence``.

    Args:
        dependencies: Mapping from node to the nodes it depends on.
        initial: Nodes whose values are supplied rather than computed.
        sequence: Mapping from node to its insertion sequence number.

    Returns:
        List of (node, depth) pairs in evaluation order.

    Example:
        >>> order_by_depth({"m": ["n"], "n": ["xs"], "xs": []}, [], {"m": 0, "n": 1, "xs": 2})
        [('xs', 0), ('n', 1), ('m', 2)]

    """
    scores = depth_scores(dependencies, initial)
    ordered = sorted(dependencies, key=lambda key: (scores[key], sequence[key]))
    return [(key, scores[key]) for key in ordered]
