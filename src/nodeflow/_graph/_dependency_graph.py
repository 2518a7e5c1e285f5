"""Generic dependency graph abstraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from ._algorithms import find_cycles, order_by_depth

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class DependencyGraph(Generic[T]):
    """A directed graph representing dependencies between nodes.

    This is a pure, immutable data structure with query methods.
    It is generic over the node type T.

    The graph represents "depends on" relationships:
    - predecessors[b] = (a,) means "b depends on a"
    - successors[a] = {b} means "a is depended on by b"

    Dependencies keep their declared order, and nodes keep the order in
    which they were given. A dependency on a node that is not part of the
    graph is kept as an edge into a *missing* node.

    Attributes:
        _predecessors: Mapping from node to its direct dependencies, in order.
        _successors: Mapping from node to nodes that depend on it.

    """

    _predecessors: dict[T, tuple[T, ...]] = field(default_factory=dict)
    _successors: dict[T, frozenset[T]] = field(default_factory=dict)

    @classmethod
    def from_dependencies(cls, dependencies: Mapping[T, Sequence[T]]) -> DependencyGraph[T]:
        """Build a graph from a mapping of node to its dependencies.

        Args:
            dependencies: Mapping from node to the nodes it depends on.

        Returns:
            A new DependencyGraph instance.

        Example:
            >>> graph = DependencyGraph.from_dependencies({"a": (), "b": ("a",)})
            >>> graph.successors("a")
            frozenset({'b'})

        """
        successors: dict[T, set[T]] = {node: set() for node in dependencies}
        for node, deps in dependencies.items():
            for dep in deps:
                successors.setdefault(dep, set()).add(node)

        return cls(
            _predecessors={node: tuple(deps) for node, deps in dependencies.items()},
            _successors={k: frozenset(v) for k, v in successors.items()},
        )

    @property
    def nodes(self) -> tuple[T, ...]:
        """All declared nodes in the graph, in declaration order."""
        return tuple(self._predecessors)

    def predecessors(self, node: T) -> tuple[T, ...]:
        """Get direct dependencies of a node (nodes it depends on).

        Args:
            node: The node to query.

        Returns:
            The nodes this node directly depends on, in declared order.

        """
        return self._predecessors.get(node, ())

    def successors(self, node: T) -> frozenset[T]:
        """Get direct dependents of a node (nodes that depend on it).

        Args:
            node: The node to query.

        Returns:
            Set of nodes that directly depend on this node.

        """
        return self._successors.get(node, frozenset())

    def missing(self) -> tuple[T, ...]:
        """Nodes that are depended on but not declared, in order of first use."""
        return tuple(node for node in self._successors if node not in self._predecessors)

    def cycles(self) -> list[list[T]]:
        """Return the dependency cycles of the graph (see `find_cycles`)."""
        return find_cycles(self._predecessors)

    def depth_order(self, initial: Collection[T], sequence: Mapping[T, int]) -> list[tuple[T, int]]:
        """Return (node, depth) pairs with dependencies before dependents.

        Raises:
            ValueError: If the graph contains a cycle.

        """
        return order_by_depth(self._predecessors, initial, sequence)

    def __len__(self) -> int:
        """Return the number of declared nodes in the graph."""
        return len(self._predecessors)

    def __contains__(self, node: T) -> bool:
        """Check if a node is declared in the graph."""
        return node in self._predecessors
