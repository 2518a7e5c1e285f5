"""Graph specification containing all node specs."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._node_spec import NodeSpec

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class GraphSpec(Mapping[str, NodeSpec]):
    """Specification of the entire computation graph.

    An immutable, ordered mapping from node key to NodeSpec. Each key carries
    an explicit insertion sequence number, which the ordering engine uses to
    break ties between nodes of equal depth.

    Attributes:
        nodes: Mapping from node key to NodeSpec.
        sequence: Mapping from node key to its insertion sequence number.

    Example:
        >>> spec = GraphSpec.from_nodes({"xs": NodeSpec.literal([1, 2, 3])})
        >>> spec.sequence["xs"]
        0

    """

    nodes: dict[str, NodeSpec] = field(default_factory=dict)
    sequence: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_nodes(cls, nodes: Mapping[str, NodeSpec] | Iterable[tuple[str, NodeSpec]]) -> GraphSpec:
        """Build a GraphSpec, numbering keys in iteration order."""
        items = list(nodes.items()) if isinstance(nodes, Mapping) else list(nodes)
        ordered = dict(items)
        return cls(nodes=ordered, sequence={key: i for i, key in enumerate(ordered)})

    def initial_keys(self) -> list[str]:
        """Keys of the dependency-free nodes, in insertion order."""
        return [key for key, node in self.nodes.items() if node.is_initial()]

    def __getitem__(self, key: str) -> NodeSpec:
        return self.nodes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self.nodes)

    def __contains__(self, key: object) -> bool:
        """Check if a node exists at the given key."""
        return key in self.nodes
