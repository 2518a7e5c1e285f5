"""Value resolution utilities for the evaluation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nodeflow._errors import MissingDependencyError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from nodeflow._ir import NodeSpec

    from ._slots import SupportsForce


def lookup_slots(key: str, node: NodeSpec, slots: Mapping[str, SupportsForce]) -> list[SupportsForce]:
    """Collect the slots of a node's dependencies, in declared order.

    Raises:
        MissingDependencyError: If a dependency has no slot.

    """
    found: list[SupportsForce] = []
    for dep in node.dependencies:
        slot = slots.get(dep)
        if slot is None:
            raise MissingDependencyError(key, dep, slots.keys())
        found.append(slot)
    return found


def resolve_inputs(key: str, node: NodeSpec, slots: Mapping[str, SupportsForce]) -> list[Any]:
    """Resolve the input values of a node from the slots computed so far.

    Pending dependencies are forced, which is where background tasks are joined.

    Args:
        key: The key of the node being computed (for error messages).
        node: The node whose inputs to resolve.
        slots: Mapping from key to the slot holding its value.

    Returns:
        Dependency values, in the order the node's function expects them.

    Raises:
        MissingDependencyError: If a dependency is not in ``slots``.

    """
    return [slot.force() for slot in lookup_slots(key, node, slots)]
