"""Eager evaluation engine for computation graphs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ._resolution import resolve_inputs
from ._slots import Pending, Ready, Slot, submit

if TYPE_CHECKING:
    import concurrent.futures
    from collections.abc import Mapping, Sequence

    from nodeflow._ir import NodeSpec

logger = logging.getLogger(__name__)


def _cancel_pending(slots: Mapping[str, Slot]) -> None:
    for slot in slots.values():
        if isinstance(slot, Pending) and slot.cancel():
            logger.debug("Cancelled parallel node %s", slot.key)


def evaluate_now(
    order: Sequence[tuple[str, NodeSpec]],
    initial_values: Mapping[str, Any],
    *,
    pool: concurrent.futures.Executor,
    task_timeout: float | None = None,
    keep_initials: bool = True,
) -> dict[str, Any]:
    """Evaluate every node of an ordered graph now.

    The walk happens on the calling thread:
    1. Seeds the results with ``initial_values`` (never recomputed)
    2. Produces the values of the graph's own initial nodes
    3. Computes each remaining node from its resolved dependencies; parallel
       nodes are submitted to ``pool`` and joined when first needed
    4. Forces any background task nobody depended on

    Args:
        order: (key, node) pairs, every node after its dependencies.
        initial_values: Values supplied for this run.
        pool: Executor running the parallel nodes.
        task_timeout: Seconds to wait for a parallel node once forced.
        keep_initials: Whether initial keys are part of the returned mapping.

    Returns:
        Mapping from key to computed value.

    Raises:
        MissingDependencyError: If a node depends on a key that has no value.
        TaskTimeoutError: If a parallel node does not finish in time.

    """
    slots: dict[str, Slot] = {key: Ready(value) for key, value in initial_values.items()}
    initial_keys = set(initial_values)

    logger.debug("Starting eager evaluation with %d nodes in order", len(order))

    try:
        for key, node in order:
            if key in initial_values:
                continue

            if node.is_initial():
                initial_keys.add(key)
                args: list[Any] = []
            else:
                args = resolve_inputs(key, node, slots)

            if node.parallel:
                slots[key] = submit(pool, key, node.compute, args, task_timeout)
            else:
                logger.debug("Evaluating %s", key)
                slots[key] = Ready(node.compute(*args))

        # Second pass: join the background tasks no later node needed
        values = {key: slot.force() for key, slot in slots.items()}
    except BaseException:
        _cancel_pending(slots)
        raise

    if not keep_initials:
        for key in initial_keys:
            values.pop(key, None)

    return values
