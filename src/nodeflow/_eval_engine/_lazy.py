"""Lazy (on-demand) evaluation of computation graphs."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from nodeflow._ir import NodeKind

from ._resolution import lookup_slots
from ._slots import Ready, SupportsForce, submit
from ._view import LazyView

if TYPE_CHECKING:
    import concurrent.futures
    from collections.abc import Mapping, Sequence

    from nodeflow._ir import NodeSpec

    from ._slots import Pending

logger = logging.getLogger(__name__)


class LazyNode:
    """A memoized, on-demand computation of one node.

    The node computes at most once, on first access, however many dependents
    read it. A parallel node resolves its inputs on the calling thread and
    then runs in the worker pool; the caller blocks only when it reads the value.
    A failed computation is not memoized; the next access retries it.
    """

    __slots__ = ("_done", "_lock", "_pending", "_pool", "_slots", "_timeout", "_value", "key", "node")

    def __init__(
        self,
        key: str,
        node: NodeSpec,
        slots: Mapping[str, SupportsForce],
        pool: concurrent.futures.Executor,
        timeout: float | None = None,
    ) -> None:
        self.key = key
        self.node = node
        self._slots = slots
        self._pool = pool
        self._timeout = timeout
        self._lock = threading.Lock()
        self._pending: Pending | None = None
        self._value: Any = None
        self._done = False

    @property
    def realized(self) -> bool:
        """Whether the value has been computed."""
        return self._done

    def start(self) -> None:
        """Dispatch a parallel node to the pool without waiting for it."""
        if not self.node.parallel:
            return
        with self._lock:
            if self._done or self._pending is not None:
                return
            args = self._resolve()
            self._pending = submit(self._pool, self.key, self.node.compute, args, self._timeout)

    def force(self) -> Any:
        """Compute the value if needed and return it."""
        if self._done:
            return self._value
        if self.node.parallel:
            return self._force_parallel()

        with self._lock:
            if not self._done:
                args = self._resolve()
                logger.debug("Evaluating %s", self.key)
                self._value = self.node.compute(*args)
                self._done = True
        return self._value

    def _force_parallel(self) -> Any:
        self.start()
        pending = self._pending
        if pending is None:
            if self._done:
                return self._value
            # Another reader failed and cleared its task; start over
            return self.force()
        try:
            value = pending.force()
        except BaseException:
            with self._lock:
                if self._pending is pending:
                    self._pending = None
            raise
        with self._lock:
            if not self._done:
                self._value = value
                self._done = True
                self._pending = None
        return self._value

    def _resolve(self) -> list[Any]:
        deps = lookup_slots(self.key, self.node, self._slots)
        # Start parallel dependencies first so siblings overlap
        for dep in deps:
            if isinstance(dep, LazyNode):
                dep.start()
        return [dep.force() for dep in deps]

    def __repr__(self) -> str:
        return repr(self._value) if self._done else "<pending>"


def evaluate_later(
    order: Sequence[tuple[str, NodeSpec]],
    initial_values: Mapping[str, Any],
    *,
    pool: concurrent.futures.Executor,
    task_timeout: float | None = None,
    keep_initials: bool = True,
) -> LazyView:
    """Wrap every node of an ordered graph in a memoized, on-demand computation.

    Nothing is computed here. Reading a key from the returned view computes
    exactly the nodes that key depends on, each at most once.

    Args:
        order: (key, node) pairs, every node after its dependencies.
        initial_values: Values supplied for this run.
        pool: Executor running the parallel nodes.
        task_timeout: Seconds to wait for a parallel node once forced.
        keep_initials: Whether initial keys are visible through the view.

    Returns:
        A LazyView over the graph.

    """
    slots: dict[str, SupportsForce] = {key: Ready(value) for key, value in initial_values.items()}
    initial_keys = set(initial_values)

    for key, node in order:
        if key in initial_values:
            continue
        if node.is_initial():
            initial_keys.add(key)
            if node.kind is NodeKind.VALUE:
                slots[key] = Ready(node.value)
                continue
        slots[key] = LazyNode(key, node, slots, pool, task_timeout)

    logger.debug("Prepared lazy evaluation of %d nodes", len(slots))

    hidden = frozenset() if keep_initials else frozenset(initial_keys)
    return LazyView(slots, hidden=hidden)
