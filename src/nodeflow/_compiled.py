"""Compiled graphs: a validated graph plus its memoized evaluation orders."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import weakref
from typing import TYPE_CHECKING, Any, Self

from ._errors import InvalidGraphError, NoInitialValuesError
from ._eval_engine import LazyView, evaluate_later, evaluate_now
from ._ir import GraphSpec, collect_problems
from ._settings import EngineSettings
from ._validate import dependency_graph

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from types import TracebackType

    from ._ir import NodeSpec

logger = logging.getLogger(__name__)


class CompiledGraph:
    """A validated graph that can be run repeatedly.

    The evaluation order depends on which keys are initial, so it is computed
    once per distinct set of initial keys and memoized. Running the same
    handle with a different set of initial keys computes (and memoizes) a
    new order rather than reusing a stale one.

    Parallel nodes run in a thread pool owned by the handle, created on first
    use. Close the handle (or use it as a context manager) to shut the pool down.

    Example:
        >>> with compile_graph({"xs": range(100), "n": lambda xs: len(xs)}) as graph:
        ...     graph.compute_now()
        {'xs': range(0, 100), 'n': 100}

    """

    def __init__(self, spec: GraphSpec, settings: EngineSettings | None = None) -> None:
        self.spec = spec
        self.settings = settings or EngineSettings()
        self._dependencies = dependency_graph(spec.nodes)
        self._initial_keys = tuple(spec.initial_keys())
        self._orders: dict[frozenset[str], list[tuple[str, NodeSpec]]] = {}
        self._depths: dict[frozenset[str], list[tuple[str, int]]] = {}
        self._lock = threading.Lock()
        self._pool: concurrent.futures.ThreadPoolExecutor | None = None

    @property
    def initial_keys(self) -> tuple[str, ...]:
        """Keys of the graph's own dependency-free nodes."""
        return self._initial_keys

    def evaluation_order(self, initial_keys: Iterable[str] = ()) -> list[tuple[str, NodeSpec]]:
        """Return the memoized evaluation order for a set of supplied initial keys."""
        key_set = frozenset(initial_keys)
        order = self._orders.get(key_set)
        if order is not None:
            return order
        with self._lock:
            order = self._orders.get(key_set)
            if order is None:
                depths = self._dependencies.depth_order(key_set, self.spec.sequence)
                order = [(key, self.spec.nodes[key]) for key, _ in depths]
                self._depths[key_set] = depths
                self._orders[key_set] = order
                logger.debug("Computed evaluation order for initial keys %s", sorted(key_set))
        return order

    def explain_order(self, initial_keys: Iterable[str] = ()) -> list[tuple[str, int]]:
        """Return the evaluation order with each node's depth score."""
        key_set = frozenset(initial_keys)
        self.evaluation_order(key_set)
        return list(self._depths[key_set])

    def _prepare(self, initial_values: Mapping[str, Any] | None) -> tuple[dict[str, Any], list[tuple[str, NodeSpec]]]:
        values = dict(initial_values or {})
        if not values and not self._initial_keys:
            raise NoInitialValuesError
        return values, self.evaluation_order(values)

    def _executor(self) -> concurrent.futures.ThreadPoolExecutor:
        if self._pool is None:
            with self._lock:
                if self._pool is None:
                    self._pool = concurrent.futures.ThreadPoolExecutor(
                        max_workers=self.settings.max_workers,
                        thread_name_prefix=self.settings.thread_name_prefix,
                    )
        return self._pool

    def compute_now(self, initial_values: Mapping[str, Any] | None = None, *, keep_initials: bool = True) -> dict[str, Any]:
        """Compute every node now.

        Args:
            initial_values: Values for this run; they override graph entries at the same keys.
            keep_initials: Whether the initial keys are part of the result.

        Returns:
            Mapping from key to computed value.

        Raises:
            NoInitialValuesError: If neither the run nor the graph supplies initial values.
            MissingDependencyError: If a node depends on a key that has no value.
            TaskTimeoutError: If a parallel node does not finish in time.

        """
        values, order = self._prepare(initial_values)
        return evaluate_now(
            order,
            values,
            pool=self._executor(),
            task_timeout=self.settings.task_timeout,
            keep_initials=keep_initials,
        )

    def compute_later(self, initial_values: Mapping[str, Any] | None = None, *, keep_initials: bool = True) -> LazyView:
        """Return a LazyView whose nodes compute on first access.

        Raises:
            NoInitialValuesError: If neither the run nor the graph supplies initial values.

        """
        values, order = self._prepare(initial_values)
        return evaluate_later(
            order,
            values,
            pool=self._executor(),
            task_timeout=self.settings.task_timeout,
            keep_initials=keep_initials,
        )

    def compute_while(self, should_continue: Callable[[], bool]) -> None:
        """Run the graph repeatedly while ``should_continue()`` is true.

        Only useful when the graph's initial nodes are producers that yield a
        new value on each call: results are discarded.

        Raises:
            NoInitialValuesError: If the graph has no initial nodes.

        """
        if not self._initial_keys:
            raise NoInitialValuesError
        runs = 0
        while should_continue():
            self.compute_now()
            runs += 1
        logger.debug("Stopped after %d run(s)", runs)

    def close(self, *, wait: bool = True) -> None:
        """Shut down the worker pool.

        Args:
            wait: Wait for running tasks to finish. When False, queued tasks
                are cancelled and running ones are left to finish in the background.

        """
        with self._lock:
            pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(wait=wait, cancel_futures=not wait)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # A failed run (e.g. a timeout) must not block on the tasks it gave up on
        self.close(wait=exc is None)

    def __repr__(self) -> str:
        return f"CompiledGraph({list(self.spec)!r})"


def compile_graph(graph: Mapping[Any, Any], settings: EngineSettings | None = None) -> CompiledGraph:
    """Validate ``graph`` and compile it into a reusable handle.

    Args:
        graph: Mapping from node key to a NodeSpec, a callable or a plain value.
        settings: Execution settings. Defaults to ``EngineSettings()``.

    Returns:
        A CompiledGraph.

    Raises:
        InvalidGraphError: If the graph has invalid keys or nodes, or cycles.

    """
    # GraphSpec keys are checked too: from_nodes accepts any key
    nodes, problems = collect_problems(graph)
    spec = graph if isinstance(graph, GraphSpec) else GraphSpec.from_nodes(nodes)

    cycles = dependency_graph(spec.nodes).cycles()
    problems.extend(f"Cyclic dependency: {' -> '.join(cycle)}" for cycle in cycles)
    if problems:
        raise InvalidGraphError(problems, cycles)

    logger.debug("Compiled graph with %d nodes", len(spec))
    return CompiledGraph(spec, settings)


def compute_now(
    graph: Mapping[Any, Any],
    initial_values: Mapping[str, Any] | None = None,
    *,
    keep_initials: bool = True,
    settings: EngineSettings | None = None,
) -> dict[str, Any]:
    """Compile ``graph`` and compute it now (see `CompiledGraph.compute_now`)."""
    with compile_graph(graph, settings) as compiled:
        return compiled.compute_now(initial_values, keep_initials=keep_initials)


def compute_later(
    graph: Mapping[Any, Any],
    initial_values: Mapping[str, Any] | None = None,
    *,
    keep_initials: bool = True,
    settings: EngineSettings | None = None,
) -> LazyView:
    """Compile ``graph`` and return a LazyView over it (see `CompiledGraph.compute_later`).

    The worker pool lives as long as the view: it is shut down, without
    waiting, once the view is garbage collected. For repeated lazy runs use
    `compile_graph` as a context manager instead.
    """
    compiled = compile_graph(graph, settings)
    view = compiled.compute_later(initial_values, keep_initials=keep_initials)
    weakref.finalize(view, compiled.close, wait=False)
    return view


def compute_while(
    should_continue: Callable[[], bool],
    graph: Mapping[Any, Any],
    *,
    settings: EngineSettings | None = None,
) -> None:
    """Compile ``graph`` and run it while ``should_continue()`` is true."""
    with compile_graph(graph, settings) as compiled:
        compiled.compute_while(should_continue)
