"""Exception types raised by nodeflow."""

from collections.abc import Iterable, Sequence


class NodeflowError(Exception):
    """Base class for all nodeflow errors."""


class InvalidGraphError(NodeflowError):
    """Raised when compiling a graph that is malformed or cyclic."""

    def __init__(self, problems: Sequence[str], cycles: Sequence[Sequence[str]] = ()) -> None:
        self.problems = list(problems)
        self.cycles = [list(cycle) for cycle in cycles]
        detail = "; ".join(self.problems) if self.problems else "unknown problem"
        super().__init__(f"Invalid graph: {detail}")


class MissingDependencyError(NodeflowError):
    """Raised at run time when a node depends on a key that is not in the graph."""

    def __init__(self, node: str, missing_key: str, available: Iterable[str] = ()) -> None:
        self.node = node
        self.missing_key = missing_key
        self.available = tuple(available)
        super().__init__(
            f"Node '{node}' depends on '{missing_key}', which is NOT present in the graph "
            f"(available: {', '.join(self.available) or 'none'})",
        )


class NoInitialValuesError(NodeflowError):
    """Raised when a run has neither supplied nor graph-embedded initial values."""

    def __init__(self) -> None:
        super().__init__("No initial values found: supply some or add dependency-free nodes to the graph")


class TaskTimeoutError(NodeflowError):
    """Raised when a background node does not finish within its deadline."""

    def __init__(self, node: str, timeout: float) -> None:
        self.node = node
        self.timeout = timeout
        super().__init__(f"Parallel node '{node}' did not finish within {timeout}s")
