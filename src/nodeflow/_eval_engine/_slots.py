"""Result slots: a value that is either ready or still being computed."""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

from nodeflow._errors import TaskTimeoutError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)


class SupportsForce(Protocol):
    """Anything holding a node value that can be forced."""

    @property
    def realized(self) -> bool: ...

    def force(self) -> Any: ...


@dataclass(frozen=True, slots=True)
class Ready:
    """A computed value."""

    value: Any

    @property
    def realized(self) -> bool:
        return True

    def force(self) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class Pending:
    """A parallel node still running (or queued) in the worker pool.

    Attributes:
        key: The key of the node being computed.
        future: The future of the background task.
        timeout: Seconds to wait once the value is forced, or None.

    """

    key: str
    future: concurrent.futures.Future[Any]
    timeout: float | None = None

    @property
    def realized(self) -> bool:
        """Whether the task finished successfully."""
        return self.future.done() and not self.future.cancelled() and self.future.exception() is None

    def force(self) -> Any:
        """Block until the task finishes and return its value.

        Forcing is idempotent: the future keeps its result (or exception).

        Raises:
            TaskTimeoutError: If the task does not finish within ``timeout``.

        """
        if not self.future.done():
            logger.debug("Joining parallel node %s", self.key)
        try:
            return self.future.result(timeout=self.timeout)
        except concurrent.futures.TimeoutError as e:
            if self.future.done():
                raise
            raise TaskTimeoutError(self.key, self.timeout or 0.0) from e

    def cancel(self) -> bool:
        """Cancel the task if it has not started yet."""
        return self.future.cancel()


Slot: TypeAlias = Ready | Pending


def run_node(key: str, func: Callable[..., Any], args: Sequence[Any]) -> Any:
    """Body of a background task: call ``func`` with already-resolved inputs.

    Failures propagate unchanged, with a note naming the node.
    """
    try:
        return func(*args)
    except Exception as e:
        e.add_note(f"raised by parallel node '{key}'")
        raise


def submit(
    pool: concurrent.futures.Executor,
    key: str,
    func: Callable[..., Any],
    args: Sequence[Any],
    timeout: float | None = None,
) -> Pending:
    """Start computing a node in the background."""
    logger.debug("Dispatching parallel node %s", key)
    return Pending(key=key, future=pool.submit(run_node, key, func, tuple(args)), timeout=timeout)
