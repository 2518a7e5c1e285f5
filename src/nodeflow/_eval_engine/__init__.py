"""Evaluation engine module for nodeflow.

This module provides the executors that run an ordered graph. Both take the
evaluation order computed by the ordering engine and the initial values of
one run:
- evaluate_now: Eager evaluation, parallel nodes overlapped with later work
- evaluate_later: Lazy evaluation behind a LazyView

Key types:
- Ready / Pending: A value that is computed, or still running in the pool
- LazyNode: A memoized, on-demand computation of one node
- LazyView: Read-only mapping over a lazily evaluated graph
"""

from ._engine import evaluate_now
from ._lazy import LazyNode, evaluate_later
from ._slots import Pending, Ready, Slot, SupportsForce
from ._view import LazyView, is_lazy_view

__all__ = [
    "LazyNode",
    "LazyView",
    "Pending",
    "Ready",
    "Slot",
    "SupportsForce",
    "evaluate_later",
    "evaluate_now",
    "is_lazy_view",
]
