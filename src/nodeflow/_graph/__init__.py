"""Graph module providing dependency graph abstractions.

This module contains:
- DependencyGraph[T]: A generic, immutable dependency relation with queries
- find_cycles: Depth-first cycle detection, one cycle path per root
- depth_scores / order_by_depth: The depth-based evaluation order
"""

from ._algorithms import depth_scores, find_cycles, order_by_depth
from ._dependency_graph import DependencyGraph

__all__ = ["DependencyGraph", "depth_scores", "find_cycles", "order_by_depth"]
