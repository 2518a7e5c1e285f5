"""Decorators for declaring graph nodes from plain functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, overload

from ._ir import make_node

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ._ir import NodeSpec


@overload
def node(
    func: Callable[..., Any],
    /,
    *,
    deps: Iterable[str] | None = None,
    parallel: bool = False,
) -> NodeSpec: ...


@overload
def node(
    *,
    deps: Iterable[str] | None = None,
    parallel: bool = False,
) -> Callable[[Callable[..., Any]], NodeSpec]: ...


def node(
    func: Callable[..., Any] | None = None,
    /,
    *,
    deps: Iterable[str] | None = None,
    parallel: bool = False,
) -> NodeSpec | Callable[[Callable[..., Any]], NodeSpec]:
    """Declare a graph node.

    Works as a bare decorator, a decorator factory, or a plain call.
    Dependencies are taken from ``deps`` or, when omitted, from the
    function's parameter names. Either way they are fixed at declaration time.

    Example:
        >>> @node
        ... def n(xs):
        ...     return len(xs)
        >>> n.dependencies
        ('xs',)
        >>> mean = node(deps=["xs", "n"])(lambda values, count: sum(values) / count)

    """
    if func is not None:
        return make_node(func, deps, parallel=parallel)

    def decorator(f: Callable[..., Any]) -> NodeSpec:
        return make_node(f, deps, parallel=parallel)

    return decorator


@overload
def pnode(func: Callable[..., Any], /, *, deps: Iterable[str] | None = None) -> NodeSpec: ...


@overload
def pnode(*, deps: Iterable[str] | None = None) -> Callable[[Callable[..., Any]], NodeSpec]: ...


def pnode(
    func: Callable[..., Any] | None = None,
    /,
    *,
    deps: Iterable[str] | None = None,
) -> NodeSpec | Callable[[Callable[..., Any]], NodeSpec]:
    """Like `node`, but flags the node for background execution.

    Use this for expensive nodes only.
    """
    if func is not None:
        return make_node(func, deps, parallel=True)
    return node(deps=deps, parallel=True)
