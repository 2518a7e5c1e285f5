"""Read-through view over a lazily evaluated graph."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, NoReturn

if TYPE_CHECKING:
    from ._slots import SupportsForce

_MISSING: Any = object()


class LazyView(Mapping[str, Any]):
    """A read-only mapping whose values are computed on first access.

    Looking up a key computes the nodes it depends on (and nothing else);
    computed values are cached by the underlying nodes. Iterating, ``len``
    and membership tests never trigger a computation.

    Example:
        >>> view = compiled.compute_later({"xs": range(100)})
        >>> view.is_realized("m")
        False
        >>> view["m"]
        49.5

    """

    __slots__ = ("__weakref__", "_hidden", "_slots")

    def __init__(self, slots: Mapping[str, SupportsForce], hidden: frozenset[str] = frozenset()) -> None:
        self._slots = slots
        self._hidden = hidden

    def __getitem__(self, key: str) -> Any:
        if key not in self:
            raise KeyError(key)
        return self._slots[key].force()

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at ``key``, or ``default`` if the key is absent.

        Unlike the generic ``Mapping.get``, errors raised while computing the
        node propagate instead of being mistaken for a missing key.
        """
        if key not in self:
            return default
        return self[key]

    def __contains__(self, key: object) -> bool:
        return key in self._slots and key not in self._hidden

    def __iter__(self) -> Iterator[str]:
        return (key for key in self._slots if key not in self._hidden)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def is_realized(self, key: str) -> bool:
        """Whether the value at ``key`` has already been computed.

        Raises:
            KeyError: If the key is not in the view.

        """
        if key not in self:
            raise KeyError(key)
        return self._slots[key].realized

    def realized(self) -> dict[str, Any]:
        """Return the values computed so far, without computing anything."""
        return {key: self._slots[key].force() for key in self if self._slots[key].realized}

    def __setitem__(self, key: str, value: Any) -> NoReturn:
        msg = "LazyView is read-only"
        raise TypeError(msg)

    def __delitem__(self, key: str) -> NoReturn:
        msg = "LazyView is read-only"
        raise TypeError(msg)

    def __repr__(self) -> str:
        entries = ", ".join(f"{key!r}: {self._render(key)}" for key in self)
        return f"LazyView({{{entries}}})"

    def _render(self, key: str) -> str:
        slot = self._slots[key]
        return repr(slot.force()) if slot.realized else "<pending>"


def is_lazy_view(obj: object) -> bool:
    """Return True if ``obj`` is a LazyView."""
    return isinstance(obj, LazyView)
