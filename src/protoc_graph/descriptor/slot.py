"""A reference that is filled in exactly once, during the resolve pass."""

from __future__ import annotations

from typing import Generic, TypeVar

from protoc_graph.errors import NotResolvedError

T = TypeVar("T")

_UNSET = object()


class Slot(Generic[T]):
    """Unset until the resolve pass sets it; set exactly once."""

    __slots__ = ("_owner", "_what", "_value")

    def __init__(self, owner: str, what: str):
        self._owner = owner
        self._what = what
        self._value = _UNSET

    @property
    def is_set(self) -> bool:
        return self._value is not _UNSET

    def set(self, value: T) -> None:
        if self._value is not _UNSET:
            raise NotResolvedError(f"{self._owner}: {self._what} already resolved")
        self._value = value

    def get(self) -> T:
        if self._value is _UNSET:
            raise NotResolvedError(
                f"{self._owner}: {self._what} read before the resolve pass"
            )
        return self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self._value is _UNSET:
            return f"Slot({self._what}=<unset>)"
        return f"Slot({self._what}={self._value!r})"
