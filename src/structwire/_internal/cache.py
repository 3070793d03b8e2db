from __future__ import annotations

from collections.abc import Callable
from typing import Any

from structwire._internal.factories import FactoryEntry


class ObjectCache:
    """Name-keyed store of built instances with copy-on-write and copy-on-read.

    Every ``store`` keeps an independent copy and every ``find`` returns a new
    one, so mutating an instance handed out by the cache never changes what
    the cache hands out next.
    """

    def __init__(self, clone: Callable[[Any], Any]) -> None:
        self._clone = clone
        self._objects: dict[str, Any] = {}

    def store(self, name: str, instance: Any) -> None:
        self._objects[name] = self._clone(instance)

    def find(self, name: str) -> Any | None:
        if name not in self._objects:
            return None
        return self._clone(self._objects[name])

    def __contains__(self, name: object) -> bool:
        return name in self._objects

    def __len__(self) -> int:
        return len(self._objects)


class DelegateCache:
    """Name-keyed store of user-selected factories."""

    def __init__(self) -> None:
        self._delegates: dict[str, FactoryEntry] = {}

    def store(self, name: str, entry: FactoryEntry) -> None:
        self._delegates[name] = entry

    def find(self, name: str) -> FactoryEntry | None:
        return self._delegates.get(name)

    def __len__(self) -> int:
        return len(self._delegates)


__all__ = ["DelegateCache", "ObjectCache"]
