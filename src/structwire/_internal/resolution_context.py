from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ResolutionContext:
    """Per-call state threaded through a recursive field build.

    ``root`` is the object ultimately returned to the caller and ``current``
    the object whose fields are being populated. Both are live references into
    the same graph, so writes made at any depth are visible from the root.
    ``chain`` lists the qualified names of the structs under construction,
    outermost first.
    """

    root: Any
    current: Any
    chain: tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.chain)

    def descend(self, instance: Any, name: str) -> ResolutionContext:
        return ResolutionContext(root=self.root, current=instance, chain=(*self.chain, name))


__all__ = ["ResolutionContext"]
