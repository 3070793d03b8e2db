from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Final

NO_DEFAULT: Final[Any] = object()
"""Marks a field or parameter that declares no default value."""


class TypeKind(Enum):
    """Defines how the engine treats a type it meets in a field or parameter."""

    STRUCT = auto()
    """A class with named fields that the engine constructs and populates."""

    INTERFACE = auto()
    """A Protocol or abstract class satisfied by an implementing struct."""

    SCALAR = auto()
    """Any other value. Scalars are only ever filled from definitions."""


class Visibility(Enum):
    """Defines whether the engine may write a field."""

    PUBLIC = auto()
    """The field is populated by the engine."""

    PRIVATE = auto()
    """The field name starts with an underscore and is left at its zero value."""


class Ownership(Enum):
    """Defines how a field holds the object assigned to it."""

    VALUE = auto()
    """The field owns its value, and clones of the owner clone the value too."""

    POINTER = auto()
    """The field is declared ``T | None`` and holds a shared reference."""


def qualified_name(cls: type[Any]) -> str:
    """Return the class-derived qualified name ``"{module}.{qualname}"``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def short_name(name: str) -> str:
    """Return the trailing dot-separated segment of a qualified name."""
    return name.rsplit(".", 1)[-1]


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A single structural field of a struct, in declaration order."""

    name: str
    """The attribute name of the field."""
    annotation: Any
    """The declared type with ``Optional`` and ``Annotated`` wrappers removed."""
    kind: TypeKind
    """How the engine classifies the declared type."""
    visibility: Visibility
    """Whether the engine populates the field."""
    ownership: Ownership
    """Whether the field owns its value or holds a reference."""
    default: Any = NO_DEFAULT
    """The declared default, or ``NO_DEFAULT``."""
    default_factory: Any = NO_DEFAULT
    """The declared dataclass default factory, or ``NO_DEFAULT``."""

    @property
    def is_private(self) -> bool:
        return self.visibility is Visibility.PRIVATE

    @property
    def is_pointer(self) -> bool:
        return self.ownership is Ownership.POINTER


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """A registration-time description of a struct or interface."""

    name: str
    """The qualified name the type is registered under."""
    cls: type[Any]
    """The Python class being described."""
    kind: TypeKind
    """Whether this is a struct or an interface."""
    fields: tuple[FieldDescriptor, ...] = ()
    """Structural fields, for structs."""
    methods: frozenset[str] = field(default_factory=frozenset)
    """Required method names, for interfaces."""

    @property
    def short_name(self) -> str:
        return short_name(self.name)


__all__ = [
    "NO_DEFAULT",
    "FieldDescriptor",
    "Ownership",
    "TypeDescriptor",
    "TypeKind",
    "Visibility",
    "qualified_name",
    "short_name",
]
