from __future__ import annotations

from structwire._internal.factories import FactoryArity, FactoryEntry, FactoryParameter
from structwire._internal.schema_types import (
    FieldDescriptor,
    Ownership,
    TypeDescriptor,
    TypeKind,
    Visibility,
)

__all__ = [
    "FactoryArity",
    "FactoryEntry",
    "FactoryParameter",
    "FieldDescriptor",
    "Ownership",
    "TypeDescriptor",
    "TypeKind",
    "Visibility",
]
