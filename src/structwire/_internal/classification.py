from __future__ import annotations

import datetime
import decimal
import enum
import pathlib
import uuid
from dataclasses import dataclass
from typing import Any, TypeGuard

from structwire._internal.schema_types import TypeKind
from structwire._internal.type_checks import is_interface_class, is_runtime_class

_NON_STRUCT_MODULES = frozenset({"builtins", "typing", "typing_extensions"})


@dataclass(frozen=True, slots=True)
class TypeClassificationPolicy:
    """Internal policy deciding whether an annotation is a struct, interface, or scalar."""

    scalar_base_types: tuple[type[Any], ...] = (
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
        enum.Enum,
    )

    def is_struct(self, candidate: object) -> TypeGuard[type[Any]]:
        """Return true when a candidate is a class whose fields can be built.

        Args:
            candidate: Value being checked for eligibility or runtime type constraints.

        """
        if not is_runtime_class(candidate):
            return False
        if candidate.__module__ in _NON_STRUCT_MODULES:
            return False
        if is_interface_class(candidate):
            return False
        if issubclass(candidate, type):
            return False
        return not issubclass(candidate, self.scalar_base_types)

    def classify(self, annotation: object) -> TypeKind:
        """Return the kind of an already unwrapped annotation.

        Args:
            annotation: Annotation with ``Optional`` and ``Annotated`` wrappers removed.

        """
        if is_interface_class(annotation):
            return TypeKind.INTERFACE
        if self.is_struct(annotation):
            return TypeKind.STRUCT
        return TypeKind.SCALAR


__all__ = ["TypeClassificationPolicy"]
