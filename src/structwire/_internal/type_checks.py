from __future__ import annotations

import inspect
import types
from typing import Annotated, Any, TypeGuard, Union, get_args, get_origin

_ZERO_CONSTRUCTIBLE_BUILTINS: tuple[type[Any], ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    list,
    dict,
    set,
    frozenset,
    tuple,
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_protocol_class(candidate: object) -> bool:
    """Return true when candidate is a ``typing.Protocol`` subclass."""
    return is_runtime_class(candidate) and bool(getattr(candidate, "_is_protocol", False))


def is_interface_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate declares a method set instead of fields.

    Protocols and abstract base classes are interfaces.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    if not is_runtime_class(candidate):
        return False
    return is_protocol_class(candidate) or inspect.isabstract(candidate)


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Strip ``Annotated`` metadata and a ``None`` union member from an annotation.

    Returns the inner annotation and whether ``None`` was part of the union.
    Unions of several non-``None`` members are returned unchanged.

    Args:
        annotation: Field or parameter annotation to unwrap.

    """
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [member for member in get_args(annotation) if member is not type(None)]
        is_optional = len(members) != len(get_args(annotation))
        if len(members) == 1:
            inner, _ = unwrap_optional(members[0])
            return inner, is_optional
        return annotation, is_optional

    return annotation, False


def zero_value(annotation: Any) -> Any:
    """Return the zero value of a scalar annotation.

    Builtin containers and numbers are constructed empty, generic aliases use
    their origin, and every other annotation has ``None`` as zero value.

    Args:
        annotation: Annotation whose zero value is requested.

    """
    origin = get_origin(annotation)
    candidate = origin if is_runtime_class(origin) else annotation
    if is_runtime_class(candidate) and candidate in _ZERO_CONSTRUCTIBLE_BUILTINS:
        return candidate()
    return None


__all__ = [
    "is_interface_class",
    "is_protocol_class",
    "is_runtime_class",
    "unwrap_optional",
    "zero_value",
]
