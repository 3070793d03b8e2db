from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass, field
from typing import Any, ClassVar, get_origin, get_type_hints

from typing_extensions import get_protocol_members

from structwire._internal.classification import TypeClassificationPolicy
from structwire._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from structwire._internal.schema_types import (
    NO_DEFAULT,
    FieldDescriptor,
    Ownership,
    TypeKind,
    Visibility,
)
from structwire._internal.type_checks import is_protocol_class, unwrap_optional, zero_value
from structwire.exceptions import StructWireInvalidConfigurationError


@dataclass(slots=True)
class StructSchemaExtractor:
    """Extracts field and method schemas from user classes.

    Schemas are computed once per class and memoized. The extractor also owns
    the two operations that depend on a schema: building a zero-valued
    prototype and cloning an instance.
    """

    policy: TypeClassificationPolicy = field(default_factory=TypeClassificationPolicy)
    _fields_by_class: dict[type[Any], tuple[FieldDescriptor, ...]] = field(default_factory=dict)

    def extract_fields(self, cls: type[Any]) -> tuple[FieldDescriptor, ...]:
        """Return the structural fields of a class in declaration order.

        Dataclasses contribute their ``dataclasses.fields``; other classes
        contribute their resolved class annotations, excluding ``ClassVar``.
        Pydantic settings models have no structural fields; their values are
        loaded from the environment.

        Args:
            cls: Struct class to describe.

        """
        cached = self._fields_by_class.get(cls)
        if cached is not None:
            return cached
        if is_pydantic_settings_subclass(cls):
            self._fields_by_class[cls] = ()
            return ()

        hints = self._resolved_type_hints(cls)
        if dataclasses.is_dataclass(cls):
            descriptors = tuple(
                self._describe_field(
                    name=dataclass_field.name,
                    annotation=hints.get(dataclass_field.name, dataclass_field.type),
                    default=_or_no_default(dataclass_field.default),
                    default_factory=_or_no_default(dataclass_field.default_factory),
                )
                for dataclass_field in dataclasses.fields(cls)
            )
        else:
            descriptors = tuple(
                self._describe_field(
                    name=name,
                    annotation=annotation,
                    default=getattr(cls, name, NO_DEFAULT),
                    default_factory=NO_DEFAULT,
                )
                for name, annotation in hints.items()
                if not _is_class_var(annotation)
            )

        self._fields_by_class[cls] = descriptors
        return descriptors

    def extract_methods(self, cls: type[Any]) -> frozenset[str]:
        """Return the method names an interface requires.

        Args:
            cls: Protocol or abstract class to describe.

        """
        if is_protocol_class(cls):
            return frozenset(
                member for member in get_protocol_members(cls) if callable(getattr(cls, member, None))
            )
        return frozenset(getattr(cls, "__abstractmethods__", frozenset()))

    def implements(self, cls: type[Any], methods: frozenset[str]) -> bool:
        """Return whether a struct class provides every method of a method set.

        Args:
            cls: Struct class being tested.
            methods: Required method names of an interface.

        """
        for method_name in methods:
            method = getattr(cls, method_name, None)
            if not callable(method) or getattr(method, "__isabstractmethod__", False):
                return False
        return True

    def zero_instance(self, cls: type[Any]) -> Any:
        """Build a zero-valued instance without calling ``__init__``.

        Fields take their declared default, then their default factory, and
        otherwise ``None`` for pointer-owned fields and the scalar zero value
        for value-owned ones.

        Args:
            cls: Struct class to instantiate.

        """
        instance = cls.__new__(cls)
        for descriptor in self.extract_fields(cls):
            object.__setattr__(instance, descriptor.name, self._field_zero_value(descriptor))
        return instance

    def clone(self, instance: Any) -> Any:
        """Return an independent copy of an instance.

        The instance is shallow-copied; value-owned struct fields are cloned
        recursively and value-owned scalar fields are shallow-copied. Pointer-owned
        and interface fields keep their references.

        Args:
            instance: Object to copy.

        """
        cls = type(instance)
        duplicate = copy.copy(instance)
        if not self.policy.is_struct(cls):
            return duplicate

        for descriptor in self.extract_fields(cls):
            if descriptor.is_pointer or descriptor.kind is TypeKind.INTERFACE:
                continue
            value = getattr(duplicate, descriptor.name, None)
            if value is None:
                continue
            if descriptor.kind is TypeKind.STRUCT:
                object.__setattr__(duplicate, descriptor.name, self.clone(value))
            else:
                object.__setattr__(duplicate, descriptor.name, copy.copy(value))
        return duplicate

    def _describe_field(
        self,
        *,
        name: str,
        annotation: Any,
        default: Any,
        default_factory: Any,
    ) -> FieldDescriptor:
        inner, is_optional = unwrap_optional(annotation)
        return FieldDescriptor(
            name=name,
            annotation=inner,
            kind=self.policy.classify(inner),
            visibility=Visibility.PRIVATE if name.startswith("_") else Visibility.PUBLIC,
            ownership=Ownership.POINTER if is_optional else Ownership.VALUE,
            default=default,
            default_factory=default_factory,
        )

    def _field_zero_value(self, descriptor: FieldDescriptor) -> Any:
        if descriptor.default is not NO_DEFAULT:
            return copy.copy(descriptor.default)
        if descriptor.default_factory is not NO_DEFAULT:
            return descriptor.default_factory()
        if descriptor.is_pointer or descriptor.kind is not TypeKind.SCALAR:
            return None
        return zero_value(descriptor.annotation)

    def _resolved_type_hints(self, cls: type[Any]) -> dict[str, Any]:
        try:
            return get_type_hints(cls, include_extras=True)
        except (AttributeError, NameError, TypeError) as error:
            msg = f"Unable to resolve field annotations of '{cls.__qualname__}': {error}"
            raise StructWireInvalidConfigurationError(msg) from error


def _or_no_default(value: Any) -> Any:
    return NO_DEFAULT if value is dataclasses.MISSING else value


def _is_class_var(annotation: Any) -> bool:
    return annotation is ClassVar or get_origin(annotation) is ClassVar


__all__ = ["StructSchemaExtractor"]
