from __future__ import annotations

from typing import Any, Final

MISSING: Final[Any] = object()
"""Returned by ``DefinitionTable.find`` when no definition matches."""


class BindingTable:
    """Explicit interface-to-struct overrides, keyed by qualified names."""

    def __init__(self) -> None:
        self._bindings: dict[str, str] = {}

    def bind(self, interface_name: str, struct_name: str) -> None:
        self._bindings[interface_name] = struct_name

    def find(self, interface_name: str) -> str | None:
        return self._bindings.get(interface_name)


class DefinitionTable:
    """Object-scoped and global field values.

    Object-scoped definitions are keyed by the object's short or qualified
    name and always win over global definitions of the same field.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, dict[str, Any]] = {}
        self._global_definitions: dict[str, Any] = {}

    def define(self, object_name: str, field_name: str, value: Any) -> None:
        self._definitions.setdefault(object_name, {})[field_name] = value

    def define_global(self, field_name: str, value: Any) -> None:
        self._global_definitions[field_name] = value

    def find(self, object_names: tuple[str, ...], field_name: str) -> Any:
        """Return the value defined for a field, or ``MISSING``.

        Args:
            object_names: Names of the owning object, most specific lookup first.
            field_name: Field being populated.

        """
        for object_name in object_names:
            definitions = self._definitions.get(object_name)
            if definitions is not None and field_name in definitions:
                return definitions[field_name]
        return self._global_definitions.get(field_name, MISSING)


__all__ = ["MISSING", "BindingTable", "DefinitionTable"]
