from __future__ import annotations

import dataclasses
import importlib
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import ModuleType
from typing import TYPE_CHECKING, Any, Literal, TypeVar, overload

from structwire._internal.factories import FactoryEntry, FactoryEntryExtractor
from structwire._internal.schema import StructSchemaExtractor
from structwire._internal.schema_types import TypeDescriptor, TypeKind, qualified_name, short_name
from structwire._internal.type_checks import is_interface_class, is_runtime_class
from structwire.exceptions import StructWireInvalidConfigurationError

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")
C = TypeVar("C", bound=type[Any])
F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RegistryTable:
    """A hand-written or generated table of registrations.

    Keys are the qualified names the targets are registered under. Struct
    targets may be classes or exemplar instances.
    """

    structs: Mapping[str, Any] = field(default_factory=dict)
    interfaces: Mapping[str, type[Any]] = field(default_factory=dict)
    factories: Mapping[str, Sequence[Callable[..., Any]]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class StructEntry:
    """A registered struct: its descriptor and optional exemplar instance."""

    descriptor: TypeDescriptor
    exemplar: Any = None
    """User-supplied prototype. ``None`` means the zero-valued prototype."""


@dataclass(frozen=True, slots=True)
class _FactoryRegistration:
    name: str | None
    entry: FactoryEntry


class Registry:
    """Catalogue of struct prototypes, interface descriptors, and factories.

    Every lookup accepts a fully qualified name or, when exactly one registered
    name ends with it, a short name without dots.
    """

    def __init__(self, *tables: RegistryTable) -> None:
        self._structs: dict[str, StructEntry] = {}
        self._interfaces: dict[str, TypeDescriptor] = {}
        self._factories: list[_FactoryRegistration] = []
        self._factory_index: dict[str, list[FactoryEntry]] | None = None
        self._names_by_class: dict[type[Any], str] = {}
        self._schemas = StructSchemaExtractor()
        self._factory_extractor = FactoryEntryExtractor(policy=self._schemas.policy)
        for table in tables:
            self.add(table)

    @property
    def schemas(self) -> StructSchemaExtractor:
        return self._schemas

    @property
    def factory_extractor(self) -> FactoryEntryExtractor:
        return self._factory_extractor

    def add(self, table: RegistryTable) -> Self:
        """Register every entry of a table."""
        for name, target in table.structs.items():
            self.add_struct(target, name=name)
        for name, interface in table.interfaces.items():
            self.add_interface(interface, name=name)
        for name, factories in table.factories.items():
            for factory in factories:
                self.add_factory(factory, name=name)
        return self

    def add_struct(self, target: Any, *, name: str | None = None) -> TypeDescriptor:
        """Register a struct class, or an instance used as its prototype.

        Args:
            target: Struct class, or an exemplar instance of one.
            name: Qualified name to register under. Defaults to ``"{module}.{qualname}"``.

        Raises:
            StructWireInvalidConfigurationError: If the target is not a struct.

        """
        cls = target if is_runtime_class(target) else type(target)
        if not self._schemas.policy.is_struct(cls):
            msg = f"Struct registration requires a class with fields, got {target!r}."
            logger.error(msg)
            raise StructWireInvalidConfigurationError(msg)

        descriptor = TypeDescriptor(
            name=name or qualified_name(cls),
            cls=cls,
            kind=TypeKind.STRUCT,
            fields=self._schemas.extract_fields(cls),
        )
        exemplar = None if target is cls else self._schemas.clone(target)
        self._structs[descriptor.name] = StructEntry(descriptor=descriptor, exemplar=exemplar)
        self._names_by_class[cls] = descriptor.name
        self._factory_index = None
        logger.debug(
            "Registered struct '%s' with %d field(s)",
            descriptor.name,
            len(descriptor.fields),
        )
        return descriptor

    def add_interface(self, cls: type[Any], *, name: str | None = None) -> TypeDescriptor:
        """Register a Protocol or abstract class as an interface.

        Raises:
            StructWireInvalidConfigurationError: If the class is neither.

        """
        if not is_interface_class(cls):
            msg = f"Interface registration requires a Protocol or abstract class, got {cls!r}."
            logger.error(msg)
            raise StructWireInvalidConfigurationError(msg)

        descriptor = TypeDescriptor(
            name=name or qualified_name(cls),
            cls=cls,
            kind=TypeKind.INTERFACE,
            methods=self._schemas.extract_methods(cls),
        )
        self._interfaces[descriptor.name] = descriptor
        self._names_by_class[cls] = descriptor.name
        self._factory_index = None
        logger.debug(
            "Registered interface '%s' requiring %s",
            descriptor.name,
            sorted(descriptor.methods),
        )
        return descriptor

    def add_factory(self, func: Callable[..., Any], *, name: str | None = None) -> FactoryEntry:
        """Register an auto-discovered factory for the type it returns.

        Args:
            func: Factory callable. Its return annotation names the produced type.
            name: Qualified name of the produced type, when not inferable.

        Raises:
            StructWireInvalidConfigurationError: If the produced type is unknown.

        """
        entry = self._factory_extractor.extract(func)
        if name is None and not is_runtime_class(entry.returns):
            msg = (
                f"Factory '{entry.display_name}' has no class return annotation; "
                "pass the produced type name explicitly."
            )
            logger.error(msg)
            raise StructWireInvalidConfigurationError(msg)
        self._factories.append(_FactoryRegistration(name=name, entry=entry))
        self._factory_index = None
        logger.debug("Registered factory '%s'", entry.display_name)
        return entry

    @overload
    def struct(self, target: C, *, name: str | None = None) -> C: ...

    @overload
    def struct(
        self,
        target: Literal["from_decorator"] = "from_decorator",
        *,
        name: str | None = None,
    ) -> Callable[[C], C]: ...

    def struct(
        self,
        target: C | Literal["from_decorator"] = "from_decorator",
        *,
        name: str | None = None,
    ) -> C | Callable[[C], C]:
        """Register a struct class, directly or as a class decorator.

        Examples:
            .. code-block:: python

                @registry.struct
                @dataclass
                class Mailer:
                    transport: Transport

        """
        if target == "from_decorator":

            def decorator(decorated: C) -> C:
                self.add_struct(decorated, name=name)
                return decorated

            return decorator

        self.add_struct(target, name=name)
        return target

    @overload
    def interface(self, target: C, *, name: str | None = None) -> C: ...

    @overload
    def interface(
        self,
        target: Literal["from_decorator"] = "from_decorator",
        *,
        name: str | None = None,
    ) -> Callable[[C], C]: ...

    def interface(
        self,
        target: C | Literal["from_decorator"] = "from_decorator",
        *,
        name: str | None = None,
    ) -> C | Callable[[C], C]:
        """Register an interface class, directly or as a class decorator."""
        if target == "from_decorator":

            def decorator(decorated: C) -> C:
                self.add_interface(decorated, name=name)
                return decorated

            return decorator

        self.add_interface(target, name=name)
        return target

    @overload
    def factory(self, target: F, *, name: str | None = None) -> F: ...

    @overload
    def factory(
        self,
        target: Literal["from_decorator"] = "from_decorator",
        *,
        name: str | None = None,
    ) -> Callable[[F], F]: ...

    def factory(
        self,
        target: F | Literal["from_decorator"] = "from_decorator",
        *,
        name: str | None = None,
    ) -> F | Callable[[F], F]:
        """Register a factory function, directly or as a function decorator."""
        if target == "from_decorator":

            def decorator(decorated: F) -> F:
                self.add_factory(decorated, name=name)
                return decorated

            return decorator

        self.add_factory(target, name=name)
        return target

    def scan_module(self, module: ModuleType | str) -> list[TypeDescriptor]:
        """Register the dataclasses and interfaces defined in a module.

        Classes imported into the module from elsewhere are ignored.

        Args:
            module: Module object or importable module name.

        Returns:
            Descriptors of the registered types, in module order.

        """
        if isinstance(module, str):
            module = importlib.import_module(module)

        registered: list[TypeDescriptor] = []
        for candidate in vars(module).values():
            if not is_runtime_class(candidate) or candidate.__module__ != module.__name__:
                continue
            if is_interface_class(candidate):
                registered.append(self.add_interface(candidate))
            elif dataclasses.is_dataclass(candidate) and self._schemas.policy.is_struct(candidate):
                registered.append(self.add_struct(candidate))
        logger.debug("Scanned module '%s': %d type(s) registered", module.__name__, len(registered))
        return registered

    def name_of(self, cls: type[Any]) -> str:
        """Return the registered name of a class, else its class-derived qualified name."""
        return self._names_by_class.get(cls) or qualified_name(cls)

    def describe(self, cls: type[Any]) -> TypeDescriptor:
        """Return the descriptor of any class, registered or not."""
        name = self._names_by_class.get(cls)
        if name is not None:
            if name in self._structs:
                return self._structs[name].descriptor
            if name in self._interfaces:
                return self._interfaces[name]

        kind = self._schemas.policy.classify(cls)
        return TypeDescriptor(
            name=self.name_of(cls),
            cls=cls,
            kind=kind,
            fields=self._schemas.extract_fields(cls) if kind is TypeKind.STRUCT else (),
            methods=self._schemas.extract_methods(cls) if kind is TypeKind.INTERFACE else frozenset(),
        )

    def new_instance(self, entry: StructEntry) -> Any:
        """Return a fresh copy of a struct's prototype."""
        if entry.exemplar is not None:
            return self._schemas.clone(entry.exemplar)
        return self._schemas.zero_instance(entry.descriptor.cls)

    def find_struct(self, name: str) -> StructEntry | None:
        return _lookup(self._structs, name)

    def find_interface(self, name: str) -> TypeDescriptor | None:
        return _lookup(self._interfaces, name)

    def find_struct_by_type(self, cls: type[Any]) -> StructEntry | None:
        name = self._names_by_class.get(cls)
        return self._structs.get(name) if name is not None else None

    def find_interface_by_type(self, cls: type[Any]) -> TypeDescriptor | None:
        name = self._names_by_class.get(cls)
        return self._interfaces.get(name) if name is not None else None

    def find_structs_implementing(self, name: str) -> list[StructEntry]:
        """Return every registered struct whose methods satisfy an interface."""
        interface = self.find_interface(name)
        if interface is None:
            return []
        return [
            entry
            for entry in self._structs.values()
            if self._schemas.implements(entry.descriptor.cls, interface.methods)
        ]

    def find_factories(self, name: str) -> list[FactoryEntry]:
        """Return the auto-discovered factories producing a type."""
        if self._factory_index is None:
            # Keys depend on registered names, so any registration drops the index.
            self._factory_index = {}
            for registration in self._factories:
                key = registration.name or self.name_of(registration.entry.returns)
                self._factory_index.setdefault(key, []).append(registration.entry)
        return _lookup(self._factory_index, name) or []


def _lookup(entries: Mapping[str, T], name: str) -> T | None:
    if "." not in name:
        matches = [value for key, value in entries.items() if short_name(key) == name]
        if len(matches) == 1:
            return matches[0]
    return entries.get(name)


__all__ = ["Registry", "RegistryTable", "StructEntry"]
