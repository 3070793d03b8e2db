from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from structwire._internal.cache import DelegateCache, ObjectCache
from structwire._internal.factories import FactoryArity, FactoryEntry, FactoryParameter
from structwire._internal.integrations.pydantic_settings import (
    is_pydantic_settings_subclass,
    load_settings,
)
from structwire._internal.registry import Registry, StructEntry
from structwire._internal.resolution_context import ResolutionContext
from structwire._internal.schema_types import (
    NO_DEFAULT,
    FieldDescriptor,
    TypeDescriptor,
    TypeKind,
    short_name,
)
from structwire._internal.tables import MISSING, BindingTable, DefinitionTable
from structwire._internal.type_checks import is_runtime_class, zero_value
from structwire.exceptions import (
    StructWireAmbiguousFactoryError,
    StructWireAmbiguousImplementationError,
    StructWireCircularDependencyError,
    StructWireInvalidConfigurationError,
    StructWireMethodNotFoundError,
    StructWireNoImplementationError,
    StructWireUnregisteredTypeError,
)

_ABSENT: Any = object()


@dataclass(frozen=True, slots=True)
class _Provision:
    """An instance chosen for an interface, and whether its fields still need building.

    Cached copies and factory output are complete and are never walked.
    """

    instance: Any
    name: str
    needs_build: bool


class Injector:
    """Build fully populated object graphs from registered types.

    ``make`` resolves a name to a struct (directly, or through an interface),
    then walks the struct's public fields in declaration order and fills each
    one. Scalars only come from definitions. Structs and interfaces come from
    the object cache, delegates, auto-discovered factories, or fresh
    prototypes that are built recursively, and struct fields honour
    definitions before any of those. Completed top-level builds are
    cached and handed out as independent copies. Factory output is never
    cached and never walked.

    The injector is not thread-safe. Serialize configuration calls and
    ``make`` calls in multi-threaded applications.
    """

    def __init__(
        self,
        registry: Registry | None = None,
        *,
        logger: logging.Logger | None = None,
        detect_cycles: bool = True,
    ) -> None:
        """Initialize an injector over a registry.

        Args:
            registry: Registry of structs, interfaces and factories. Defaults to
                an empty registry.
            logger: Logger receiving decision and fault messages. Defaults to
                this module's logger.
            detect_cycles: Raise ``StructWireCircularDependencyError`` when a
                struct type re-enters its own construction. When false, cyclic
                graphs recurse until Python's recursion limit.

        """
        self._registry = registry if registry is not None else Registry()
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._detect_cycles = detect_cycles
        self._objects = ObjectCache(clone=self._registry.schemas.clone)
        self._delegates = DelegateCache()
        self._bindings = BindingTable()
        self._definitions = DefinitionTable()

    @property
    def registry(self) -> Registry:
        """Return the registry this injector resolves names against."""
        return self._registry

    def make(self, name: str | type[Any]) -> Any:
        """Build an instance of a registered struct or interface.

        Args:
            name: Qualified name, unambiguous short name, or class of a
                registered struct or interface.

        Returns:
            A cached copy, a delegate or factory result, or a freshly built
            instance whose public fields are populated recursively.

        Raises:
            StructWireUnregisteredTypeError: If the name, or a field type, is not registered.
            StructWireAmbiguousImplementationError: If an interface has several
                implementations and no binding.
            StructWireNoImplementationError: If an interface has no implementation.
            StructWireAmbiguousFactoryError: If a type has several factories and no delegate.
            StructWireCircularDependencyError: If a struct depends on itself.

        """
        requested = self._normalize_name(name)
        self._logger.debug("Injector asked to provision '%s'", requested)

        entry, produced = self._resolve_requested(requested)
        if entry is None:
            return produced

        cache_name = self._registry.name_of(entry.descriptor.cls)
        cached = self._objects.find(cache_name)
        if cached is not None:
            self._logger.debug("'%s' was already provisioned in the cache, returning a copy", cache_name)
            return cached

        produced = self._call_delegate_or_factory(cache_name, entry.descriptor.cls)
        if produced is not _ABSENT:
            return produced

        instance = self._registry.new_instance(entry)
        self._build_fields(
            ResolutionContext(root=instance, current=instance, chain=(entry.descriptor.name,)),
        )
        self._objects.store(cache_name, instance)
        return instance

    def share(self, instance: Any) -> None:
        """Cache a copy of a prebuilt instance for every future use of its type."""
        name = self._registry.name_of(type(instance))
        self._objects.store(name, instance)
        self._logger.debug("Shared instance of '%s'", name)

    def bind(self, interface_name: str | type[Any], struct_name: str | type[Any]) -> None:
        """Select the struct injected wherever an interface is requested.

        Raises:
            StructWireInvalidConfigurationError: If either name is not registered.

        """
        interface = self._registry.find_interface(self._normalize_name(interface_name))
        if interface is None:
            msg = (
                f"Interface type '{interface_name}' not found in registry, did you register it?"
            )
            self._logger.error(msg)
            raise StructWireInvalidConfigurationError(msg)

        entry = self._registry.find_struct(self._normalize_name(struct_name))
        if entry is None:
            msg = f"Struct type '{struct_name}' not found in registry, did you register it?"
            self._logger.error(msg)
            raise StructWireInvalidConfigurationError(msg)

        self._bindings.bind(interface.name, entry.descriptor.name)
        self._logger.debug("Bound interface '%s' to '%s'", interface.name, entry.descriptor.name)

    def delegate(self, name: str | type[Any], factory: Any) -> None:
        """Delegate construction of a type to a factory.

        The factory's typed parameters are resolved on every call and its
        result is never cached, because it may differ between calls.

        Raises:
            StructWireInvalidConfigurationError: If ``factory`` is not callable.

        """
        delegate_name = self._normalize_name(name)
        if not callable(factory):
            msg = f"You can only delegate a callable as a factory for type '{delegate_name}'."
            self._logger.error(msg)
            raise StructWireInvalidConfigurationError(msg)

        entry = self._registry.factory_extractor.extract(factory)
        self._delegates.store(delegate_name, entry)
        self._logger.debug("Delegated '%s' to factory '%s'", delegate_name, entry.display_name)

    def define(self, object_name: str | type[Any], field_name: str, value: Any) -> None:
        """Define the value of one field on one struct type."""
        self._definitions.define(self._normalize_name(object_name), field_name, value)

    def define_global(self, field_name: str, value: Any) -> None:
        """Define the value of a field on every struct without an object-scoped definition."""
        self._definitions.define_global(field_name, value)

    def invoke(self, instance: Any, method_name: str, *args: Any) -> list[Any]:
        """Call a method on a built instance and return its results as a list.

        ``None`` becomes an empty list and a tuple is unpacked into its items.

        Raises:
            StructWireMethodNotFoundError: If the instance has no such method.

        """
        method = getattr(instance, method_name, None)
        if not callable(method):
            msg = f"Method '{method_name}' not found on object of type '{type(instance).__qualname__}'."
            self._logger.error(msg)
            raise StructWireMethodNotFoundError(msg)

        result = method(*args)
        if result is None:
            return []
        if isinstance(result, tuple):
            return list(result)
        return [result]

    def _normalize_name(self, name: str | type[Any]) -> str:
        if isinstance(name, str):
            return name
        return self._registry.name_of(name)

    def _resolve_requested(self, name: str) -> tuple[StructEntry | None, Any]:
        entry = self._registry.find_struct(name)
        if entry is not None:
            return entry, _ABSENT

        interface = self._registry.find_interface(name)
        if interface is None:
            msg = f"No type found in registry for name '{name}', did you forget to register it?"
            self._logger.error(msg)
            raise StructWireUnregisteredTypeError(msg)

        bound = self._find_bound_struct(interface)
        if bound is not None:
            return bound, _ABSENT

        produced = self._call_delegate_or_factory(interface.name, interface.cls)
        if produced is not _ABSENT:
            return None, produced

        return self._require_sole_implementor(interface), _ABSENT

    def _find_bound_struct(self, interface: TypeDescriptor) -> StructEntry | None:
        struct_name = self._bindings.find(interface.name)
        if struct_name is None:
            return None
        self._logger.debug("Interface '%s' is bound to '%s'", interface.name, struct_name)
        return self._registry.find_struct(struct_name)

    def _require_sole_implementor(self, interface: TypeDescriptor) -> StructEntry:
        implementors = self._registry.find_structs_implementing(interface.name)
        if not implementors:
            msg = (
                f"No implementing type was found for interface '{interface.name}'. "
                "Register exactly one implementing struct or delegate the interface to a factory."
            )
            self._logger.error(msg)
            raise StructWireNoImplementationError(msg)
        if len(implementors) > 1:
            names = ", ".join(sorted(entry.descriptor.name for entry in implementors))
            msg = (
                f"Multiple implementing types were found for interface '{interface.name}' "
                f"({names}), specify one with bind()."
            )
            self._logger.error(msg)
            raise StructWireAmbiguousImplementationError(msg)

        entry = implementors[0]
        self._logger.debug(
            "Single type '%s' implementing '%s' was found and provisioned",
            entry.descriptor.name,
            interface.name,
        )
        return entry

    def _require_concrete(self, interface: TypeDescriptor) -> StructEntry:
        return self._find_bound_struct(interface) or self._require_sole_implementor(interface)

    def _find_concrete(self, interface: TypeDescriptor) -> StructEntry | None:
        bound = self._find_bound_struct(interface)
        if bound is not None:
            return bound
        implementors = self._registry.find_structs_implementing(interface.name)
        return implementors[0] if len(implementors) == 1 else None

    def _require_interface(self, cls: type[Any], usage: str) -> TypeDescriptor:
        interface = self._registry.find_interface_by_type(cls)
        if interface is None:
            msg = (
                f"No interface found in registry for {usage} of type "
                f"'{self._registry.name_of(cls)}', did you forget to register it?"
            )
            self._logger.error(msg)
            raise StructWireUnregisteredTypeError(msg)
        return interface

    def _call_delegate_or_factory(
        self,
        name: str,
        cls: type[Any] | None = None,
        chain: tuple[str, ...] = (),
    ) -> Any:
        for delegate_name in (name, short_name(name)):
            delegate = self._delegates.find(delegate_name)
            if delegate is not None:
                self._logger.debug("Found delegate '%s' for '%s'", delegate.display_name, name)
                return self._invoke_factory(delegate, self._enter(chain, name))

        factories = self._registry.find_factories(name)
        if len(factories) > 1:
            msg = (
                f"More than one factory exists in registry for '{name}', "
                "you must delegate() one first."
            )
            self._logger.error(msg)
            raise StructWireAmbiguousFactoryError(msg)
        if factories:
            self._logger.debug(
                "Found single factory '%s' automatically in registry for '%s'",
                factories[0].display_name,
                name,
            )
            return self._invoke_factory(factories[0], self._enter(chain, name))

        if cls is not None and is_pydantic_settings_subclass(cls):
            return load_settings(cls)

        return _ABSENT

    def _invoke_factory(self, entry: FactoryEntry, chain: tuple[str, ...]) -> Any:
        if entry.arity is FactoryArity.NULLARY:
            self._logger.debug("No invocation args required for factory '%s'", entry.display_name)
            return entry.call([], {})

        self._logger.debug("Resolving invocation args for factory '%s'", entry.display_name)
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in entry.parameters:
            value = self._resolve_arg(entry, parameter, chain)
            if parameter.keyword_only:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return entry.call(args, kwargs)

    def _resolve_arg(
        self,
        entry: FactoryEntry,
        parameter: FactoryParameter,
        chain: tuple[str, ...],
    ) -> Any:
        if parameter.kind is TypeKind.SCALAR:
            if parameter.default is not NO_DEFAULT:
                return parameter.default
            self._logger.debug(
                "Scalar argument '%s' of factory '%s' receives its zero value",
                parameter.name,
                entry.display_name,
            )
            return zero_value(parameter.annotation)

        cls = parameter.annotation
        if parameter.kind is TypeKind.INTERFACE:
            produced = self._call_delegate_or_factory(self._registry.name_of(cls), cls, chain)
            if produced is not _ABSENT:
                return produced

            concrete = self._require_concrete(self._require_interface(cls, f"argument '{parameter.name}'"))
            if is_runtime_class(entry.returns) and entry.returns is concrete.descriptor.cls:
                # The factory produces the concrete type itself; calling it again would never end.
                return self._registry.new_instance(concrete)
            cls = concrete.descriptor.cls

        name = self._registry.name_of(cls)
        cached = self._objects.find(name)
        if cached is not None:
            self._logger.debug("Cached argument '%s' used for factory '%s'", name, entry.display_name)
            return cached

        produced = self._call_delegate_or_factory(name, cls, chain)
        if produced is not _ABSENT:
            return produced

        self._logger.debug("Provisioning new argument '%s' for factory '%s'", name, entry.display_name)
        instance = self._registry.schemas.zero_instance(cls)
        argument_chain = self._enter(chain, name)
        self._build_fields(ResolutionContext(root=instance, current=instance, chain=argument_chain))
        return instance

    def _build_fields(self, context: ResolutionContext) -> None:
        descriptor = self._registry.describe(type(context.current))
        self._logger.debug(
            "Object '%s' has %d field(s) at depth %d",
            descriptor.name,
            len(descriptor.fields),
            context.depth,
        )

        for field in descriptor.fields:
            if field.is_private:
                self._logger.debug(
                    "Found private field '%s' on '%s', ignoring",
                    field.name,
                    descriptor.name,
                )
                continue

            self._logger.debug(
                "Found %s field '%s' on '%s'",
                field.kind.name.lower(),
                field.name,
                descriptor.name,
            )
            if field.kind is TypeKind.INTERFACE:
                self._build_interface_field(context, field)
            elif field.kind is TypeKind.SCALAR:
                self._build_scalar_field(context, descriptor, field)
            else:
                self._build_struct_field(context, descriptor, field)

    def _build_interface_field(self, context: ResolutionContext, field: FieldDescriptor) -> None:
        interface = self._require_interface(field.annotation, f"field '{field.name}'")
        provision = self._provision_interface(interface, context.chain)
        _assign(context.current, field, provision.instance)
        if provision.needs_build:
            self._descend(context, provision.instance, provision.name)

    def _provision_interface(self, interface: TypeDescriptor, chain: tuple[str, ...]) -> _Provision:
        concrete = self._find_concrete(interface)
        if concrete is not None:
            name = self._registry.name_of(concrete.descriptor.cls)
            cached = self._objects.find(name)
            if cached is not None:
                self._logger.debug("'%s' was already provisioned in the cache, returning a copy", name)
                self._objects.store(name, cached)
                return _Provision(instance=cached, name=name, needs_build=False)

            produced = self._call_delegate_or_factory(name, concrete.descriptor.cls, chain)
            if produced is not _ABSENT:
                return _Provision(instance=produced, name=name, needs_build=False)

        produced = self._call_delegate_or_factory(interface.name, interface.cls, chain)
        if produced is not _ABSENT:
            return _Provision(instance=produced, name=interface.name, needs_build=False)

        concrete = self._require_concrete(interface)
        return _Provision(
            instance=self._registry.new_instance(concrete),
            name=concrete.descriptor.name,
            needs_build=True,
        )

    def _build_scalar_field(
        self,
        context: ResolutionContext,
        descriptor: TypeDescriptor,
        field: FieldDescriptor,
    ) -> None:
        value = self._definitions.find((descriptor.short_name, descriptor.name), field.name)
        if value is not MISSING:
            self._logger.debug("Definition found for field '%s' on '%s'", field.name, descriptor.name)
            _assign(context.current, field, value)

    def _build_struct_field(
        self,
        context: ResolutionContext,
        descriptor: TypeDescriptor,
        field: FieldDescriptor,
    ) -> None:
        value = self._definitions.find((descriptor.short_name, descriptor.name), field.name)
        if value is not MISSING:
            self._logger.debug("Definition found for field '%s' on '%s'", field.name, descriptor.name)
            _assign(context.current, field, value)
            return

        name = self._registry.name_of(field.annotation)
        cached = self._objects.find(name)
        if cached is not None:
            self._logger.debug("'%s' was already provisioned in the cache, returning a copy", name)
            _assign(context.current, field, cached)
            self._objects.store(name, cached)
            return

        produced = self._call_delegate_or_factory(name, field.annotation, context.chain)
        if produced is not _ABSENT:
            _assign(context.current, field, produced)
            return

        entry = self._registry.find_struct_by_type(field.annotation)
        if entry is None:
            msg = (
                f"No type found in registry for field '{field.name}' of type '{name}' "
                f"on '{descriptor.name}', did you forget to register it?"
            )
            self._logger.error(msg)
            raise StructWireUnregisteredTypeError(msg)

        instance = self._registry.new_instance(entry)
        _assign(context.current, field, instance)
        self._descend(context, instance, entry.descriptor.name)

    def _descend(self, context: ResolutionContext, instance: Any, name: str) -> None:
        self._enter(context.chain, name)
        self._build_fields(context.descend(instance, name))

    def _enter(self, chain: tuple[str, ...], name: str) -> tuple[str, ...]:
        if self._detect_cycles and name in chain:
            msg = f"Circular dependency detected: {' -> '.join((*chain, name))}"
            self._logger.error(msg)
            raise StructWireCircularDependencyError(msg)
        return (*chain, name)


def _assign(owner: Any, field: FieldDescriptor, value: Any) -> None:
    object.__setattr__(owner, field.name, value)


__all__ = ["Injector"]
