class StructWireError(Exception):
    """Represent a base class for all StructWire-specific failures.

    Catch this type when you want to handle any StructWire error path without
    matching each concrete exception class individually. Every StructWire error
    is a configuration error: it is never retried and a failed ``make`` yields
    no usable instance.
    """


class StructWireUnregisteredTypeError(StructWireError):
    """Signal that a requested name or field type is absent from the registry.

    Raised by ``Injector.make`` when the name matches neither a struct nor an
    interface, and while building fields when a struct-typed field has no
    definition, cached instance, delegate, factory, or registered prototype.

    Typical fixes include registering the type with ``Registry.add_struct`` or
    ``Registry.add_interface``, sharing a prebuilt instance, or delegating its
    construction to a factory.
    """


class StructWireAmbiguousImplementationError(StructWireError):
    """Signal that more than one registered struct implements an interface.

    Typical fix is calling ``Injector.bind(interface_name, struct_name)`` to
    select one implementation, or delegating the interface to a factory.
    """


class StructWireNoImplementationError(StructWireError):
    """Signal that no registered struct implements a requested interface.

    Typical fixes include registering an implementing struct or delegating the
    interface to a factory.
    """


class StructWireAmbiguousFactoryError(StructWireError):
    """Signal that several auto-discovered factories produce the same type.

    Auto-discovered factories are only used when exactly one exists per type.
    Typical fix is calling ``Injector.delegate(type_name, factory)`` to select
    the factory explicitly.
    """


class StructWireInvalidConfigurationError(StructWireError):
    """Signal invalid registration or injector configuration.

    Raised by ``Injector.bind`` when either name is unregistered, by
    ``Injector.delegate`` when the factory is not callable, and by the registry
    when a registration target cannot be described.
    """


class StructWireMethodNotFoundError(StructWireInvalidConfigurationError):
    """Signal that ``Injector.invoke`` was asked for a missing method."""


class StructWireCircularDependencyError(StructWireError):
    """Signal that a struct type depends on itself through its fields.

    Raised while building fields when a struct type re-enters its own chain of
    construction. The message lists the chain of qualified names.

    Typical fixes include making one side of the cycle a pointer-owned field
    filled by ``Injector.share`` or a factory, or disabling detection with
    ``Injector(detect_cycles=False)``.
    """
