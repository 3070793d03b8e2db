from structwire.exceptions import (
    StructWireAmbiguousFactoryError,
    StructWireAmbiguousImplementationError,
    StructWireCircularDependencyError,
    StructWireError,
    StructWireInvalidConfigurationError,
    StructWireMethodNotFoundError,
    StructWireNoImplementationError,
    StructWireUnregisteredTypeError,
)
from structwire.injector import Injector
from structwire.registry import Registry, RegistryTable, StructEntry
from structwire.types import (
    FactoryArity,
    FactoryEntry,
    FieldDescriptor,
    Ownership,
    TypeDescriptor,
    TypeKind,
    Visibility,
)

__all__ = [
    "FactoryArity",
    "FactoryEntry",
    "FieldDescriptor",
    "Injector",
    "Ownership",
    "Registry",
    "RegistryTable",
    "StructEntry",
    "StructWireAmbiguousFactoryError",
    "StructWireAmbiguousImplementationError",
    "StructWireCircularDependencyError",
    "StructWireError",
    "StructWireInvalidConfigurationError",
    "StructWireMethodNotFoundError",
    "StructWireNoImplementationError",
    "StructWireUnregisteredTypeError",
    "TypeDescriptor",
    "TypeKind",
    "Visibility",
]
