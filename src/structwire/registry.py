from __future__ import annotations

from structwire._internal.registry import Registry, RegistryTable, StructEntry

__all__ = ["Registry", "RegistryTable", "StructEntry"]
