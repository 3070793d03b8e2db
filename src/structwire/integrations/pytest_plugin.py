from __future__ import annotations

from structwire._internal.integrations.pytest_plugin import (
    structwire_injector,
    structwire_registry,
)

__all__ = ["structwire_injector", "structwire_registry"]
