from __future__ import annotations

import pytest

from structwire._internal.injector import Injector
from structwire._internal.registry import Registry


@pytest.fixture()
def structwire_registry() -> Registry:
    """Fixture hook for the registry backing ``structwire_injector``.

    The default registry is empty. Override this fixture in your own test
    suite to register the structs, interfaces and factories under test.

    """
    return Registry()


@pytest.fixture()
def structwire_injector(structwire_registry: Registry) -> Injector:
    """Create a per-test injector over ``structwire_registry``.

    The fixture is function-scoped, so cached instances, bindings, delegates
    and definitions never leak between tests.

    Returns:
        A new ``Injector`` instance.

    """
    return Injector(structwire_registry)


__all__ = ["structwire_injector", "structwire_registry"]
