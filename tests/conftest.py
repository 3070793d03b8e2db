"""Shared pytest fixtures for structwire tests."""

import pytest

from structwire import Injector, Registry
from structwire._internal.schema import StructSchemaExtractor


@pytest.fixture()
def registry() -> Registry:
    """Empty registry."""
    return Registry()


@pytest.fixture()
def injector(registry: Registry) -> Injector:
    """Injector over the ``registry`` fixture with cycle detection enabled."""
    return Injector(registry)


@pytest.fixture()
def schemas() -> StructSchemaExtractor:
    """StructSchemaExtractor instance."""
    return StructSchemaExtractor()
