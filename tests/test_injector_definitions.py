from __future__ import annotations

from dataclasses import dataclass

import pytest

from structwire import Injector, Registry


@dataclass
class Endpoint:
    host: str = ""
    port: int = 0


@dataclass
class Mirror:
    host: str = ""
    timeout: float | None = None


@dataclass
class Client:
    endpoint: Endpoint
    mirror: Mirror
    name: str = ""


@pytest.fixture()
def client_registry(registry: Registry) -> Registry:
    for cls in (Endpoint, Mirror, Client):
        registry.add_struct(cls)
    return registry


def test_object_definition_sets_scalar_field(client_registry: Registry) -> None:
    injector = Injector(client_registry)
    injector.define(Endpoint, "host", "api.example.com")
    injector.define("Endpoint", "port", 443)

    endpoint = injector.make(Client).endpoint

    assert endpoint == Endpoint(host="api.example.com", port=443)


def test_global_definition_applies_to_every_struct(client_registry: Registry) -> None:
    injector = Injector(client_registry)
    injector.define_global("host", "localhost")

    client = injector.make(Client)

    assert client.endpoint.host == "localhost"
    assert client.mirror.host == "localhost"


def test_object_definition_wins_over_global_definition(client_registry: Registry) -> None:
    injector = Injector(client_registry)
    injector.define_global("host", "localhost")
    injector.define(Mirror, "host", "mirror.example.com")

    client = injector.make(Client)

    assert client.endpoint.host == "localhost"
    assert client.mirror.host == "mirror.example.com"


def test_pointer_scalar_field_is_defined(client_registry: Registry) -> None:
    injector = Injector(client_registry)
    injector.define(Mirror, "timeout", 2.5)

    assert injector.make(Client).mirror.timeout == 2.5


def test_undefined_scalar_keeps_zero_value(client_registry: Registry) -> None:
    injector = Injector(client_registry)

    client = injector.make(Client)

    assert client.name == ""
    assert client.mirror.timeout is None


def test_definition_of_struct_field_is_assigned_as_is(client_registry: Registry) -> None:
    injector = Injector(client_registry)
    endpoint = Endpoint(host="defined", port=1)
    injector.define(Client, "endpoint", endpoint)
    injector.define_global("port", 8080)

    client = injector.make(Client)

    assert client.endpoint is endpoint
    assert client.endpoint.port == 1
