from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import pytest

from structwire import Registry, RegistryTable, TypeKind
from structwire.exceptions import StructWireInvalidConfigurationError


class Sender(Protocol):
    def send(self, message: str) -> None: ...


@dataclass
class SmtpSender:
    host: str = "localhost"

    def send(self, message: str) -> None:
        return None


@dataclass
class QueueSender:
    queue: str = "outbox"

    def send(self, message: str) -> None:
        return None


@dataclass
class Mailbox:
    sender: Sender
    root: Path | None = None


def make_mailbox() -> Mailbox:
    return Mailbox(sender=SmtpSender())


def make_untyped():
    return Mailbox(sender=SmtpSender())


class TestRegistration:
    def test_add_struct_uses_qualified_name(self, registry: Registry) -> None:
        descriptor = registry.add_struct(SmtpSender)

        assert descriptor.name == f"{__name__}.SmtpSender"
        assert descriptor.kind is TypeKind.STRUCT
        assert descriptor.short_name == "SmtpSender"

    def test_add_struct_with_custom_name(self, registry: Registry) -> None:
        registry.add_struct(SmtpSender, name="mail.Smtp")

        assert registry.name_of(SmtpSender) == "mail.Smtp"
        assert registry.find_struct("Smtp") is registry.find_struct_by_type(SmtpSender)

    def test_add_struct_with_exemplar(self, registry: Registry) -> None:
        exemplar = SmtpSender(host="mail.example.com")
        registry.add_struct(exemplar)
        exemplar.host = "changed"

        entry = registry.find_struct("SmtpSender")

        assert entry is not None
        assert registry.new_instance(entry).host == "mail.example.com"

    def test_add_struct_rejects_scalars_and_interfaces(self, registry: Registry) -> None:
        with pytest.raises(StructWireInvalidConfigurationError, match="Struct registration requires"):
            registry.add_struct(int)

        with pytest.raises(StructWireInvalidConfigurationError, match="Struct registration requires"):
            registry.add_struct(Sender)

    def test_add_interface_rejects_concrete_classes(self, registry: Registry) -> None:
        with pytest.raises(StructWireInvalidConfigurationError, match="Interface registration requires"):
            registry.add_interface(SmtpSender)

    def test_add_interface_records_methods(self, registry: Registry) -> None:
        descriptor = registry.add_interface(Sender)

        assert descriptor.kind is TypeKind.INTERFACE
        assert descriptor.methods == frozenset({"send"})

    def test_add_factory_requires_return_type_or_name(self, registry: Registry) -> None:
        with pytest.raises(StructWireInvalidConfigurationError, match="no class return annotation"):
            registry.add_factory(make_untyped)

        registry.add_factory(make_untyped, name="Mailbox")

        assert registry.find_factories("Mailbox")[0].func is make_untyped

    def test_table_registration(self) -> None:
        registry = Registry(
            RegistryTable(
                structs={"mail.Smtp": SmtpSender, "mail.Mailbox": Mailbox},
                interfaces={"mail.Sender": Sender},
                factories={"mail.Mailbox": [make_mailbox]},
            ),
        )

        assert registry.find_struct("Smtp") is not None
        assert registry.find_interface("mail.Sender") is not None
        assert [entry.func for entry in registry.find_factories("Mailbox")] == [make_mailbox]

    def test_decorators_return_the_target(self, registry: Registry) -> None:
        assert registry.interface(Sender) is Sender
        assert registry.struct(name="mail.Queue")(QueueSender) is QueueSender
        assert registry.factory(make_mailbox) is make_mailbox

        assert registry.name_of(QueueSender) == "mail.Queue"
        assert registry.find_interface_by_type(Sender) is not None

    def test_scan_module_registers_local_types(self, registry: Registry) -> None:
        registered = registry.scan_module(sys.modules[__name__])

        names = {descriptor.short_name for descriptor in registered}
        assert names == {"Sender", "SmtpSender", "QueueSender", "Mailbox"}
        assert registry.find_struct("Path") is None

    def test_scan_module_accepts_module_name(self, registry: Registry) -> None:
        registry.scan_module(__name__)

        assert registry.find_interface("Sender") is not None


class TestLookup:
    @pytest.fixture()
    def mail_registry(self, registry: Registry) -> Registry:
        registry.add_interface(Sender)
        registry.add_struct(SmtpSender)
        registry.add_struct(QueueSender)
        registry.add_struct(Mailbox)
        return registry

    def test_find_by_short_and_qualified_name(self, mail_registry: Registry) -> None:
        by_short = mail_registry.find_struct("SmtpSender")
        by_qualified = mail_registry.find_struct(f"{__name__}.SmtpSender")

        assert by_short is not None
        assert by_short is by_qualified

    def test_ambiguous_short_name_falls_back_to_exact_key(self, registry: Registry) -> None:
        registry.add_struct(SmtpSender, name="a.Sender")
        registry.add_struct(QueueSender, name="b.Sender")

        assert registry.find_struct("Sender") is None
        assert registry.find_struct("a.Sender") is not None

    def test_unknown_names_return_nothing(self, mail_registry: Registry) -> None:
        assert mail_registry.find_struct("Unknown") is None
        assert mail_registry.find_interface("SmtpSender") is None
        assert mail_registry.find_factories("Unknown") == []
        assert mail_registry.find_structs_implementing("Unknown") == []

    def test_find_structs_implementing(self, mail_registry: Registry) -> None:
        implementors = mail_registry.find_structs_implementing("Sender")

        assert {entry.descriptor.cls for entry in implementors} == {SmtpSender, QueueSender}

    def test_describe_unregistered_class(self, mail_registry: Registry) -> None:
        descriptor = mail_registry.describe(Path)

        assert descriptor.kind is TypeKind.SCALAR
        assert descriptor.fields == ()

    def test_name_of_unregistered_class(self, registry: Registry) -> None:
        assert registry.name_of(Mailbox) == f"{__name__}.Mailbox"

    def test_factories_added_after_lookup_are_found(self, mail_registry: Registry) -> None:
        assert mail_registry.find_factories("Mailbox") == []

        mail_registry.add_factory(make_mailbox)

        assert [entry.func for entry in mail_registry.find_factories("Mailbox")] == [make_mailbox]

    def test_factory_lookup_follows_later_custom_names(self, registry: Registry) -> None:
        registry.add_factory(make_mailbox)
        assert registry.find_factories(f"{__name__}.Mailbox") != []

        registry.add_struct(Mailbox, name="mail.Mailbox")

        assert [entry.func for entry in registry.find_factories("mail.Mailbox")] == [make_mailbox]


def test_registration_errors_are_logged(registry: Registry, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="structwire._internal.registry")

    with pytest.raises(StructWireInvalidConfigurationError):
        registry.add_struct(int)
    with pytest.raises(StructWireInvalidConfigurationError):
        registry.add_interface(SmtpSender)
    with pytest.raises(StructWireInvalidConfigurationError):
        registry.add_factory(make_untyped)

    messages = [record.getMessage() for record in caplog.records if record.levelno == logging.ERROR]
    assert len(messages) == 3
    assert messages[0].startswith("Struct registration requires")
    assert messages[1].startswith("Interface registration requires")
    assert "no class return annotation" in messages[2]
