import pytest
from google.protobuf import descriptor_pb2 as d2

from protoc_graph.descriptor.graph import build_graph
from protoc_graph.errors import DuplicateRegistrationError
from protoc_graph.registry import DeclarationKind, Registry

FD = d2.FieldDescriptorProto


def _request_files():
    one = d2.FileDescriptorProto(
        name="one.proto",
        package="shop",
        message_type=[
            d2.DescriptorProto(
                name="Order",
                nested_type=[d2.DescriptorProto(name="Line")],
                enum_type=[d2.EnumDescriptorProto(
                    name="State", value=[d2.EnumValueDescriptorProto(name="OPEN", number=0)],
                )],
            ),
        ],
        enum_type=[d2.EnumDescriptorProto(
            name="Currency", value=[d2.EnumValueDescriptorProto(name="EUR", number=0)],
        )],
        service=[d2.ServiceDescriptorProto(name="Orders")],
        extension=[FD(
            name="tag", number=100, type=FD.TYPE_STRING,
            label=FD.LABEL_OPTIONAL, extendee=".shop.Order",
        )],
    )
    two = d2.FileDescriptorProto(
        name="two.proto",
        package="billing",
        message_type=[d2.DescriptorProto(name="Invoice")],
    )
    return [one, two]


@pytest.fixture
def registry():
    return build_graph(_request_files(), ["one.proto"]).registry


class TestRegistration:
    def test_register_and_lookup(self):
        registry = Registry()
        sentinel = object()
        registry.register(DeclarationKind.MESSAGE, "a.B", sentinel)
        assert registry.lookup(DeclarationKind.MESSAGE, "a.B") is sentinel
        assert registry.message_by_name("a.B") is sentinel

    def test_kinds_have_separate_namespaces(self):
        registry = Registry()
        message, enum = object(), object()
        registry.register(DeclarationKind.MESSAGE, "a.X", message)
        registry.register(DeclarationKind.ENUM, "a.X", enum)
        assert registry.message_by_name("a.X") is message
        assert registry.enum_by_name("a.X") is enum

    def test_duplicate_key_raises(self):
        registry = Registry()
        registry.register(DeclarationKind.SERVICE, "a.S", object())
        with pytest.raises(DuplicateRegistrationError, match="service 'a.S'"):
            registry.register(DeclarationKind.SERVICE, "a.S", object())

    def test_unknown_key_is_none(self):
        registry = Registry()
        assert registry.file_by_name("nope.proto") is None
        assert registry.extension_by_name("a.ext") is None


class TestLookupByName:
    def test_every_kind(self, registry):
        assert registry.file_by_name("one.proto").package == "shop"
        assert registry.message_by_name("shop.Order.Line").name == "Line"
        assert registry.enum_by_name("shop.Order.State").parent.full_name == "shop.Order"
        assert registry.service_by_name("shop.Orders").name == "Orders"
        assert registry.extension_by_name("shop.tag").extendee.full_name == "shop.Order"

    def test_lookup_is_exact(self, registry):
        assert registry.message_by_name(".shop.Order") is None
        assert registry.message_by_name("Order") is None


class TestEnumeration:
    def test_all_in_registration_order(self, registry):
        assert [m.full_name for m in registry.all_messages()] == [
            "shop.Order",
            "shop.Order.Line",
            "billing.Invoice",
        ]
        assert [f.name for f in registry.all_files()] == ["one.proto", "two.proto"]
        assert [e.full_name for e in registry.all_enums()] == ["shop.Order.State", "shop.Currency"]
        assert len(registry.all_services()) == 1
        assert len(registry.all_extensions()) == 1

    def test_by_package(self, registry):
        assert [m.full_name for m in registry.messages_by_package("shop")] == [
            "shop.Order",
            "shop.Order.Line",
        ]
        assert [m.full_name for m in registry.messages_by_package("billing")] == ["billing.Invoice"]
        assert registry.messages_by_package("nothing") == []
        assert [f.name for f in registry.files_by_package("billing")] == ["two.proto"]

    def test_by_package_top_level_only(self, registry):
        assert [m.full_name for m in registry.messages_by_package("shop", top_level_only=True)] == [
            "shop.Order",
        ]
        assert [e.full_name for e in registry.enums_by_package("shop", top_level_only=True)] == [
            "shop.Currency",
        ]

    def test_top_level_only_ignored_for_unnested_kinds(self, registry):
        assert len(registry.by_package(DeclarationKind.SERVICE, "shop", top_level_only=True)) == 1
        assert len(registry.by_package(DeclarationKind.EXTENSION, "shop", top_level_only=True)) == 1
        assert len(registry.extensions_by_package("shop")) == 1
        assert len(registry.services_by_package("shop")) == 1
