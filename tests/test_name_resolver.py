from types import SimpleNamespace

import pytest

from protoc_graph.name_resolver import (
    resolve_enum_type_name,
    resolve_message_type_name,
    resolve_type_name,
)
from protoc_graph.registry import DeclarationKind, Registry


def _decl(full_name):
    return SimpleNamespace(full_name=full_name)


@pytest.fixture
def registry():
    registry = Registry()
    for name in ("a.b.C", "a.b.X.C", "a.C", "C", "a.b.X.Y.Z"):
        registry.register(DeclarationKind.MESSAGE, name, _decl(name))
    registry.register(DeclarationKind.ENUM, "a.b.Color", _decl("a.b.Color"))
    return registry


class TestFullyQualified:
    def test_leading_dot_is_looked_up_directly(self, registry):
        assert resolve_type_name(registry, "a.b.X", ".a.C").full_name == "a.C"
        assert resolve_type_name(registry, "", ".C").full_name == "C"

    def test_leading_dot_ignores_scope(self, registry):
        assert resolve_type_name(registry, "a.b.X", ".Z") is None

    def test_not_found(self, registry):
        assert resolve_type_name(registry, "a", ".a.b.Missing") is None


class TestScoped:
    def test_innermost_scope_wins(self, registry):
        assert resolve_type_name(registry, "a.b.X", "C").full_name == "a.b.X.C"
        assert resolve_type_name(registry, "a.b", "C").full_name == "a.b.C"
        assert resolve_type_name(registry, "a", "C").full_name == "a.C"

    def test_falls_back_to_root(self, registry):
        assert resolve_type_name(registry, "other.pkg", "C").full_name == "C"

    def test_dotted_relative_name(self, registry):
        assert resolve_type_name(registry, "a.b.X.Q", "Y.Z").full_name == "a.b.X.Y.Z"
        assert resolve_type_name(registry, "a.b", "X.C").full_name == "a.b.X.C"

    def test_not_found(self, registry):
        assert resolve_type_name(registry, "a.b", "Nope") is None


class TestKinds:
    def test_message_only(self, registry):
        assert resolve_message_type_name(registry, "a.b", "Color") is None
        assert resolve_message_type_name(registry, "a.b", "C").full_name == "a.b.C"

    def test_enum_only(self, registry):
        assert resolve_enum_type_name(registry, "a.b.X", "Color").full_name == "a.b.Color"
        assert resolve_enum_type_name(registry, "a.b", ".a.C") is None

    def test_default_searches_both(self, registry):
        assert resolve_type_name(registry, "a.b", "Color").full_name == "a.b.Color"
