import pytest
from pydantic import ValidationError

from sitebuilder.builder.components import (
    ComponentDefinition,
    Props,
    UnknownComponent,
    build_registry,
)


@pytest.fixture
def registry():
    return build_registry()


def test_builtin_kinds_are_registered(registry):
    for kind in ("Section", "Text", "Image", "Form", "AuthGate", "CollectionList", "ProductGrid"):
        assert registry.has(kind)
    assert "SymbolInstance" not in [c.type for c in registry.by_category("advanced")]


def test_validate_props_fills_defaults(registry):
    props = registry.validate_props("Heading", {"text": "Hello"})
    assert props["level"] == 2
    assert props["text"] == "Hello"


def test_validate_props_keeps_unknown_keys(registry):
    assert registry.validate_props("Text", {"text": "x", "glow": True})["glow"] is True


def test_validate_props_rejects_bad_values(registry):
    with pytest.raises(ValidationError):
        registry.validate_props("Heading", {"level": 9})
    with pytest.raises(UnknownComponent):
        registry.validate_props("Nope", {})


def test_props_errors_are_readable(registry):
    errors = registry.props_errors("Grid", {"columns": 40})
    assert errors and errors[0].startswith("props.columns")
    assert registry.props_errors("Nope", {"anything": 1}) == []


def test_children_rules(registry):
    assert registry.can_have_children("Section")
    assert not registry.can_have_children("Text")
    assert registry.can_have_children("FutureWidget")
    assert registry.can_add_child("Stack", "Text")
    assert not registry.can_add_child("Image", "Text")
    assert not registry.can_add_child("Stack", "FutureWidget")


def test_allowed_children(registry):
    class ListProps(Props):
        pass

    registry.register(ComponentDefinition("List", "layout", ListProps, can_have_children=True, allowed_children=["Text"]))
    assert registry.can_add_child("List", "Text")
    assert not registry.can_add_child("List", "Image")
    assert registry.unregister("List")
    assert not registry.unregister("List")


def test_create_node_merges_defaults(registry):
    node = registry.create_node("Button", {"text": "Buy"}, node_id="buy")
    assert node.id == "buy"
    assert node.props["text"] == "Buy"
    assert node.props["variant"] == "primary"
