import pytest

from sitebuilder.builder.actions import (
    condition_holds,
    evaluate_binding,
    parse_binding,
    sanitize_url,
)


def test_both_persisted_shapes_normalize_the_same():
    flat = parse_binding({"event": "click", "action": "navigate", "params": {"url": "/about"}})
    nested = parse_binding({"event": "onClick", "action": {"type": "navigate", "url": "/about"}})
    assert (flat.event, flat.name, flat.params) == (nested.event, nested.name, nested.params)


def test_garbage_binding_is_invalid_but_kept():
    binding = parse_binding("click me")
    assert not binding.is_valid
    assert binding.to_dict() == "click me"


@pytest.mark.parametrize("url, expected", [
    ("/about", "/about"),
    ("#pricing", "#pricing"),
    ("https://example.com", "https://example.com"),
    ("javascript:alert(1)", None),
    ("data:text/html,hi", None),
    ("//evil.test", None),
    ("", None),
    (None, None),
])
def test_sanitize_url(url, expected):
    assert sanitize_url(url) == expected


def test_condition_holds():
    assert condition_holds(None, None)
    assert condition_holds("user.isLoggedIn", {"id": "u1"})
    assert not condition_holds("user.isLoggedIn", None)
    assert condition_holds("!user.isLoggedIn", None)
    assert not condition_holds("user.role == 'admin'", {"id": "u1"})


def test_scoped_params_come_from_context():
    binding = parse_binding({
        "event": "onSubmit",
        "action": {"type": "createRecord", "collection": "leads", "tenantId": "other-tenant"},
    })
    effect = evaluate_binding(binding, tenant_id="t1", page_id="p1")
    assert effect["params"] == {"collection": "leads"}
    assert effect["scope"] == {"tenantId": "t1", "pageId": "p1"}


def test_custom_code_is_never_wired():
    binding = parse_binding({"event": "click", "action": "customCode", "params": {"code": "alert(1)"}})
    assert evaluate_binding(binding, tenant_id="t1") is None


def test_unsafe_navigation_is_dropped():
    binding = parse_binding({"event": "click", "action": {"type": "navigate", "to": "javascript:alert(1)"}})
    assert evaluate_binding(binding, tenant_id="t1") is None


def test_unknown_effects_are_ignored():
    binding = parse_binding({"event": "click", "action": "teleport"})
    assert evaluate_binding(binding, tenant_id="t1") is None
