# sitebuilder/builder/actions.py
"""
Event -> effect bindings attached to builder nodes.

Two persisted shapes exist in the wild and both are accepted:

    {"event": "click", "action": "navigate", "params": {"url": "/about"}}
    {"event": "onClick", "action": {"type": "navigate", "to": "/about"}}

Both normalize to an ActionBinding(event, name, params, condition). The
original payload is kept on the binding so a tree round-trips unchanged.
"""
from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

KNOWN_EFFECTS = {
    "navigate",
    "navigatePage",
    "openModal",
    "closeModal",
    "submitForm",
    "createRecord",
    "updateRecord",
    "deleteRecord",
    "addToCart",
    "removeFromCart",
    "checkout",
    "login",
    "logout",
    "signup",
    "scrollTo",
    "setState",
    "toggleState",
    "toggleClass",
    "setVariable",
    "webhook",
}

# Stored but never evaluated: there is no scripting runtime for node actions.
INERT_EFFECTS = {"customCode"}

EVENT_ALIASES = {
    "onClick": "click",
    "onDoubleClick": "dblclick",
    "onSubmit": "submit",
    "onLoad": "load",
    "onHover": "mouseenter",
    "onFocus": "focus",
    "onBlur": "blur",
    "onChange": "change",
}

KNOWN_EVENTS = {
    "click",
    "dblclick",
    "submit",
    "load",
    "mouseenter",
    "mouseleave",
    "focus",
    "blur",
    "change",
}

URL_PARAMS = {"url", "to", "redirectTo", "successUrl", "cancelUrl"}

# Ids that must come from the request context, never from tree data.
SCOPED_PARAMS = {"tenantId", "workspaceId", "siteId", "pageId"}

CONDITIONS = {
    "viewer.authenticated": True,
    "user.isLoggedIn": True,
    "viewer.anonymous": False,
    "!user.isLoggedIn": False,
}

_SAFE_SCHEMES = re.compile(r"^https?://", re.IGNORECASE)


@dataclass
class ActionBinding:
    event: Optional[str]
    name: Optional[str]
    params: Dict[str, Any] = field(default_factory=dict)
    condition: Optional[str] = None
    raw: Any = None

    @property
    def is_valid(self) -> bool:
        return bool(self.event) and bool(self.name)

    def to_dict(self) -> Any:
        return copy.deepcopy(self.raw)


def parse_binding(raw: Any) -> ActionBinding:
    """Normalize one persisted binding. Never raises."""
    if not isinstance(raw, Mapping):
        return ActionBinding(event=None, name=None, raw=raw)

    event = raw.get("event")
    if isinstance(event, str):
        event = EVENT_ALIASES.get(event, event)
    else:
        event = None

    action = raw.get("action")
    name: Optional[str] = None
    params: Dict[str, Any] = {}

    if isinstance(action, str):
        name = action
        if isinstance(raw.get("params"), Mapping):
            params = dict(raw["params"])
    elif isinstance(action, Mapping) and isinstance(action.get("type"), str):
        name = action["type"]
        params = {k: v for k, v in action.items() if k != "type"}

    condition = raw.get("condition")
    if not isinstance(condition, str) or not condition.strip():
        condition = None

    return ActionBinding(
        event=event,
        name=name,
        params=params,
        condition=condition,
        raw=copy.deepcopy(dict(raw)),
    )


def sanitize_url(url: Any) -> Optional[str]:
    """
    Allow site-relative paths, in-page anchors and http(s) URLs only.
    Returns None for anything else (javascript:, data:, protocol-relative).
    """
    if not isinstance(url, str):
        return None

    url = url.strip()
    if not url:
        return None

    if url.startswith("//"):
        return None
    if url.startswith("/") or url.startswith("#") or url.startswith("?"):
        return url
    if _SAFE_SCHEMES.match(url):
        return url
    return None


def condition_holds(condition: Optional[str], viewer: Optional[Mapping[str, Any]]) -> bool:
    if condition is None:
        return True

    expected = CONDITIONS.get(condition.strip())
    if expected is None:
        # Unknown conditions fail closed.
        return False
    return bool(viewer) is expected


def evaluate_binding(
    binding: ActionBinding,
    *,
    tenant_id: str,
    page_id: Optional[str] = None,
    site_id: Optional[str] = None,
    viewer: Optional[Mapping[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Turn a binding into the client-side effect descriptor emitted by the
    renderer, or None when the binding must not be wired up.

    Scoped ids in params are always overwritten from the request context.
    """
    if not binding.is_valid:
        return None
    if binding.name in INERT_EFFECTS or binding.name not in KNOWN_EFFECTS:
        return None
    if binding.event not in KNOWN_EVENTS:
        return None
    if not condition_holds(binding.condition, viewer):
        return None

    params: Dict[str, Any] = {}
    for key, value in binding.params.items():
        if key in SCOPED_PARAMS:
            continue
        if key in URL_PARAMS:
            value = sanitize_url(value)
            if value is None:
                continue
        params[key] = copy.deepcopy(value)

    if binding.name == "navigate" and "url" not in params and "to" not in params:
        return None
    if binding.name == "webhook":
        if not _SAFE_SCHEMES.match(params.get("url", "")):
            return None

    scope = {"tenantId": tenant_id}
    if site_id:
        scope["siteId"] = site_id
    if page_id:
        scope["pageId"] = page_id

    return {
        "event": binding.event,
        "effect": binding.name,
        "params": params,
        "scope": scope,
    }
