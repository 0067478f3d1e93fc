# sitebuilder/builder/renderer.py
"""
SafeRenderer

Turns a builder tree into HTML for one request. Per node type dispatch goes
through NODE_RENDERERS; a node whose renderer is missing or fails is
replaced by an inert placeholder and rendering carries on with its
siblings.

The renderer does no authorization. Everything tenant-specific it emits
(ids, action scope, record data) comes from the RenderContext, never from
the tree.
"""
from __future__ import annotations

import dataclasses
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from markupsafe import Markup

from . import styles
from .actions import condition_holds, evaluate_binding, sanitize_url
from .tree import OPAQUE_TYPE, BREAKPOINTS, BuilderNode, BuilderTree, effective_style, load_tree

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64

EMPTY_STATE_TEXT = "This page has no content yet."

WATERMARK_TEXT = "Built with Sitebuilder"


@dataclass
class RenderContext:
    tenant_id: str
    page_id: Optional[str] = None
    site_id: Optional[str] = None
    viewer: Optional[Mapping[str, Any]] = None
    breakpoint: str = "desktop"
    preview: bool = False
    show_watermark: bool = False
    # Records already loaded for this tenant, keyed by collection id.
    collections: Mapping[str, List[Mapping[str, Any]]] = field(default_factory=dict)
    current_record: Optional[Mapping[str, Any]] = None
    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass
class RenderResult:
    html: Markup
    rendered: int = 0
    placeholders: List[str] = field(default_factory=list)
    empty: bool = False


class _RenderState:
    def __init__(self):
        self.rendered = 0
        self.placeholders: List[str] = []


# ------------------------
# Markup helpers
# ------------------------

def _attrs(**attributes: Any) -> Markup:
    parts = []
    for name, value in attributes.items():
        if value is None or value is False or value == "":
            continue
        name = name.rstrip("_").replace("_", "-")
        if value is True:
            parts.append(Markup(" {}").format(name))
        else:
            parts.append(Markup(' {}="{}"').format(name, value))
    return Markup("").join(parts)


def _tag(name: str, attributes: Mapping[str, Any], content: Any = "", void: bool = False) -> Markup:
    if void:
        return Markup("<{}{}>").format(Markup(name), _attrs(**attributes))
    return Markup("<{0}{1}>{2}</{0}>").format(Markup(name), _attrs(**attributes), content)


def _text(props: Mapping[str, Any], key: str, default: str = "") -> str:
    value = props.get(key, default)
    if value is None:
        return default
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _variant(props: Mapping[str, Any], default: str) -> str:
    value = props.get("variant")
    if isinstance(value, str) and re.fullmatch(r"[a-z][a-z0-9-]{0,31}", value):
        return value
    return default


def _int(props: Mapping[str, Any], key: str, default: int, low: int, high: int) -> int:
    value = props.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        return default
    return max(low, min(high, value))


# ------------------------
# Renderer
# ------------------------

NodeRenderer = Callable[["SafeRenderer", BuilderNode, RenderContext, "_RenderState", int, Dict[str, Any]], Markup]

NODE_RENDERERS: Dict[str, NodeRenderer] = {}


def node_renderer(*types: str):
    def decorator(fn: NodeRenderer) -> NodeRenderer:
        for node_type in types:
            NODE_RENDERERS[node_type] = fn
        return fn
    return decorator


class SafeRenderer:
    def __init__(self, renderers: Optional[Mapping[str, NodeRenderer]] = None):
        self.renderers = dict(NODE_RENDERERS if renderers is None else renderers)

    def render(self, tree: Any, context: RenderContext) -> RenderResult:
        if not isinstance(tree, BuilderTree):
            tree = load_tree(tree)

        if context.breakpoint not in BREAKPOINTS:
            context = dataclasses.replace(context, breakpoint="base")

        if tree.root is None:
            body = _tag("div", {"class_": "sb-empty-state"}, EMPTY_STATE_TEXT)
            return RenderResult(html=self._wrap(body, context), empty=True)

        state = _RenderState()
        body = self.render_node(tree.root, context, state, 0)
        return RenderResult(
            html=self._wrap(body, context),
            rendered=state.rendered,
            placeholders=state.placeholders,
        )

    def _wrap(self, body: Markup, context: RenderContext) -> Markup:
        if context.show_watermark:
            body = body + _tag("div", {"class_": "sb-watermark"}, WATERMARK_TEXT)
        return _tag(
            "div",
            {
                "class_": "sb-page",
                "data_tenant_id": context.tenant_id,
                "data_page_id": context.page_id,
                "data_site_id": context.site_id,
                "data_preview": "true" if context.preview else None,
            },
            body,
        )

    def render_node(self, node: BuilderNode, context: RenderContext, state: _RenderState, depth: int) -> Markup:
        if depth > context.max_depth:
            return self.placeholder(node, context, state, "max depth exceeded")

        if node.opaque or node.type == OPAQUE_TYPE:
            return self.placeholder(node, context, state, "; ".join(node.issues) or "malformed node")

        renderer = self.renderers.get(node.type)
        if renderer is None:
            return self.placeholder(node, context, state, f"unknown component type {node.type}")

        try:
            base = self._base_attributes(node, context)
            html = renderer(self, node, context, state, depth, base)
        except Exception as exc:
            return self.placeholder(node, context, state, f"render error: {exc.__class__.__name__}", exc_info=True)

        state.rendered += 1
        return html

    def render_children(self, node: BuilderNode, context: RenderContext, state: _RenderState, depth: int) -> Markup:
        return Markup("").join(self.render_node(child, context, state, depth + 1) for child in node.children)

    def placeholder(
        self, node: BuilderNode, context: RenderContext, state: _RenderState, reason: str, exc_info: bool = False
    ) -> Markup:
        logger.warning("Rendering placeholder for node %s (%s): %s", node.id, node.type, reason, exc_info=exc_info)
        state.placeholders.append(node.id)

        attributes = {
            "class_": "sb-placeholder",
            "data_node_id": node.id,
            "data_placeholder": "true",
        }
        if context.preview:
            return _tag("div", attributes, f"Cannot display this block ({reason})")
        return _tag("div", dict(attributes, hidden=True))

    def _base_attributes(self, node: BuilderNode, context: RenderContext) -> Dict[str, Any]:
        resolved = styles.resolve(effective_style(node, context.breakpoint))

        class_name = node.props.get("className")
        classes = resolved["class"]
        if isinstance(class_name, str) and class_name.strip():
            classes = " ".join(c for c in (classes, class_name.strip()) if c)

        effects = []
        for binding in node.actions:
            effect = evaluate_binding(
                binding,
                tenant_id=context.tenant_id,
                page_id=context.page_id,
                site_id=context.site_id,
                viewer=context.viewer,
            )
            if effect is not None:
                effects.append(effect)

        return {
            "data_node_id": node.id,
            "class_": classes,
            "style": resolved["style"],
            "data_actions": json.dumps(effects, sort_keys=True) if effects else None,
        }


# ------------------------
# Layout
# ------------------------

@node_renderer("Root", "Section")
def render_section(renderer, node, context, state, depth, base):
    return _tag("section", base, renderer.render_children(node, context, state, depth))


@node_renderer("Container")
def render_container(renderer, node, context, state, depth, base):
    max_width = _text(node.props, "maxWidth", "7xl")
    extra = f"mx-auto max-w-{max_width}" if max_width in styles.MAX_WIDTHS else "mx-auto"
    base["class_"] = " ".join(c for c in (extra, base["class_"]) if c)
    return _tag("div", base, renderer.render_children(node, context, state, depth))


@node_renderer("Stack")
def render_stack(renderer, node, context, state, depth, base):
    direction = styles.FLEX_DIRECTION.get(_text(node.props, "direction", "column"), "flex-col")
    gap = styles.SPACING.get(_text(node.props, "gap", "md"), "4")
    base["class_"] = " ".join(c for c in ("flex", direction, f"gap-{gap}", base["class_"]) if c)
    return _tag("div", base, renderer.render_children(node, context, state, depth))


@node_renderer("Grid")
def render_grid(renderer, node, context, state, depth, base):
    if context.breakpoint == "mobile":
        columns = _int(node.props, "columnsMobile", 1, 1, 12)
    elif context.breakpoint == "tablet":
        columns = _int(node.props, "columnsTablet", 2, 1, 12)
    else:
        columns = _int(node.props, "columns", 3, 1, 12)
    gap = styles.SPACING.get(_text(node.props, "gap", "md"), "4")
    base["class_"] = " ".join(c for c in ("grid", f"grid-cols-{columns}", f"gap-{gap}", base["class_"]) if c)
    return _tag("div", base, renderer.render_children(node, context, state, depth))


@node_renderer("Divider")
def render_divider(renderer, node, context, state, depth, base):
    return _tag("hr", base, void=True)


@node_renderer("Spacer")
def render_spacer(renderer, node, context, state, depth, base):
    size = styles.SPACING.get(_text(node.props, "size", "md"), "4")
    base["class_"] = " ".join(c for c in (f"h-{size}", base["class_"]) if c)
    base["aria_hidden"] = "true"
    return _tag("div", base)


# ------------------------
# Content / media
# ------------------------

@node_renderer("Text")
def render_text(renderer, node, context, state, depth, base):
    return _tag("p", base, _text(node.props, "text"))


@node_renderer("Heading")
def render_heading(renderer, node, context, state, depth, base):
    level = _int(node.props, "level", 2, 1, 6)
    return _tag(f"h{level}", base, _text(node.props, "text"))


@node_renderer("Image")
def render_image(renderer, node, context, state, depth, base):
    base.update(src=sanitize_url(node.props.get("src")), alt=_text(node.props, "alt"), loading="lazy")
    return _tag("img", base, void=True)


@node_renderer("Video")
def render_video(renderer, node, context, state, depth, base):
    base.update(
        src=sanitize_url(node.props.get("src")),
        poster=sanitize_url(node.props.get("poster")),
        controls=node.props.get("controls", True) is not False,
        autoplay=node.props.get("autoplay") is True,
        muted=node.props.get("autoplay") is True,
    )
    return _tag("video", base)


@node_renderer("Gallery")
def render_gallery(renderer, node, context, state, depth, base):
    columns = _int(node.props, "columns", 3, 1, 6)
    images = node.props.get("images")
    items = []
    for image in images if isinstance(images, list) else []:
        if isinstance(image, Mapping):
            src, alt = sanitize_url(image.get("src")), _text(image, "alt")
        else:
            src, alt = sanitize_url(image), ""
        if src:
            items.append(_tag("img", {"src": src, "alt": alt, "loading": "lazy"}, void=True))
    base["class_"] = " ".join(c for c in ("grid", f"grid-cols-{columns}", base["class_"]) if c)
    return _tag("div", base, Markup("").join(items))


# ------------------------
# UI
# ------------------------

@node_renderer("Button")
def render_button(renderer, node, context, state, depth, base):
    href = sanitize_url(node.props.get("href"))
    variant = _variant(node.props, "primary")
    base["class_"] = " ".join(c for c in (f"btn btn-{variant}", base["class_"]) if c)
    if href:
        base["href"] = href
        return _tag("a", base, _text(node.props, "text", "Button"))
    base.update(type="button", disabled=node.props.get("disabled") is True)
    return _tag("button", base, _text(node.props, "text", "Button"))


@node_renderer("Link")
def render_link(renderer, node, context, state, depth, base):
    target = "_blank" if node.props.get("target") == "_blank" else None
    base.update(
        href=sanitize_url(node.props.get("href")) or "#",
        target=target,
        rel="noopener noreferrer" if target else None,
    )
    return _tag("a", base, _text(node.props, "text", "Link"))


@node_renderer("Card")
def render_card(renderer, node, context, state, depth, base):
    parts = []
    image = sanitize_url(node.props.get("image"))
    if image:
        parts.append(_tag("img", {"src": image, "alt": "", "loading": "lazy"}, void=True))
    if _text(node.props, "title"):
        parts.append(_tag("h3", {"class_": "card-title"}, _text(node.props, "title")))
    if _text(node.props, "description"):
        parts.append(_tag("p", {"class_": "card-description"}, _text(node.props, "description")))
    parts.append(renderer.render_children(node, context, state, depth))
    base["class_"] = " ".join(c for c in ("card", base["class_"]) if c)
    return _tag("div", base, Markup("").join(parts))


@node_renderer("Badge")
def render_badge(renderer, node, context, state, depth, base):
    base["class_"] = " ".join(c for c in (f"badge badge-{_variant(node.props, 'default')}", base["class_"]) if c)
    return _tag("span", base, _text(node.props, "text", "Badge"))


@node_renderer("Alert")
def render_alert(renderer, node, context, state, depth, base):
    base["role"] = "alert"
    content = Markup("").join([
        _tag("strong", {}, _text(node.props, "title")),
        _tag("p", {}, _text(node.props, "description")),
    ])
    return _tag("div", base, content)


# ------------------------
# Forms
# ------------------------

@node_renderer("Form")
def render_form(renderer, node, context, state, depth, base):
    base.update(
        method="post",
        data_collection=_text(node.props, "collectionId") or _text(node.props, "collection"),
        data_redirect=sanitize_url(node.props.get("redirectTo")),
    )
    return _tag("form", base, renderer.render_children(node, context, state, depth))


def _field_label(node: BuilderNode, control: Markup) -> Markup:
    label = _text(node.props, "label")
    if not label:
        return control
    return _tag("label", {}, Markup("").join([_tag("span", {}, label), control]))


@node_renderer("Input")
def render_input(renderer, node, context, state, depth, base):
    input_type = _text(node.props, "type", "text")
    if input_type not in ("text", "email", "password", "number", "tel", "url", "date"):
        input_type = "text"
    base.update(
        type=input_type,
        name=_text(node.props, "name", "field"),
        placeholder=_text(node.props, "placeholder"),
        required=node.props.get("required") is True,
    )
    return _field_label(node, _tag("input", base, void=True))


@node_renderer("Textarea")
def render_textarea(renderer, node, context, state, depth, base):
    base.update(
        name=_text(node.props, "name", "field"),
        rows=_int(node.props, "rows", 4, 2, 20),
        placeholder=_text(node.props, "placeholder"),
        required=node.props.get("required") is True,
    )
    return _field_label(node, _tag("textarea", base))


@node_renderer("SubmitButton")
def render_submit(renderer, node, context, state, depth, base):
    base["type"] = "submit"
    return _tag("button", base, _text(node.props, "text", "Submit"))


# ------------------------
# Gates / data / commerce
# ------------------------

@node_renderer("AuthGate")
def render_auth_gate(renderer, node, context, state, depth, base):
    condition = "viewer.anonymous" if node.props.get("mode") == "anonymous" else "viewer.authenticated"
    if not condition_holds(condition, context.viewer):
        return Markup("")
    return _tag("div", base, renderer.render_children(node, context, state, depth))


@node_renderer("CollectionList")
def render_collection_list(renderer, node, context, state, depth, base):
    collection_id = _text(node.props, "collectionId")
    limit = _int(node.props, "limit", 10, 1, 100)
    records = list(context.collections.get(collection_id, []))[:limit] if collection_id else []

    base["data_collection"] = collection_id
    if not records:
        return _tag("div", base, _text(node.props, "emptyText"))

    items = []
    for record in records:
        scoped = dataclasses.replace(context, current_record=record)
        items.append(_tag("div", {"class_": "sb-record"}, renderer.render_children(node, scoped, state, depth)))
    return _tag("div", base, Markup("").join(items))


@node_renderer("RecordFieldText")
def render_record_field(renderer, node, context, state, depth, base):
    record = context.current_record or {}
    value = record.get(_text(node.props, "field"))
    if value is None or isinstance(value, (dict, list)):
        value = _text(node.props, "fallback")
    return _tag("span", base, str(value))


@node_renderer("ProductCard")
def render_product_card(renderer, node, context, state, depth, base):
    base["data_product_id"] = _text(node.props, "productId")
    base["class_"] = " ".join(c for c in ("product-card", base["class_"]) if c)
    return _tag("div", base)


@node_renderer("ProductGrid")
def render_product_grid(renderer, node, context, state, depth, base):
    columns = _int(node.props, "columns", 3, 1, 6)
    product_ids = node.props.get("productIds")
    cards = [
        _tag("div", {"class_": "product-card", "data_product_id": pid})
        for pid in (product_ids if isinstance(product_ids, list) else [])
        if isinstance(pid, str)
    ]
    base["class_"] = " ".join(c for c in ("grid", f"grid-cols-{columns}", base["class_"]) if c)
    return _tag("div", base, Markup("").join(cards))


@node_renderer("SymbolInstance")
def render_symbol_instance(renderer, node, context, state, depth, base):
    base["data_symbol_id"] = _text(node.props, "symbolId") or _text(node.meta, "symbolId")
    return _tag("div", base)
