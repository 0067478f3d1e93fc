# sitebuilder/public/rendering.py
from typing import Any, Mapping, Optional

from flask import current_app, request
from markupsafe import Markup

from sitebuilder.builder.renderer import RenderContext, RenderResult, SafeRenderer
from sitebuilder.builder.tree import BREAKPOINTS

renderer = SafeRenderer()


def request_breakpoint() -> str:
    breakpoint = request.args.get("breakpoint") or current_app.config["DEFAULT_BREAKPOINT"]
    return breakpoint if breakpoint in BREAKPOINTS else "base"


def render_tree(
    tree: Any,
    *,
    tenant_id: str,
    page_id: str,
    site_id: str,
    preview: bool = False,
    show_watermark: bool = False,
    viewer: Optional[Mapping[str, Any]] = None,
) -> RenderResult:
    context = RenderContext(
        tenant_id=tenant_id,
        page_id=page_id,
        site_id=site_id,
        viewer=viewer,
        breakpoint=request_breakpoint(),
        preview=preview,
        show_watermark=show_watermark,
        max_depth=current_app.config["MAX_TREE_DEPTH"],
    )
    return renderer.render(tree, context)


def html_document(page, result: RenderResult) -> str:
    title = page.meta_title or page.name
    description = page.meta_description or ""
    return Markup(
        "<!doctype html>"
        '<html><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        "<title>{}</title>"
        '<meta name="description" content="{}">'
        "</head><body>{}</body></html>"
    ).format(title, description, result.html)
