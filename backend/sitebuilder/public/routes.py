# sitebuilder/public/routes.py
from flask import Blueprint, Response, current_app, jsonify, request

from sitebuilder.normalizers.page import normalize_public_page
from sitebuilder.normalizers.revision import normalize_revision
from sitebuilder.public.rendering import html_document, render_tree
from sitebuilder.tenancy.resolver import DOMAIN_PENDING, TenantResolver

public_bp = Blueprint("public", __name__)


def tenant_resolver() -> TenantResolver:
    return current_app.extensions["tenant_resolver"]


def wants_html() -> bool:
    return request.accept_mimetypes.best_match(["application/json", "text/html"]) == "text/html"


@public_bp.route("/s/<site_slug>", methods=["GET"])
@public_bp.route("/s/<site_slug>/<page_slug>", methods=["GET"])
@public_bp.route("/", defaults={"path": ""}, methods=["GET"])
@public_bp.route("/<path:path>", methods=["GET"])
def serve_page(**_):
    resolution = tenant_resolver().resolve(request.host, request.path)

    if resolution.status == DOMAIN_PENDING:
        return jsonify({
            "error": "domain_pending",
            "domain": resolution.domain,
            "message": "This domain is waiting for verification",
        }), 404

    if not resolution.found:
        return jsonify({"error": "not_found"}), 404

    page, revision, workspace = resolution.page, resolution.revision, resolution.workspace

    if wants_html():
        # Entitlement is decided here and handed to the renderer as data.
        show_watermark = bool(current_app.config["FREE_PLAN_WATERMARK"]) and workspace.plan == "free"
        result = render_tree(
            revision.builder_tree,
            tenant_id=workspace.id,
            page_id=page.id,
            site_id=resolution.site.id,
            show_watermark=show_watermark,
        )
        return Response(html_document(page, result), mimetype="text/html")

    return jsonify({
        "page": normalize_public_page(page),
        "revision": normalize_revision(revision, public=True),
    })
