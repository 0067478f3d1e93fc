# sitebuilder/api/v1/pages.py
from flask import Response, g, jsonify, request
from flask_jwt_extended import jwt_required

from sitebuilder.api.v1.schemas import PageCreate, PageUpdate, PublishRequest, RollbackRequest, TreeUpdate
from sitebuilder.application.cms.create_page import create_page
from sitebuilder.application.cms.delete_page import delete_page
from sitebuilder.application.cms.publish_page import publish_page
from sitebuilder.application.cms.queries import get_page, get_site, site_pages
from sitebuilder.application.cms.revisions import get_revision, list_revisions
from sitebuilder.application.cms.rollback_page import rollback_page
from sitebuilder.application.cms.save_draft_tree import save_draft_tree
from sitebuilder.application.cms.set_homepage import set_homepage
from sitebuilder.application.cms.update_page import update_page
from sitebuilder.application.cms.validate_page import find_resource_usages, validate_page
from sitebuilder.normalizers.page import normalize_page
from sitebuilder.normalizers.pagination import normalize_pagination
from sitebuilder.normalizers.revision import normalize_revision
from sitebuilder.public.rendering import html_document, render_tree
from sitebuilder.utils.decorators import READ_ROLES, WRITE_ROLES, feature_enabled, roles_required, tenant_required
from sitebuilder.utils.optimistic_lock import enforce_optimistic_lock
from sitebuilder.utils.pagination import paginate, pagination_args
from sitebuilder.utils.timeutils import normalize_ts
from . import v1_bp


def _flag(name: str) -> bool:
    return request.args.get(name, "").lower() in ("1", "true", "yes")


def _page_response(page, status=200):
    response = jsonify({"page": normalize_page(page)})
    response.status_code = status
    if page.updated_at is not None:
        response.last_modified = normalize_ts(page.updated_at)
    return response


# ------------------------
# Pages
# ------------------------

@v1_bp.route("/sites/<site_id>/pages", methods=["POST"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
@feature_enabled("cms")
def create_page_route(site_id):
    body = PageCreate.model_validate(request.get_json(silent=True) or {})
    page = create_page(
        tenant_id=g.current_tenant.id,
        site_id=site_id,
        actor_id=g.current_user_id,
        name=body.name,
        slug=body.slug,
        builder_tree=body.builderTree,
        is_homepage=body.isHomepage,
    )
    return _page_response(page, 201)


@v1_bp.route("/sites/<site_id>/pages", methods=["GET"])
@jwt_required()
@tenant_required
@roles_required(*READ_ROLES)
@feature_enabled("cms")
def list_pages(site_id):
    site = get_site(tenant_id=g.current_tenant.id, site_id=site_id)
    page, per_page = pagination_args()
    items, total = paginate(site_pages(site.id), page=page, per_page=per_page)
    return jsonify(normalize_pagination(
        items,
        lambda p: normalize_page(p, include_tree=False),
        page=page,
        per_page=per_page,
        total=total,
    ))


@v1_bp.route("/pages/<page_id>", methods=["GET"])
@jwt_required()
@tenant_required
@roles_required(*READ_ROLES)
@feature_enabled("cms")
def get_page_route(page_id):
    return _page_response(get_page(tenant_id=g.current_tenant.id, page_id=page_id))


@v1_bp.route("/pages/<page_id>", methods=["PUT"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
@feature_enabled("cms")
def update_page_route(page_id):
    body = PageUpdate.model_validate(request.get_json(silent=True) or {})
    page = update_page(
        tenant_id=g.current_tenant.id,
        page_id=page_id,
        actor_id=g.current_user_id,
        data=body.to_fields(),
    )
    return _page_response(page)


@v1_bp.route("/pages/<page_id>", methods=["DELETE"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
@feature_enabled("cms")
def delete_page_route(page_id):
    delete_page(tenant_id=g.current_tenant.id, page_id=page_id, actor_id=g.current_user_id)
    return "", 204


@v1_bp.route("/pages/<page_id>/tree", methods=["PUT"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
@feature_enabled("cms")
def save_tree_route(page_id):
    page = get_page(tenant_id=g.current_tenant.id, page_id=page_id)
    enforce_optimistic_lock(page)

    body = TreeUpdate.model_validate(request.get_json(silent=True) or {})
    page = save_draft_tree(
        tenant_id=g.current_tenant.id,
        page_id=page_id,
        actor_id=g.current_user_id,
        builder_tree=body.builderTree,
    )
    return _page_response(page)


@v1_bp.route("/pages/<page_id>/homepage", methods=["POST"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
@feature_enabled("cms")
def set_homepage_route(page_id):
    page = set_homepage(tenant_id=g.current_tenant.id, page_id=page_id, actor_id=g.current_user_id)
    return _page_response(page)


@v1_bp.route("/pages/<page_id>/preview", methods=["GET"])
@jwt_required()
@tenant_required
@roles_required(*READ_ROLES)
@feature_enabled("cms")
def preview_page(page_id):
    page = get_page(tenant_id=g.current_tenant.id, page_id=page_id)
    result = render_tree(
        page.builder_tree,
        tenant_id=page.tenant_id,
        page_id=page.id,
        site_id=page.site_id,
        preview=True,
    )
    return Response(html_document(page, result), mimetype="text/html")


# ------------------------
# Validation / publishing
# ------------------------

@v1_bp.route("/pages/<page_id>/validate", methods=["POST"])
@jwt_required()
@tenant_required
@roles_required(*READ_ROLES)
@feature_enabled("cms")
def validate_page_route(page_id):
    result = validate_page(
        tenant_id=g.current_tenant.id,
        page_id=page_id,
        source=request.args.get("source", "draft"),
    )
    return jsonify(result.to_dict())


@v1_bp.route("/pages/<page_id>/publish", methods=["POST"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
@feature_enabled("cms")
def publish_page_route(page_id):
    body = PublishRequest.model_validate(request.get_json(silent=True) or {})
    tenant = g.current_tenant

    outcome = publish_page(
        tenant_id=tenant.id,
        page_id=page_id,
        actor_id=g.current_user_id,
        comment=body.comment,
        scheduled_at=body.scheduledPublishAt,
        skip_validation=_flag("skipValidation"),
        scheduling_enabled=tenant.has_feature("scheduled_publishing"),
    )

    if outcome.scheduled:
        return jsonify({
            "scheduled": True,
            "scheduledAt": normalize_ts(outcome.scheduled_at).isoformat(),
        }), 200

    return jsonify({"revision": normalize_revision(outcome.revision)}), 201


@v1_bp.route("/pages/<page_id>/rollback", methods=["POST"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
@feature_enabled("cms")
def rollback_page_route(page_id):
    body = RollbackRequest.model_validate(request.get_json(silent=True) or {})
    page = rollback_page(
        tenant_id=g.current_tenant.id,
        page_id=page_id,
        revision_id=body.revisionId,
        actor_id=g.current_user_id,
    )
    return _page_response(page)


@v1_bp.route("/pages/<page_id>/revisions", methods=["GET"])
@jwt_required()
@tenant_required
@roles_required(*READ_ROLES)
@feature_enabled("cms")
def list_revisions_route(page_id):
    page, per_page = pagination_args()
    items, total = list_revisions(tenant_id=g.current_tenant.id, page_id=page_id, page=page, per_page=per_page)
    return jsonify(normalize_pagination(
        items,
        lambda r: normalize_revision(r, include_tree=False),
        page=page,
        per_page=per_page,
        total=total,
    ))


@v1_bp.route("/pages/<page_id>/revisions/<revision_id>", methods=["GET"])
@jwt_required()
@tenant_required
@roles_required(*READ_ROLES)
@feature_enabled("cms")
def get_revision_route(page_id, revision_id):
    revision = get_revision(tenant_id=g.current_tenant.id, page_id=page_id, revision_id=revision_id)
    return jsonify({"revision": normalize_revision(revision)})


# ------------------------
# Deletion impact
# ------------------------

@v1_bp.route("/usages", methods=["GET"])
@jwt_required()
@tenant_required
@roles_required(*READ_ROLES)
def resource_usages():
    result = find_resource_usages(
        tenant_id=g.current_tenant.id,
        kind=request.args.get("kind", ""),
        key=request.args.get("key", ""),
        site_id=request.args.get("site_id"),
    )
    return jsonify(result.to_dict())
