# sitebuilder/api/v1/sites.py
from flask import current_app, g, jsonify, request
from flask_jwt_extended import jwt_required

from sitebuilder.api.v1.schemas import DomainCreate, SiteCreate
from sitebuilder.application.cms.create_site import create_site
from sitebuilder.application.cms.custom_domains import register_domain, verify_domain
from sitebuilder.models.site import Site
from sitebuilder.normalizers.pagination import normalize_pagination
from sitebuilder.normalizers.site import normalize_domain, normalize_site
from sitebuilder.utils.decorators import READ_ROLES, WRITE_ROLES, feature_enabled, roles_required, tenant_required
from sitebuilder.utils.pagination import paginate, pagination_args
from . import v1_bp

# ------------------------
# Sites
# ------------------------

@v1_bp.route("/sites", methods=["POST"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
def create_site_route():
    body = SiteCreate.model_validate(request.get_json(silent=True) or {})
    site = create_site(
        tenant_id=g.current_tenant.id,
        actor_id=g.current_user_id,
        name=body.name,
        slug=body.slug,
    )
    return jsonify({"site": normalize_site(site)}), 201


@v1_bp.route("/sites", methods=["GET"])
@jwt_required()
@tenant_required
@roles_required(*READ_ROLES)
def list_sites():
    page, per_page = pagination_args()
    query = Site.query.filter_by(tenant_id=g.current_tenant.id).order_by(Site.created_at.asc(), Site.id.asc())
    items, total = paginate(query, page=page, per_page=per_page)
    return jsonify(normalize_pagination(items, normalize_site, page=page, per_page=per_page, total=total))


# ------------------------
# Custom domains
# ------------------------

@v1_bp.route("/sites/<site_id>/domains", methods=["POST"])
@jwt_required()
@tenant_required
@roles_required(*WRITE_ROLES)
@feature_enabled("custom_domains")
def register_domain_route(site_id):
    body = DomainCreate.model_validate(request.get_json(silent=True) or {})
    record = register_domain(
        tenant_id=g.current_tenant.id,
        site_id=site_id,
        actor_id=g.current_user_id,
        domain=body.domain,
        platform_domain=current_app.config["PLATFORM_DOMAIN"],
    )
    return jsonify({"domain": normalize_domain(record)}), 201


@v1_bp.route("/domains/<domain_id>/verify", methods=["POST"])
@jwt_required()
@tenant_required
@roles_required("admin")
@feature_enabled("custom_domains")
def verify_domain_route(domain_id):
    record = verify_domain(tenant_id=g.current_tenant.id, domain_id=domain_id, actor_id=g.current_user_id)
    return jsonify({"domain": normalize_domain(record)})
