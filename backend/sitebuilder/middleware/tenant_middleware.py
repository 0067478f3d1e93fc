from flask import g, jsonify, request

from sitebuilder.models.workspace import Workspace

API_PREFIX = "/api/v1"
TENANT_EXEMPT_PATHS = {"/api/v1/health"}


def tenant_middleware(app):
    @app.before_request
    def load_tenant():
        # Public pages, swagger and the health probe carry no tenant header;
        # public requests are scoped by the TenantResolver instead.
        if not request.path.startswith(API_PREFIX) or request.path in TENANT_EXEMPT_PATHS:
            return None

        tenant_id = request.headers.get("X-Tenant-ID")
        if not tenant_id:
            return jsonify({"error": "X-Tenant-ID header is missing"}), 400

        tenant = Workspace.query.filter_by(id=tenant_id, is_active=True).first()
        if not tenant:
            return jsonify({"error": "Invalid tenant"}), 404

        # Attach tenant to global context
        g.current_tenant = tenant
        return None
