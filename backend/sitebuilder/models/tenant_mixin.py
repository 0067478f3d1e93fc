from sitebuilder.extensions import db

class TenantMixin:
    tenant_id = db.Column(
        db.String(36),
        db.ForeignKey('workspaces.id'),
        nullable=False,
        index=True
    )
