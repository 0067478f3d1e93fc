from sitebuilder.extensions import db
from .base import BaseModel
from .tenant_mixin import TenantMixin
from .soft_delete_mixin import SoftDeleteMixin

RESOURCE_KINDS = ("asset", "product", "collection", "symbol", "template")


class Resource(BaseModel, TenantMixin, SoftDeleteMixin):
    """
    Index of entities owned by collaborators outside the builder core
    (asset storage, commerce, CMS collections, symbols, templates).

    Those collaborators upsert a row when an entity is created and
    soft-delete it when the entity goes away; the reference validator
    only ever reads this table.
    """
    __tablename__ = "resources"

    kind = db.Column(db.String(20), nullable=False)
    # External id, or the public URL for assets.
    key = db.Column(db.String(512), nullable=False)
    url = db.Column(db.String(512), nullable=True)
    label = db.Column(db.String(255), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("tenant_id", "kind", "key", name="uq_resource_key"),
        db.Index("idx_resource_lookup", "tenant_id", "kind"),
    )
