from sitebuilder.extensions import db
from .base import BaseModel
from .tenant_mixin import TenantMixin
from .soft_delete_mixin import SoftDeleteMixin

class Page(BaseModel, TenantMixin, SoftDeleteMixin):
    __tablename__ = 'pages'

    site_id = db.Column(db.String(36), db.ForeignKey("sites.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, index=True)

    # Mutable draft; the editor owns it, publishing only reads it.
    builder_tree = db.Column(db.JSON, nullable=True)

    is_homepage = db.Column(db.Boolean, nullable=False, default=False)
    is_draft = db.Column(db.Boolean, nullable=False, default=True)
    published_revision_id = db.Column(
        db.String(36),
        db.ForeignKey("page_revisions.id", use_alter=True, name="fk_pages_published_revision"),
        nullable=True,
    )
    scheduled_publish_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    meta_title = db.Column(db.String(200), nullable=True)
    meta_description = db.Column(db.String(500), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("site_id", "slug", name="uq_page_slug_per_site"),
    )

    site = db.relationship("Site", back_populates="pages")
    published_revision = db.relationship(
        "PageRevision",
        foreign_keys=[published_revision_id],
        post_update=True,
    )
    revisions = db.relationship(
        "PageRevision",
        back_populates="page",
        foreign_keys="PageRevision.page_id",
        order_by="PageRevision.version.desc()",
        cascade="all, delete-orphan",
    )
