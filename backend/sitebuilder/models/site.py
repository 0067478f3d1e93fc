from sitebuilder.extensions import db
from .base import BaseModel
from .tenant_mixin import TenantMixin


class Site(BaseModel, TenantMixin):
    __tablename__ = "sites"

    name = db.Column(db.String(255), nullable=False)
    # Unique across the platform: /s/<slug> is the resolution scope.
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    # Primary custom domain, globally unique.
    custom_domain = db.Column(db.String(255), unique=True, nullable=True, index=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    published_at = db.Column(db.DateTime(timezone=True), nullable=True)

    workspace = db.relationship("Workspace", back_populates="sites")
    pages = db.relationship(
        "Page",
        back_populates="site",
        cascade="all, delete-orphan",
        order_by="Page.created_at",
    )
    domains = db.relationship("CustomDomain", back_populates="site", cascade="all, delete-orphan")
