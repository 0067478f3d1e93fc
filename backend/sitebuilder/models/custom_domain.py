from sitebuilder.extensions import db
from .base import BaseModel
from .tenant_mixin import TenantMixin

DOMAIN_PENDING = "PENDING"
DOMAIN_VERIFIED = "VERIFIED"
DOMAIN_FAILED = "FAILED"


class CustomDomain(BaseModel, TenantMixin):
    __tablename__ = "custom_domains"

    site_id = db.Column(db.String(36), db.ForeignKey("sites.id"), nullable=False, index=True)
    domain = db.Column(db.String(255), unique=True, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=DOMAIN_PENDING)
    verification_token = db.Column(db.String(80), nullable=False)
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    verified_at = db.Column(db.DateTime(timezone=True), nullable=True)

    site = db.relationship("Site", back_populates="domains")

    @property
    def is_verified(self):
        return self.status == DOMAIN_VERIFIED
