from sitebuilder.extensions import db
from .base import BaseModel


class Workspace(BaseModel):
    """The tenant: owns sites, pages and every indexed resource."""
    __tablename__ = "workspaces"

    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True)
    plan = db.Column(db.String(50), nullable=False, default="free")

    # Feature toggles
    enable_cms = db.Column(db.Boolean, default=True)
    enable_custom_domains = db.Column(db.Boolean, default=True)
    enable_scheduled_publishing = db.Column(db.Boolean, default=True)

    # JSON field for future toggles (flexible)
    features = db.Column(db.JSON, default=dict)

    sites = db.relationship("Site", back_populates="workspace", cascade="all, delete-orphan")

    def has_feature(self, feature_name: str) -> bool:
        """
        Check if a feature is enabled for this workspace.
        """
        # Check JSON overrides first
        overrides = self.features or {}
        if overrides.get(feature_name) is not None:
            return bool(overrides.get(feature_name))

        # Fallback to attribute toggles
        attr_name = f"enable_{feature_name}"
        return bool(getattr(self, attr_name, False))
