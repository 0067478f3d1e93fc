from sqlalchemy import event
from sitebuilder.extensions import db
from .base import BaseModel
from .tenant_mixin import TenantMixin


class PageRevision(BaseModel, TenantMixin):
    __tablename__ = "page_revisions"

    page_id = db.Column(
        db.String(36),
        db.ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False
    )

    # Monotonic per page, 1-based, never reused.
    version = db.Column(db.Integer, nullable=False)
    builder_tree = db.Column(db.JSON, nullable=True)
    comment = db.Column(db.String(500), nullable=True)
    created_by = db.Column(db.String(36), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("page_id", "version", name="uq_page_revision_version"),
        db.Index("idx_page_revision_page", "page_id"),
    )

    page = db.relationship("Page", back_populates="revisions", foreign_keys=[page_id])


@event.listens_for(PageRevision, "before_update")
def prevent_revision_mutation(mapper, connection, target):
    raise RuntimeError("Page revisions are immutable")
