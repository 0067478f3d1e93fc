# sitebuilder/application/cms/validate_page.py
from typing import Any, Optional

from sitebuilder.application.cms.queries import get_page
from sitebuilder.application.cms.reference_catalog import SqlReferenceCatalog
from sitebuilder.builder.validator import (
    REFERENCE_KINDS,
    ReferenceUsage,
    ReferenceValidator,
    ValidationResult,
    find_references_to,
)
from sitebuilder.domain.exceptions import BadRequest
from sitebuilder.models.page import Page

DRAFT = "draft"
PUBLISHED = "published"


def validate_page_tree(page: Page, tree: Any = None) -> ValidationResult:
    """Run the reference validator for `page` over its draft, or over `tree`."""
    catalog = SqlReferenceCatalog(tenant_id=page.tenant_id, site_id=page.site_id)
    validator = ReferenceValidator(catalog)
    return validator.validate(page.builder_tree if tree is None else tree, page_id=page.id)


def validate_page(*, tenant_id: str, page_id: str, source: str = DRAFT) -> ValidationResult:
    """
    Standalone validation. `source="published"` audits the tree visitors
    currently see instead of the draft.
    """
    page = get_page(tenant_id=tenant_id, page_id=page_id)

    if source == DRAFT:
        return validate_page_tree(page)
    if source == PUBLISHED:
        if page.published_revision is None:
            result = ValidationResult()
            result.warnings.append("Page has never been published")
            return result
        return validate_page_tree(page, page.published_revision.builder_tree)
    raise BadRequest(f"Unknown validation source: {source}")


def find_resource_usages(*, tenant_id: str, kind: str, key: str, site_id: Optional[str] = None) -> ValidationResult:
    """
    Deletion impact check for resource owners: every page draft that still
    references (kind, key). `valid` is False while any usage remains.
    """
    if kind not in REFERENCE_KINDS:
        raise BadRequest(f"Unknown reference kind: {kind}")
    if not key:
        raise BadRequest("A resource key is required")

    query = Page.query.filter(Page.tenant_id == tenant_id, Page.deleted_at.is_(None))
    if site_id is not None:
        query = query.filter(Page.site_id == site_id)

    result = ValidationResult()
    for page in query.order_by(Page.created_at.asc()).all():
        for ref in find_references_to(page.builder_tree, kind, key):
            result.usages.append(ReferenceUsage.from_reference(ref, page.id))

    if result.usages:
        pages = sorted({u.page_id for u in result.usages})
        result.errors.append(f"{kind} {key} is used on {len(pages)} page(s)")

    return result
