# sitebuilder/application/cms/queries.py
from sqlalchemy import select

from sitebuilder.domain.exceptions import NotFound
from sitebuilder.extensions import db
from sitebuilder.models.custom_domain import CustomDomain
from sitebuilder.models.page import Page
from sitebuilder.models.page_revision import PageRevision
from sitebuilder.models.site import Site


def get_site(*, tenant_id: str, site_id: str) -> Site:
    site = Site.query.filter_by(id=site_id, tenant_id=tenant_id).first()
    if not site:
        raise NotFound("Site not found")
    return site


def get_domain(*, tenant_id: str, domain_id: str) -> CustomDomain:
    domain = CustomDomain.query.filter_by(id=domain_id, tenant_id=tenant_id).first()
    if not domain:
        raise NotFound("Domain not found")
    return domain


def get_page(*, tenant_id: str, page_id: str, for_update: bool = False) -> Page:
    """Live (not soft-deleted) page of the tenant, optionally row-locked."""
    stmt = select(Page).where(
        Page.id == page_id,
        Page.tenant_id == tenant_id,
        Page.deleted_at.is_(None),
    )
    if for_update:
        # Re-read the row under the lock, not the identity map copy
        stmt = stmt.with_for_update().execution_options(populate_existing=True)

    page = db.session.execute(stmt).scalar_one_or_none()
    if not page:
        raise NotFound("Page not found")
    return page


def site_pages(site_id: str):
    return (
        Page.query
        .filter(Page.site_id == site_id, Page.deleted_at.is_(None))
        .order_by(Page.created_at.asc(), Page.id.asc())
    )


def get_page_revision(page: Page, revision_id: str) -> PageRevision:
    """A revision only counts as found if it belongs to `page`."""
    revision = PageRevision.query.filter_by(id=revision_id, page_id=page.id).first()
    if not revision:
        raise NotFound("Revision not found for this page")
    return revision
