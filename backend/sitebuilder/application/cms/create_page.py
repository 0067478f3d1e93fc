# sitebuilder/application/cms/create_page.py
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

from sitebuilder.application.cms.queries import get_site, site_pages
from sitebuilder.builder.tree import skeleton_tree
from sitebuilder.domain.exceptions import Conflict
from sitebuilder.domain.invariants.page import RESERVED_PAGE_SLUGS, assert_slug
from sitebuilder.domain.invariants.tree import assert_tree
from sitebuilder.extensions import db
from sitebuilder.models.page import Page
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.transaction import transactional


def create_page(
    *,
    tenant_id: str,
    site_id: str,
    actor_id: str,
    name: str,
    slug: str,
    builder_tree: Optional[Dict[str, Any]] = None,
    is_homepage: bool = False,
) -> Page:
    """
    Create a draft page.

    New pages start from the skeleton tree (one empty root Section) unless
    a tree is supplied. The first page of a site becomes its homepage.

    Edge cases handled:
    - Duplicate slug per site
    - Malformed supplied tree
    """
    site = get_site(tenant_id=tenant_id, site_id=site_id)
    assert_slug(slug, reserved=RESERVED_PAGE_SLUGS)

    tree = assert_tree(builder_tree) if builder_tree is not None else skeleton_tree()
    first_page = site_pages(site.id).first() is None

    page = Page()
    page.tenant_id = tenant_id
    page.site_id = site.id
    page.name = name
    page.slug = slug
    page.builder_tree = tree
    page.is_draft = True
    page.is_homepage = first_page or is_homepage

    try:
        with transactional():
            if page.is_homepage and not first_page:
                for other in site_pages(site.id).filter(Page.is_homepage.is_(True)).all():
                    other.is_homepage = False

            db.session.add(page)
            db.session.flush()  # ensures page.id is available

            log_action(
                action="page.create",
                entity_type="page",
                entity_id=page.id,
                payload={"slug": page.slug, "site_id": site.id, "actor_id": actor_id},
            )
    except IntegrityError as exc:
        # Unique (site_id, slug)
        raise Conflict("A page with this slug already exists") from exc

    return page
