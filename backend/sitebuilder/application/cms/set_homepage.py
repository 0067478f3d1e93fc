# sitebuilder/application/cms/set_homepage.py
from sitebuilder.application.cms.queries import get_page, site_pages
from sitebuilder.domain.invariants.page import assert_single_homepage
from sitebuilder.models.page import Page
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.transaction import transactional


def set_homepage(*, tenant_id: str, page_id: str, actor_id: str) -> Page:
    """Flag `page` as its site's homepage, clearing the flag everywhere else."""
    page = get_page(tenant_id=tenant_id, page_id=page_id)

    with transactional():
        others = site_pages(page.site_id).filter(Page.id != page.id, Page.is_homepage.is_(True)).all()
        for other in others:
            other.is_homepage = False
        page.is_homepage = True

        assert_single_homepage(site_pages(page.site_id).all())

        log_action(
            action="page.set_homepage",
            entity_type="page",
            entity_id=page.id,
            payload={"previous": [o.id for o in others], "actor_id": actor_id},
        )

    return page
