# sitebuilder/application/cms/delete_page.py
from sitebuilder.application.cms.queries import get_page
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.transaction import transactional


def delete_page(*, tenant_id: str, page_id: str, actor_id: str) -> None:
    """
    Soft-delete a page. It disappears from editors, public routing and
    link validation. Its revisions stay until the row is purged and then
    go with it by cascade.
    """
    page = get_page(tenant_id=tenant_id, page_id=page_id)

    with transactional():
        page.soft_delete()
        # Frees the slug for reuse under the (site_id, slug) constraint
        page.slug = f"{page.slug}~deleted-{page.id[:8]}"
        page.is_homepage = False
        page.scheduled_publish_at = None

        log_action(
            action="page.delete",
            entity_type="page",
            entity_id=page.id,
            payload={"deleted_by": actor_id},
        )
