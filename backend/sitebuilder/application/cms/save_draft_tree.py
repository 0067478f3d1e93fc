# sitebuilder/application/cms/save_draft_tree.py
from typing import Any

from sitebuilder.application.cms.queries import get_page
from sitebuilder.domain.invariants.tree import assert_tree
from sitebuilder.models.page import Page
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.transaction import transactional
from sitebuilder.utils.versioning import trees_equal


def save_draft_tree(*, tenant_id: str, page_id: str, actor_id: str, builder_tree: Any) -> Page:
    """
    Replace the mutable draft. Publishing state is untouched; only
    `is_draft` is recomputed against the published revision's tree.
    """
    page = get_page(tenant_id=tenant_id, page_id=page_id)
    tree = assert_tree(builder_tree)

    with transactional():
        page.builder_tree = tree

        published = page.published_revision
        page.is_draft = published is None or not trees_equal(published.builder_tree, tree)

        log_action(
            action="page.save_draft",
            entity_type="page",
            entity_id=page.id,
            payload={"is_draft": page.is_draft, "actor_id": actor_id},
        )

    return page
