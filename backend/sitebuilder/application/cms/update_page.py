# sitebuilder/application/cms/update_page.py
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError

from sitebuilder.application.cms.queries import get_page
from sitebuilder.domain.exceptions import BadRequest, Conflict
from sitebuilder.domain.invariants.page import RESERVED_PAGE_SLUGS, assert_slug
from sitebuilder.models.page import Page
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.transaction import transactional

ALLOWED_UPDATE_FIELDS = {"name", "slug", "meta_title", "meta_description"}


def update_page(
    *,
    tenant_id: str,
    page_id: str,
    actor_id: str,
    data: Dict[str, Any],
) -> Page:
    """
    Update page metadata. The tree, the homepage flag and the publish
    pointer have their own use cases.

    Design rules:
    - Only whitelisted fields are mutable
    - No silent no-op updates
    """
    page = get_page(tenant_id=tenant_id, page_id=page_id)

    if "slug" in data:
        assert_slug(data["slug"], reserved=RESERVED_PAGE_SLUGS)

    changed_fields = [
        field for field in sorted(ALLOWED_UPDATE_FIELDS)
        if field in data and getattr(page, field) != data[field]
    ]
    if not changed_fields:
        # Explicitly fail instead of silently succeeding
        raise BadRequest("No valid fields provided for update")

    try:
        with transactional():
            for field in changed_fields:
                setattr(page, field, data[field])

            log_action(
                action="page.update",
                entity_type="page",
                entity_id=page.id,
                payload={"fields": changed_fields, "actor_id": actor_id},
            )
    except IntegrityError as exc:
        raise Conflict("A page with this slug already exists") from exc

    return page
