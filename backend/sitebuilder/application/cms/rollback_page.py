# sitebuilder/application/cms/rollback_page.py
import copy

from sqlalchemy.exc import IntegrityError, OperationalError

from sitebuilder.application.cms.queries import get_page, get_page_revision
from sitebuilder.domain.exceptions import RetryableConflict
from sitebuilder.domain.lifecycle.page import PUBLISHED, assert_page_transition, publish_state
from sitebuilder.models.page import Page
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.transaction import transactional


def rollback_page(
    *,
    tenant_id: str,
    page_id: str,
    revision_id: str,
    actor_id: str,
) -> Page:
    """
    Roll back a page to one of its revisions.

    The revision's frozen tree is copied into the draft and the published
    pointer moves to it. No revision is created, so the version counter is
    untouched. References are not re-validated and a pending schedule is
    left as it is.
    """
    try:
        with transactional():
            page = get_page(tenant_id=tenant_id, page_id=page_id, for_update=True)
            revision = get_page_revision(page, revision_id)

            from_version = page.published_revision.version if page.published_revision else None
            assert_page_transition(from_status=publish_state(page), to_status=PUBLISHED)

            page.builder_tree = copy.deepcopy(revision.builder_tree)
            page.published_revision_id = revision.id
            page.is_draft = False

            log_action(
                action="page.rollback",
                entity_type="page",
                entity_id=page.id,
                payload={
                    "from_version": from_version,
                    "to_version": revision.version,
                    "revision_id": revision.id,
                    "actor_id": actor_id,
                },
            )
    except (IntegrityError, OperationalError) as exc:
        raise RetryableConflict("Concurrent publish in progress, retry") from exc

    return page
