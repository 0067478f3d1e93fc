# sitebuilder/application/cms/publish_page.py
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from sitebuilder.application.cms.queries import get_page
from sitebuilder.application.cms.validate_page import validate_page_tree
from sitebuilder.domain.exceptions import Forbidden, RetryableConflict, ValidationFailed
from sitebuilder.domain.lifecycle.page import PUBLISHED, SCHEDULED, assert_page_transition, publish_state
from sitebuilder.extensions import db
from sitebuilder.models.page import Page
from sitebuilder.models.page_revision import PageRevision
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.timeutils import normalize_ts, utc_now
from sitebuilder.utils.transaction import transactional
from sitebuilder.utils.versioning import next_version, snapshot_tree

logger = logging.getLogger(__name__)

SKIP_VALIDATION_HINT = "Retry with ?skipValidation=true to publish anyway"


@dataclass
class PublishOutcome:
    page: Page
    revision: Optional[PageRevision] = None
    scheduled_at: Optional[datetime] = None

    @property
    def scheduled(self) -> bool:
        return self.revision is None and self.scheduled_at is not None


def _publish_locked_page(
    page: Page,
    *,
    actor_id: Optional[str],
    comment: Optional[str],
    skip_validation: bool,
    now: datetime,
) -> PageRevision:
    """
    validate -> snapshot -> repoint. Caller holds the page row lock and
    owns the transaction; raising here leaves nothing behind.
    """
    if not skip_validation:
        result = validate_page_tree(page)
        if not result.valid:
            raise ValidationFailed(result, hint=SKIP_VALIDATION_HINT)

    assert_page_transition(from_status=publish_state(page), to_status=PUBLISHED)

    revision = PageRevision()
    revision.tenant_id = page.tenant_id
    revision.page_id = page.id
    revision.version = next_version(page.id)
    revision.builder_tree = snapshot_tree(page)
    revision.comment = comment
    revision.created_by = actor_id

    db.session.add(revision)
    db.session.flush()  # ensures revision.id is available

    page.published_revision_id = revision.id
    page.is_draft = False
    page.scheduled_publish_at = None

    site = page.site
    if not site.is_published:
        site.is_published = True
        site.published_at = now

    log_action(
        action="page.publish",
        entity_type="page",
        entity_id=page.id,
        payload={
            "version": revision.version,
            "revision_id": revision.id,
            "skip_validation": skip_validation,
        },
    )
    return revision


def publish_page(
    *,
    tenant_id: str,
    page_id: str,
    actor_id: Optional[str],
    comment: Optional[str] = None,
    scheduled_at: Optional[datetime] = None,
    skip_validation: bool = False,
    scheduling_enabled: bool = True,
    now: Optional[datetime] = None,
) -> PublishOutcome:
    """
    Publishes a page now, or records a schedule when `scheduled_at` is in
    the future.

    Responsibilities:
    - transactional boundary and page row lock
    - reference validation unless explicitly skipped
    - immutable revision creation with the next per-page version
    - repointing the published revision
    """
    now = normalize_ts(now) or utc_now()
    scheduled_at = normalize_ts(scheduled_at)

    if scheduled_at is not None and scheduled_at > now:
        if not scheduling_enabled:
            raise Forbidden("Scheduled publishing is not available on this plan")
        return _schedule(tenant_id=tenant_id, page_id=page_id, scheduled_at=scheduled_at)

    try:
        with transactional():
            page = get_page(tenant_id=tenant_id, page_id=page_id, for_update=True)
            revision = _publish_locked_page(
                page,
                actor_id=actor_id,
                comment=comment,
                skip_validation=skip_validation,
                now=now,
            )
    except (IntegrityError, OperationalError) as exc:
        # Lost the (page_id, version) race or the lock; nothing was written.
        raise RetryableConflict("Concurrent publish in progress, retry") from exc

    return PublishOutcome(page=page, revision=revision)


def _schedule(*, tenant_id: str, page_id: str, scheduled_at: datetime) -> PublishOutcome:
    with transactional():
        page = get_page(tenant_id=tenant_id, page_id=page_id, for_update=True)
        assert_page_transition(from_status=publish_state(page), to_status=SCHEDULED)
        page.scheduled_publish_at = scheduled_at

        log_action(
            action="page.schedule",
            entity_type="page",
            entity_id=page.id,
            payload={"scheduled_at": scheduled_at.isoformat()},
        )

    return PublishOutcome(page=page, scheduled_at=scheduled_at)


# ------------------------
# Scheduled trigger
# ------------------------

def publish_scheduled_page(page_id: str, *, now: Optional[datetime] = None) -> Optional[PageRevision]:
    """
    Fire one due schedule. Safe to call any number of times: once the
    schedule is cleared (by this call or by an explicit publish) it is a
    no-op returning None.

    A page whose draft fails validation keeps its schedule and is retried
    on the next trigger.
    """
    now = normalize_ts(now) or utc_now()

    try:
        with transactional():
            page = db.session.execute(
                select(Page)
                .where(Page.id == page_id, Page.deleted_at.is_(None))
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()

            due_at = normalize_ts(page.scheduled_publish_at) if page else None
            if due_at is None or due_at > now:
                return None

            return _publish_locked_page(
                page,
                actor_id=None,
                comment=f"Scheduled publish ({due_at.isoformat()})",
                skip_validation=False,
                now=now,
            )
    except ValidationFailed as exc:
        logger.warning("Scheduled publish of page %s blocked: %s", page_id, "; ".join(exc.result.errors))
        return None
    except (IntegrityError, OperationalError) as exc:
        raise RetryableConflict("Concurrent publish in progress, retry") from exc


def due_page_ids(now: datetime) -> List[str]:
    return list(
        db.session.execute(
            select(Page.id)
            .where(
                Page.scheduled_publish_at.is_not(None),
                Page.scheduled_publish_at <= now,
                Page.deleted_at.is_(None),
            )
            .order_by(Page.scheduled_publish_at.asc())
        ).scalars()
    )


def publish_due_pages(now: Optional[datetime] = None) -> List[PageRevision]:
    """Entry point for the periodic trigger (`flask publish-scheduled`)."""
    now = normalize_ts(now) or utc_now()

    published = []
    for page_id in due_page_ids(now):
        try:
            revision = publish_scheduled_page(page_id, now=now)
        except RetryableConflict:
            logger.info("Scheduled publish of page %s raced with another writer", page_id)
            continue
        if revision is not None:
            published.append(revision)

    logger.info("Scheduled publishing run: %d page(s) published", len(published))
    return published
