# sitebuilder/domain/lifecycle/page.py
from typing import Dict, Set

from sitebuilder.domain.exceptions import InvariantViolation

NEVER_PUBLISHED = "never_published"
PUBLISHED = "published"
DRAFT_AHEAD = "draft_ahead"
SCHEDULED = "scheduled"

# Explicit allowed state transitions
ALLOWED_PAGE_TRANSITIONS: Dict[str, Set[str]] = {
    NEVER_PUBLISHED: {PUBLISHED, SCHEDULED},
    PUBLISHED: {PUBLISHED, DRAFT_AHEAD, SCHEDULED},
    DRAFT_AHEAD: {PUBLISHED, DRAFT_AHEAD, SCHEDULED},
    SCHEDULED: {PUBLISHED, SCHEDULED, DRAFT_AHEAD},
}


def publish_state(page) -> str:
    """
    Derives the publish state from the page's columns.

    A pending schedule wins over everything else; it is cleared by the
    publish that fires it or by an explicit publish that supersedes it.
    """
    if page.scheduled_publish_at is not None:
        return SCHEDULED
    if page.published_revision_id is None:
        return NEVER_PUBLISHED
    if page.is_draft:
        return DRAFT_AHEAD
    return PUBLISHED


def assert_page_transition(*, from_status: str, to_status: str) -> None:
    """
    Guards page lifecycle transitions.
    Single source of truth for status changes.
    """
    allowed = ALLOWED_PAGE_TRANSITIONS.get(from_status, set())

    if to_status not in allowed:
        raise InvariantViolation(
            f"Illegal page transition: {from_status} -> {to_status}"
        )
