# sitebuilder/utils/versioning.py
import copy

from sqlalchemy import func, select

from sitebuilder.extensions import db


def snapshot_tree(page):
    """Frozen copy of the page's draft tree for a new revision."""
    return copy.deepcopy(page.builder_tree)


def trees_equal(left, right) -> bool:
    return (left or None) == (right or None)


def next_version(page_id):
    """
    max(version) + 1 for the page; 1 for the first revision.

    Must be called while holding the page row lock so two publishers
    cannot compute the same number. The unique (page_id, version)
    constraint is the backstop.
    """
    from sitebuilder.models.page_revision import PageRevision

    last = db.session.execute(
        select(func.max(PageRevision.version)).where(PageRevision.page_id == page_id)
    ).scalar()
    return (last or 0) + 1
