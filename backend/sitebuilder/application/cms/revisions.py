# sitebuilder/application/cms/revisions.py
from typing import List, Tuple

from sitebuilder.application.cms.queries import get_page, get_page_revision
from sitebuilder.models.page_revision import PageRevision
from sitebuilder.utils.pagination import paginate


def list_revisions(*, tenant_id: str, page_id: str, page: int = 1, per_page: int = 20) -> Tuple[List[PageRevision], int]:
    """Newest first."""
    owner = get_page(tenant_id=tenant_id, page_id=page_id)
    query = PageRevision.query.filter_by(page_id=owner.id).order_by(PageRevision.version.desc())
    return paginate(query, page=page, per_page=per_page)


def get_revision(*, tenant_id: str, page_id: str, revision_id: str) -> PageRevision:
    owner = get_page(tenant_id=tenant_id, page_id=page_id)
    return get_page_revision(owner, revision_id)
