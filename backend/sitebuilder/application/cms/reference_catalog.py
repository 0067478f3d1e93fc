# sitebuilder/application/cms/reference_catalog.py
from typing import Dict, Optional

from sqlalchemy import or_

from sitebuilder.builder.validator import PAGE_PUBLISHED, PAGE_UNPUBLISHED, ReferenceCatalog
from sitebuilder.models.page import Page
from sitebuilder.models.resource import Resource


class SqlReferenceCatalog(ReferenceCatalog):
    """
    Catalog over one site's pages and one workspace's resource index.

    Page paths are loaded once per validation run; resource lookups are
    memoized per (kind, key).
    """

    def __init__(self, *, tenant_id: str, site_id: str):
        self.tenant_id = tenant_id
        self.site_id = site_id
        self._pages: Optional[Dict[str, str]] = None
        self._resources: Dict[tuple, bool] = {}

    def _load_pages(self) -> Dict[str, str]:
        pages = (
            Page.query
            .filter(
                Page.tenant_id == self.tenant_id,
                Page.site_id == self.site_id,
                Page.deleted_at.is_(None),
            )
            .all()
        )

        paths = {}
        for page in pages:
            status = PAGE_PUBLISHED if page.published_revision_id else PAGE_UNPUBLISHED
            paths[f"/{page.slug}"] = status
            if page.is_homepage:
                paths["/"] = status
        return paths

    def page_status(self, path: str) -> Optional[str]:
        if self._pages is None:
            self._pages = self._load_pages()
        return self._pages.get(path)

    def resource_exists(self, kind: str, key: str) -> bool:
        cache_key = (kind, key)
        if cache_key not in self._resources:
            self._resources[cache_key] = (
                Resource.query
                .filter(
                    Resource.tenant_id == self.tenant_id,
                    Resource.kind == kind,
                    Resource.deleted_at.is_(None),
                    or_(Resource.key == key, Resource.url == key),
                )
                .first()
                is not None
            )
        return self._resources[cache_key]
