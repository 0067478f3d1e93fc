# sitebuilder/tenancy/resolver.py
"""
TenantResolver

Maps (host, path) to the workspace, site, page and published revision
that should answer a public request.

Platform and preview hosts route by path: /s/<site-slug>[/<page-slug>].
Any other host is looked up as a custom domain and the path is the page
slug. Nothing that is not published is ever resolvable.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sitebuilder.models.custom_domain import CustomDomain
from sitebuilder.models.page import Page
from sitebuilder.models.page_revision import PageRevision
from sitebuilder.models.site import Site
from sitebuilder.models.workspace import Workspace
from sitebuilder.utils.domains import normalize_host

logger = logging.getLogger(__name__)

FOUND = "found"
NOT_FOUND = "not_found"
DOMAIN_PENDING = "domain_pending"

SLUG_PREFIX = "s"


@dataclass
class Resolution:
    status: str
    workspace: Optional[Workspace] = None
    site: Optional[Site] = None
    page: Optional[Page] = None
    revision: Optional[PageRevision] = None
    domain: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status == FOUND

    @classmethod
    def not_found(cls) -> "Resolution":
        return cls(status=NOT_FOUND)


def _segments(path: Optional[str]) -> List[str]:
    return [s for s in (path or "").split("/") if s]


class TenantResolver:
    def __init__(self, platform_domain: str, preview_hosts: Iterable[str] = ()):
        self.platform_domain = normalize_host(platform_domain)
        self.preview_hosts = {normalize_host(h) for h in preview_hosts if h}

    @classmethod
    def from_config(cls, config) -> "TenantResolver":
        return cls(config["PLATFORM_DOMAIN"], config.get("PREVIEW_HOSTS", ()))

    def is_platform_host(self, host: str) -> bool:
        host = normalize_host(host)
        return host in (self.platform_domain, "www." + self.platform_domain) or host in self.preview_hosts

    def resolve(self, host: Optional[str], path: Optional[str]) -> Resolution:
        host = normalize_host(host)
        segments = _segments(path)

        if self.is_platform_host(host):
            return self._resolve_by_slug(segments)
        return self._resolve_by_domain(host, segments)

    def _resolve_by_slug(self, segments: List[str]) -> Resolution:
        if len(segments) not in (2, 3) or segments[0] != SLUG_PREFIX:
            return Resolution.not_found()

        site = Site.query.filter_by(slug=segments[1]).first()
        if site is None:
            return Resolution.not_found()

        page_slug = segments[2] if len(segments) == 3 else None
        return self._resolve_in_site(site, page_slug)

    def _resolve_by_domain(self, host: str, segments: List[str]) -> Resolution:
        if not host or len(segments) > 1:
            return Resolution.not_found()

        record = CustomDomain.query.filter_by(domain=host).first()
        if record is None and host.startswith("www."):
            record = CustomDomain.query.filter_by(domain=host[len("www."):]).first()
        if record is None:
            return Resolution.not_found()

        if not record.is_verified:
            logger.info("Request for unverified domain %s", record.domain)
            return Resolution(status=DOMAIN_PENDING, domain=record.domain)

        page_slug = segments[0] if segments else None
        resolution = self._resolve_in_site(record.site, page_slug)
        resolution.domain = record.domain
        return resolution

    def _resolve_in_site(self, site: Site, page_slug: Optional[str]) -> Resolution:
        if not site.is_published:
            return Resolution.not_found()

        workspace = site.workspace
        if workspace is None or not workspace.is_active:
            return Resolution.not_found()

        query = Page.query.filter(Page.site_id == site.id, Page.deleted_at.is_(None))
        if page_slug is None:
            page = query.filter(Page.is_homepage.is_(True)).first()
        else:
            page = query.filter(Page.slug == page_slug).first()

        if page is None:
            return Resolution.not_found()

        # The pointer is read exactly once per request.
        revision = page.published_revision
        if revision is None:
            return Resolution.not_found()

        return Resolution(status=FOUND, workspace=workspace, site=site, page=page, revision=revision)
