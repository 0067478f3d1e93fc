# sitebuilder/domain/invariants/page.py
import re

from sitebuilder.domain.exceptions import InvariantViolation

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

RESERVED_PAGE_SLUGS = {"s", "api", "swagger", "openapi"}


def assert_slug(slug: str, *, reserved=frozenset()) -> None:
    if not isinstance(slug, str) or not SLUG_PATTERN.match(slug):
        raise InvariantViolation(f"Invalid slug: {slug!r}")
    if slug in reserved:
        raise InvariantViolation(f"Slug is reserved: {slug}")


def assert_single_homepage(pages) -> None:
    """At most one live page per site carries the homepage flag."""
    homepages = [p.id for p in pages if p.is_homepage and not p.is_deleted]
    if len(homepages) > 1:
        raise InvariantViolation(f"Site has more than one homepage: {', '.join(homepages)}")