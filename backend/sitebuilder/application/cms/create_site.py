# sitebuilder/application/cms/create_site.py
from sqlalchemy.exc import IntegrityError

from sitebuilder.domain.exceptions import Conflict
from sitebuilder.domain.invariants.page import assert_slug
from sitebuilder.extensions import db
from sitebuilder.models.site import Site
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.transaction import transactional


def create_site(*, tenant_id: str, actor_id: str, name: str, slug: str) -> Site:
    """Create an unpublished site. Slugs are unique platform-wide (/s/<slug>)."""
    assert_slug(slug)

    site = Site()
    site.tenant_id = tenant_id
    site.name = name
    site.slug = slug
    site.is_published = False

    try:
        with transactional():
            db.session.add(site)
            db.session.flush()

            log_action(
                action="site.create",
                entity_type="site",
                entity_id=site.id,
                payload={"slug": slug, "actor_id": actor_id},
            )
    except IntegrityError as exc:
        raise Conflict("A site with this slug already exists") from exc

    return site
