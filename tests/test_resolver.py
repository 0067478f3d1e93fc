import pytest

from conftest import PLATFORM_HOST, make_page, make_site, make_workspace
from sitebuilder.application.cms.custom_domains import register_domain, verify_domain
from sitebuilder.application.cms.delete_page import delete_page
from sitebuilder.application.cms.publish_page import publish_page
from sitebuilder.extensions import db
from sitebuilder.tenancy.resolver import DOMAIN_PENDING, FOUND, NOT_FOUND, TenantResolver


@pytest.fixture
def resolver(app):
    return TenantResolver(PLATFORM_HOST, ["localhost"])


def publish(page):
    return publish_page(tenant_id=page.tenant_id, page_id=page.id, actor_id="user-1").revision


def add_domain(site, domain, verified=True):
    record = register_domain(
        tenant_id=site.tenant_id,
        site_id=site.id,
        actor_id="user-1",
        domain=domain,
        platform_domain=PLATFORM_HOST,
    )
    if verified:
        verify_domain(tenant_id=site.tenant_id, domain_id=record.id, actor_id="user-1")
    return record


def test_slug_route_finds_homepage_and_pages(site, resolver):
    home = make_page(site, slug="home", is_homepage=True)
    about = make_page(site, slug="about")
    home_revision = publish(home)
    publish(about)

    resolution = resolver.resolve(PLATFORM_HOST, "/s/acme-site")
    assert resolution.status == FOUND
    assert resolution.page.id == home.id
    assert resolution.revision.id == home_revision.id
    assert resolution.workspace.id == site.tenant_id

    assert resolver.resolve(PLATFORM_HOST + ":443", "/s/acme-site/about").page.id == about.id
    assert resolver.resolve("LOCALHOST", "/s/acme-site/about").found


def test_unpublished_site_is_not_found(site, resolver):
    make_page(site, slug="home", is_homepage=True)
    assert resolver.resolve(PLATFORM_HOST, "/s/acme-site").status == NOT_FOUND


def test_page_without_published_revision_is_not_found(site, resolver):
    publish(make_page(site, slug="home", is_homepage=True))
    make_page(site, slug="draft-only")

    assert resolver.resolve(PLATFORM_HOST, "/s/acme-site/draft-only").status == NOT_FOUND
    assert resolver.resolve(PLATFORM_HOST, "/s/acme-site/missing").status == NOT_FOUND


@pytest.mark.parametrize("path", ["/", "/about", "/x/acme-site", "/s/acme-site/a/b"])
def test_malformed_platform_paths(site, resolver, path):
    publish(make_page(site, slug="about", is_homepage=True))
    assert resolver.resolve(PLATFORM_HOST, path).status == NOT_FOUND


def test_custom_domain(site, resolver):
    home = make_page(site, slug="home", is_homepage=True)
    about = make_page(site, slug="about")
    publish(home)
    publish(about)
    add_domain(site, "https://Shop.Example.com/")

    resolution = resolver.resolve("shop.example.com", "/")
    assert resolution.found
    assert resolution.page.id == home.id
    assert resolution.domain == "shop.example.com"

    assert resolver.resolve("www.shop.example.com", "/about").page.id == about.id
    assert resolver.resolve("shop.example.com", "/about/team").status == NOT_FOUND


def test_pending_domain_is_distinct_from_not_found(site, resolver):
    publish(make_page(site, slug="home", is_homepage=True))
    add_domain(site, "pending.example.com", verified=False)

    resolution = resolver.resolve("pending.example.com", "/")
    assert resolution.status == DOMAIN_PENDING
    assert resolution.domain == "pending.example.com"

    assert resolver.resolve("unknown.example.com", "/").status == NOT_FOUND


def test_inactive_workspace_is_not_served(site, resolver, workspace):
    publish(make_page(site, slug="home", is_homepage=True))
    workspace.is_active = False
    db.session.commit()

    assert resolver.resolve(PLATFORM_HOST, "/s/acme-site").status == NOT_FOUND


def test_deleted_page_is_not_served(site, resolver):
    page = make_page(site, slug="about")
    publish(page)
    delete_page(tenant_id=page.tenant_id, page_id=page.id, actor_id="user-1")

    assert resolver.resolve(PLATFORM_HOST, "/s/acme-site/about").status == NOT_FOUND


def test_sites_resolve_to_their_own_tenant(resolver):
    acme = make_workspace(slug="acme")
    globex = make_workspace(slug="globex")
    acme_page = make_page(make_site(acme, slug="acme-site"), slug="home", is_homepage=True)
    globex_page = make_page(make_site(globex, slug="globex-site"), slug="home", is_homepage=True)
    publish(acme_page)
    publish(globex_page)

    assert resolver.resolve(PLATFORM_HOST, "/s/acme-site").workspace.id == acme.id
    assert resolver.resolve(PLATFORM_HOST, "/s/globex-site").workspace.id == globex.id
