import pytest
from flask_jwt_extended import create_access_token

from sitebuilder import create_app
from sitebuilder.extensions import db
from sitebuilder.models import Page, Resource, Site, Workspace

PLATFORM_HOST = "builder.test"


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_workspace(slug="acme", **kwargs):
    workspace = Workspace(name=slug.title(), slug=slug, **kwargs)
    db.session.add(workspace)
    db.session.commit()
    return workspace


def make_site(workspace, slug="acme-site", **kwargs):
    site = Site(tenant_id=workspace.id, name=slug, slug=slug, **kwargs)
    db.session.add(site)
    db.session.commit()
    return site


def make_page(site, slug="home", tree=None, **kwargs):
    page = Page(
        tenant_id=site.tenant_id,
        site_id=site.id,
        name=slug.title(),
        slug=slug,
        builder_tree=tree if tree is not None else {"version": 1, "root": {"id": "root", "type": "Section"}},
        **kwargs,
    )
    db.session.add(page)
    db.session.commit()
    return page


def make_resource(workspace, kind, key, **kwargs):
    resource = Resource(tenant_id=workspace.id, kind=kind, key=key, **kwargs)
    db.session.add(resource)
    db.session.commit()
    return resource


def tree_with(*children, root_type="Section"):
    return {
        "version": 1,
        "root": {
            "id": "root",
            "type": root_type,
            "props": {},
            "style": {"base": {}},
            "actions": [],
            "children": list(children),
        },
    }


@pytest.fixture
def workspace(app):
    return make_workspace()


@pytest.fixture
def site(workspace):
    return make_site(workspace)


def auth_headers(workspace, role="editor", user_id="user-1"):
    token = create_access_token(
        identity=user_id,
        additional_claims={"tenant_id": workspace.id, "role": role},
    )
    return {
        "Authorization": f"Bearer {token}",
        "X-Tenant-ID": workspace.id,
    }


@pytest.fixture
def headers(workspace):
    return auth_headers(workspace)
