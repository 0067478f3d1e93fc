import pytest

from conftest import make_page, make_resource, make_site, make_workspace, tree_with
import sitebuilder.application.cms.publish_page as publish_module
from sitebuilder.application.cms.publish_page import publish_page
from sitebuilder.application.cms.revisions import list_revisions
from sitebuilder.application.cms.rollback_page import rollback_page
from sitebuilder.application.cms.save_draft_tree import save_draft_tree
from sitebuilder.domain.exceptions import NotFound, RetryableConflict, ValidationFailed
from sitebuilder.domain.lifecycle.page import DRAFT_AHEAD, NEVER_PUBLISHED, PUBLISHED, publish_state
from sitebuilder.extensions import db
from sitebuilder.models import PageRevision


def heading(text, node_id="h"):
    return {"id": node_id, "type": "Heading", "props": {"text": text}}


def publish(page, **kwargs):
    return publish_page(tenant_id=page.tenant_id, page_id=page.id, actor_id="user-1", **kwargs)


def test_first_publish_creates_version_one(site):
    page = make_page(site, tree=tree_with(heading("Hello")))
    assert publish_state(page) == NEVER_PUBLISHED

    outcome = publish(page, comment="launch")

    assert not outcome.scheduled
    assert outcome.revision.version == 1
    assert outcome.revision.comment == "launch"
    assert page.published_revision_id == outcome.revision.id
    assert page.is_draft is False
    assert publish_state(page) == PUBLISHED
    assert site.is_published


def test_revision_is_a_frozen_copy_of_the_draft(site):
    page = make_page(site, tree=tree_with(heading("v1")))
    revision = publish(page).revision

    save_draft_tree(
        tenant_id=page.tenant_id,
        page_id=page.id,
        actor_id="user-1",
        builder_tree=tree_with(heading("v2")),
    )

    db.session.refresh(revision)
    assert revision.builder_tree["root"]["children"][0]["props"]["text"] == "v1"
    assert page.is_draft is True
    assert publish_state(page) == DRAFT_AHEAD


def test_publish_rollback_publish_keeps_versions_monotonic(site):
    page = make_page(site, tree=tree_with(heading("v1")))
    v1 = publish(page).revision

    save_draft_tree(tenant_id=page.tenant_id, page_id=page.id, actor_id="user-1", builder_tree=tree_with(heading("v2")))
    v2 = publish(page).revision
    assert v2.version == 2

    rollback_page(tenant_id=page.tenant_id, page_id=page.id, revision_id=v1.id, actor_id="user-1")
    assert page.published_revision_id == v1.id
    assert page.builder_tree["root"]["children"][0]["props"]["text"] == "v1"
    assert page.is_draft is False
    # Rollback itself does not create a revision
    assert PageRevision.query.filter_by(page_id=page.id).count() == 2

    v3 = publish(page).revision
    assert v3.version == 3
    assert v3.builder_tree == v1.builder_tree

    items, total = list_revisions(tenant_id=page.tenant_id, page_id=page.id)
    assert total == 3
    assert [r.version for r in items] == [3, 2, 1]


def test_publishing_twice_without_changes_still_creates_a_revision(site):
    page = make_page(site)
    assert publish(page).revision.version == 1
    assert publish(page).revision.version == 2


def test_versions_are_per_page(site):
    first = make_page(site, slug="first")
    second = make_page(site, slug="second")

    publish(first)
    publish(first)
    assert publish(second).revision.version == 1


def test_broken_asset_blocks_publish(site, workspace):
    tree = tree_with({"id": "img", "type": "Image", "props": {"src": "asset://logo"}})
    page = make_page(site, tree=tree)

    with pytest.raises(ValidationFailed) as info:
        publish(page)

    payload = info.value.to_dict()
    assert payload["brokenLinks"] == ["root.children[0].props.src"]
    assert payload["usages"][0]["referenceKind"] == "asset"
    assert "skipValidation" in payload["hint"]

    db.session.refresh(page)
    assert page.published_revision_id is None
    assert PageRevision.query.filter_by(page_id=page.id).count() == 0

    make_resource(workspace, "asset", "logo")
    assert publish(page).revision.version == 1


def test_skip_validation_forces_publish(site):
    page = make_page(site, tree=tree_with({"id": "l", "type": "Link", "props": {"href": "/missing"}}))
    outcome = publish(page, skip_validation=True)
    assert outcome.revision.version == 1


def test_deleted_resources_count_as_missing(site, workspace):
    resource = make_resource(workspace, "product", "sku-1")
    resource.soft_delete()
    db.session.commit()

    page = make_page(site, tree=tree_with({"id": "p", "type": "ProductCard", "props": {"productId": "sku-1"}}))
    with pytest.raises(ValidationFailed):
        publish(page)


def test_links_between_pages(site):
    make_page(site, slug="about")
    page = make_page(site, slug="home", tree=tree_with({"id": "l", "type": "Link", "props": {"href": "/about"}}))

    # An unpublished target only warns
    assert publish(page).revision.version == 1


def test_resources_of_other_tenants_do_not_count(site):
    other = make_workspace(slug="globex")
    make_resource(other, "asset", "logo")

    page = make_page(site, tree=tree_with({"id": "img", "type": "Image", "props": {"src": "asset://logo"}}))
    with pytest.raises(ValidationFailed):
        publish(page)


def test_rollback_rejects_revisions_of_other_pages(site):
    first = make_page(site, slug="first")
    second = make_page(site, slug="second")
    foreign = publish(second).revision
    publish(first)

    with pytest.raises(NotFound):
        rollback_page(tenant_id=first.tenant_id, page_id=first.id, revision_id=foreign.id, actor_id="user-1")


def test_pages_of_other_tenants_are_not_found(site):
    page = make_page(site)
    other = make_workspace(slug="globex")

    with pytest.raises(NotFound):
        publish_page(tenant_id=other.id, page_id=page.id, actor_id="user-2")


def test_publish_in_other_site_of_same_tenant(workspace):
    shop = make_site(workspace, slug="shop")
    blog = make_site(workspace, slug="blog")
    make_page(shop, slug="about")

    page = make_page(blog, tree=tree_with({"id": "l", "type": "Link", "props": {"href": "/about"}}))
    with pytest.raises(ValidationFailed):
        publish(page)


def test_losing_the_version_race_is_retryable_and_leaves_no_trace(site, monkeypatch):
    page = make_page(site, tree=tree_with(heading("v1")))
    v1 = publish(page).revision

    save_draft_tree(tenant_id=page.tenant_id, page_id=page.id, actor_id="user-1", builder_tree=tree_with(heading("v2")))
    # Another writer already took this version number
    monkeypatch.setattr(publish_module, "next_version", lambda page_id: 1)

    with pytest.raises(RetryableConflict) as exc_info:
        publish(page)

    assert exc_info.value.to_dict()["retryable"] is True
    assert [r.version for r in PageRevision.query.filter_by(page_id=page.id).all()] == [1]
    assert page.published_revision_id == v1.id
    assert page.builder_tree["root"]["children"][0]["props"]["text"] == "v2"
    assert publish_state(page) == DRAFT_AHEAD
