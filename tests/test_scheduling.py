from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_page, make_resource, tree_with
from sitebuilder.application.cms.publish_page import (
    due_page_ids,
    publish_due_pages,
    publish_page,
    publish_scheduled_page,
)
from sitebuilder.domain.exceptions import Forbidden
from sitebuilder.domain.lifecycle.page import SCHEDULED, publish_state
from sitebuilder.extensions import db
from sitebuilder.models import PageRevision

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


def schedule(page, at, **kwargs):
    return publish_page(
        tenant_id=page.tenant_id,
        page_id=page.id,
        actor_id="user-1",
        scheduled_at=at,
        now=NOW,
        **kwargs,
    )


def test_future_publish_is_scheduled_not_published(site):
    page = make_page(site)
    outcome = schedule(page, NOW + timedelta(hours=1))

    assert outcome.scheduled
    assert outcome.revision is None
    assert publish_state(page) == SCHEDULED
    assert page.published_revision_id is None
    assert PageRevision.query.count() == 0


def test_past_schedule_publishes_immediately(site):
    page = make_page(site)
    outcome = schedule(page, NOW - timedelta(minutes=5))

    assert not outcome.scheduled
    assert outcome.revision.version == 1


def test_naive_schedule_is_read_as_utc(site):
    page = make_page(site)
    outcome = schedule(page, datetime(2030, 1, 1, 13, 0))
    assert outcome.scheduled_at == datetime(2030, 1, 1, 13, 0, tzinfo=timezone.utc)


def test_scheduling_can_be_disabled(site):
    page = make_page(site)
    with pytest.raises(Forbidden):
        schedule(page, NOW + timedelta(hours=1), scheduling_enabled=False)


def test_trigger_publishes_due_pages_once(site):
    page = make_page(site)
    schedule(page, NOW + timedelta(hours=1))

    assert publish_due_pages(now=NOW) == []
    assert due_page_ids(NOW + timedelta(hours=2)) == [page.id]

    later = NOW + timedelta(hours=2)
    published = publish_due_pages(now=later)
    assert [r.version for r in published] == [1]

    db.session.refresh(page)
    assert page.scheduled_publish_at is None
    assert page.published_revision_id == published[0].id

    # At-least-once delivery: firing again is a no-op
    assert publish_due_pages(now=later) == []
    assert publish_scheduled_page(page.id, now=later) is None
    assert PageRevision.query.filter_by(page_id=page.id).count() == 1


def test_explicit_publish_supersedes_schedule(site):
    page = make_page(site)
    schedule(page, NOW + timedelta(hours=1))

    publish_page(tenant_id=page.tenant_id, page_id=page.id, actor_id="user-1", now=NOW)
    assert page.scheduled_publish_at is None

    assert publish_scheduled_page(page.id, now=NOW + timedelta(hours=2)) is None
    assert PageRevision.query.filter_by(page_id=page.id).count() == 1


def test_rescheduling_replaces_the_time(site):
    page = make_page(site)
    schedule(page, NOW + timedelta(hours=1))
    schedule(page, NOW + timedelta(hours=3))

    assert publish_due_pages(now=NOW + timedelta(hours=2)) == []
    assert len(publish_due_pages(now=NOW + timedelta(hours=4))) == 1


def test_scheduled_publish_validates_when_it_fires(site, workspace):
    page = make_page(site, tree=tree_with({"id": "img", "type": "Image", "props": {"src": "asset://hero"}}))
    # Scheduling does not validate
    schedule(page, NOW + timedelta(hours=1))

    later = NOW + timedelta(hours=2)
    assert publish_due_pages(now=later) == []

    db.session.refresh(page)
    assert page.scheduled_publish_at is not None
    assert page.published_revision_id is None

    make_resource(workspace, "asset", "hero")
    assert len(publish_due_pages(now=later)) == 1


def test_cli_trigger(app, site):
    page = make_page(site)
    page.scheduled_publish_at = datetime(2000, 1, 1, tzinfo=timezone.utc)
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["publish-scheduled"])

    assert result.exit_code == 0
    assert "Published 1 scheduled page(s)" in result.output
