# sitebuilder/normalizers/page.py
from sitebuilder.domain.lifecycle.page import publish_state
from sitebuilder.utils.timeutils import isoformat


def normalize_page(page, include_tree=True):
    """
    Editor-facing page payload. Field names follow the persisted tree's
    JSON conventions (camelCase) so the editor can use them as-is.
    """
    data = {
        "id": page.id,
        "siteId": page.site_id,
        "workspaceId": page.tenant_id,
        "name": page.name,
        "slug": page.slug,
        "isHomepage": bool(page.is_homepage),
        "isDraft": bool(page.is_draft),
        "publishState": publish_state(page),
        "publishedRevisionId": page.published_revision_id,
        "scheduledPublishAt": isoformat(page.scheduled_publish_at),
        "metaTitle": page.meta_title,
        "metaDescription": page.meta_description,
        "createdAt": isoformat(page.created_at),
        "updatedAt": isoformat(page.updated_at),
    }

    if include_tree:
        data["builderTree"] = page.builder_tree

    return data


def normalize_public_page(page):
    """What an anonymous visitor may see: no draft, no schedule."""
    return {
        "id": page.id,
        "name": page.name,
        "slug": page.slug,
        "isHomepage": bool(page.is_homepage),
        "metaTitle": page.meta_title,
        "metaDescription": page.meta_description,
    }
